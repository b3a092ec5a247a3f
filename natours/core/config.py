"""
Core configuration and settings for the Natours Service
Environment variables (and an optional .env file) override every default
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


# Rating shown for a tour that has no reviews. Used both when a tour is
# created and when its last review is removed.
DEFAULT_RATINGS_AVERAGE = 4.5


class Config(BaseSettings):
    """Application configuration with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Service information
    service_name: str = "natours-service"
    service_version: str = "1.0.0"
    api_version: str = "v1"
    environment: str = "development"

    # Server configuration
    port: int = 3000
    host: str = "0.0.0.0"  # nosec B104

    # Database configuration
    mongodb_host: str = "localhost"
    mongodb_port: int = 27017
    mongodb_username: Optional[str] = None
    mongodb_password: Optional[str] = None
    mongodb_database: str = "natours"
    mongodb_auth_source: str = "admin"

    @property
    def mongodb_url(self) -> str:
        """Construct MongoDB connection URL"""
        if self.mongodb_username and self.mongodb_password:
            return (
                f"mongodb://{self.mongodb_username}:{self.mongodb_password}"
                f"@{self.mongodb_host}:{self.mongodb_port}/{self.mongodb_database}"
                f"?authSource={self.mongodb_auth_source}"
            )
        return f"mongodb://{self.mongodb_host}:{self.mongodb_port}/{self.mongodb_database}"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "console"
    log_to_file: bool = False
    log_to_console: bool = True
    log_file_path: str = "logs/natours-service.log"

    # Request tracing
    correlation_id_header: str = "X-Correlation-ID"
    tracing_enabled: bool = False

    # JWT Authentication configuration (verification only)
    jwt_secret: str = "natours-development-jwt-secret-change-me"
    jwt_algorithm: str = "HS256"

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit: str = "100/hour"
    review_rate_limit: str = "5/minute"


# Global config instance
config = Config()
