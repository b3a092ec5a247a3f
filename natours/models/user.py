"""
User model for authentication
"""

from typing import Optional
from pydantic import BaseModel, EmailStr


ROLES = ("user", "guide", "lead-guide", "admin")


class User(BaseModel):
    """User model from JWT token payload"""

    id: str
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    photo: Optional[str] = None
    role: str = "user"

    def is_admin(self) -> bool:
        return self.role == "admin"

    def has_role(self, *roles: str) -> bool:
        """Check if user has one of the given roles"""
        return self.role in roles
