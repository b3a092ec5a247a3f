"""
Authentication dependencies for FastAPI
Validates the JWT issued by the auth flow and restricts routes by role
"""

from typing import Optional
import jwt
from fastapi import Cookie, Depends, Header, HTTPException, status

from natours.core.config import config
from natours.core.logger import logger
from natours.models.user import User


class AuthError(Exception):
    """Custom authentication error"""
    def __init__(self, message: str, status_code: int = 401):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token

    Raises:
        AuthError: If token is invalid or expired
    """
    try:
        return jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthError("Your token has expired! Please log in again.")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token: {str(e)}")
        raise AuthError("Invalid token. Please log in again!")


def extract_token(authorization: Optional[str], cookie_token: Optional[str]) -> Optional[str]:
    """Bearer header wins over the jwt cookie"""
    if authorization:
        if not authorization.startswith("Bearer "):
            raise AuthError("Invalid authorization header format. Expected 'Bearer <token>'")
        return authorization.split(" ", 1)[1].strip() or None
    return cookie_token


async def get_current_user(
    authorization: Optional[str] = Header(None),
    jwt_cookie: Optional[str] = Cookie(None, alias="jwt"),
) -> User:
    """
    Dependency to extract and validate current user from JWT token.
    Raises 401 if authentication fails.
    """
    try:
        token = extract_token(authorization, jwt_cookie)
        if not token:
            raise AuthError("You are not logged in! Please log in to get access.")

        payload = decode_jwt(token)
        user_id = payload.get("id") or payload.get("sub")
        if not user_id:
            raise AuthError("Invalid token: Missing user identifier")

        user = User(
            id=str(user_id),
            email=payload.get("email"),
            name=payload.get("name"),
            photo=payload.get("photo"),
            role=payload.get("role", "user"),
        )
    except AuthError as e:
        logger.warning(f"Authentication failed: {e.message}")
        raise HTTPException(
            status_code=e.status_code,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug(f"Authentication successful for user: {user.id}")
    return user


def restrict_to(*roles: str):
    """
    Dependency factory allowing only the given roles.

    Usage:
        @router.delete("/{id}")
        async def delete_item(user: User = Depends(restrict_to("admin"))):
            ...
    """
    async def dependency(user: User = Depends(get_current_user)) -> User:
        if not user.has_role(*roles):
            logger.warning(
                f"Access denied for user: {user.id}",
                user_id=user.id,
                metadata={"event": "role_denied", "role": user.role, "allowed": list(roles)}
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return user

    return dependency
