"""
API schemas for User endpoints
"""

from typing import Optional
from pydantic import BaseModel, EmailStr

from natours.validators import UserValidatorMixin

DEFAULT_PHOTO = "default.jpg"


class UserCreate(UserValidatorMixin, BaseModel):
    """Schema for an admin creating a user profile"""
    name: str
    email: EmailStr
    role: str = "user"
    photo: str = DEFAULT_PHOTO


class UserUpdate(UserValidatorMixin, BaseModel):
    """Schema for an admin updating any user"""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    photo: Optional[str] = None


class UserUpdateMe(UserValidatorMixin, BaseModel):
    """
    Schema for users updating their own profile.
    Only name and email change here; password fields are accepted so the
    request can be rejected with a pointer to the password route.
    """
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    password_confirm: Optional[str] = None


class UserResponse(BaseModel):
    """Public fields of a user"""
    id: str
    name: str
    email: EmailStr
    photo: str = DEFAULT_PHOTO
    role: str = "user"
