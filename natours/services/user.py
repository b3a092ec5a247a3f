"""
User service: the current user's own profile and admin user management
"""

from typing import List, Mapping

from natours.core.errors import ErrorResponse
from natours.core.logger import logger
from natours.models.user import User
from natours.repositories.user import FILTERABLE_FIELDS, UserRepository
from natours.schemas.user import UserCreate, UserResponse, UserUpdate, UserUpdateMe
from natours.utils.query_features import build_list_query

USER_NOT_FOUND = "No user found with that ID"


class UserService:
    """Service layer for user business logic"""

    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def list_users(self, params: Mapping[str, str]) -> List[UserResponse]:
        query = build_list_query(params, FILTERABLE_FIELDS)
        return await self.repository.list_users(query)

    async def get_user(self, user_id: str) -> UserResponse:
        user = await self.repository.get_by_id(user_id)
        if not user:
            raise ErrorResponse(USER_NOT_FOUND, status_code=404)
        return user

    async def get_me(self, current_user: User) -> UserResponse:
        return await self.get_user(current_user.id)

    async def update_me(self, current_user: User, data: UserUpdateMe) -> UserResponse:
        """Change the caller's name and/or email; nothing else is writable here"""
        if data.password is not None or data.password_confirm is not None:
            raise ErrorResponse(
                "This route is not for password updates. Please use /updateMyPassword.",
                status_code=400,
            )

        changes = data.model_dump(include={"name", "email"}, exclude_none=True)
        user = await self.repository.update(current_user.id, changes)
        if not user:
            raise ErrorResponse(USER_NOT_FOUND, status_code=404)

        logger.info(
            f"User {current_user.id} updated their profile",
            user_id=current_user.id,
            metadata={"event": "user_updated_self", "fields": sorted(changes)}
        )
        return user

    async def delete_me(self, current_user: User) -> None:
        if not await self.repository.deactivate(current_user.id):
            raise ErrorResponse(USER_NOT_FOUND, status_code=404)

        logger.info(
            f"User {current_user.id} deactivated their account",
            user_id=current_user.id,
            metadata={"event": "user_deactivated"}
        )

    async def create_user(self, user_data: UserCreate, created_by: str) -> UserResponse:
        user = await self.repository.create(user_data)
        logger.info(
            f"Created user {user.id}",
            user_id=created_by,
            metadata={"event": "user_created", "userId": user.id, "role": user.role}
        )
        return user

    async def update_user(self, user_id: str, user_data: UserUpdate, updated_by: str) -> UserResponse:
        changes = user_data.model_dump(exclude_unset=True, exclude_none=True)
        user = await self.repository.update(user_id, changes)
        if not user:
            raise ErrorResponse(USER_NOT_FOUND, status_code=404)

        logger.info(
            f"Updated user {user_id}",
            user_id=updated_by,
            metadata={"event": "user_updated", "userId": user_id, "fields": sorted(changes)}
        )
        return user

    async def delete_user(self, user_id: str, deleted_by: str) -> None:
        if not await self.repository.delete(user_id):
            raise ErrorResponse(USER_NOT_FOUND, status_code=404)

        logger.info(
            f"Deleted user {user_id}",
            user_id=deleted_by,
            metadata={"event": "user_deleted", "userId": user_id}
        )
