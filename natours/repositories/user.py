"""
User repository: profiles stored in the users collection
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from motor.motor_asyncio import AsyncIOMotorCollection

from natours.core.errors import ErrorResponse
from natours.core.logger import logger
from natours.repositories.review import to_object_id
from natours.schemas.user import DEFAULT_PHOTO, UserCreate, UserResponse
from natours.utils.query_features import ListQuery

# Deactivated users are invisible to every read
ACTIVE = {"active": {"$ne": False}}

FILTERABLE_FIELDS = {
    "role": str,
    "name": str,
    "email": str,
}


class UserRepository:
    """Repository for user data access operations"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    @staticmethod
    def _doc_to_response(doc: dict) -> Optional[UserResponse]:
        if not doc:
            return None
        return UserResponse(
            id=str(doc["_id"]),
            name=doc["name"],
            email=doc["email"],
            photo=doc.get("photo") or DEFAULT_PHOTO,
            role=doc.get("role", "user"),
        )

    @staticmethod
    def _duplicate_email(email: Optional[str]) -> ErrorResponse:
        return ErrorResponse(
            f"Duplicate field value: {email}. Please use another value!",
            status_code=400,
        )

    async def create(self, user_data: UserCreate) -> UserResponse:
        doc = user_data.model_dump()
        doc.update({"active": True, "created_at": datetime.now(timezone.utc)})
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise self._duplicate_email(user_data.email)
        except PyMongoError as e:
            logger.error("MongoDB error creating user", error=e)
            raise ErrorResponse("Database error during user creation", status_code=503)

        doc["_id"] = result.inserted_id
        return self._doc_to_response(doc)

    async def get_by_id(self, user_id: str) -> Optional[UserResponse]:
        """Get an active user by ID"""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one({"_id": oid, **ACTIVE})
        except PyMongoError as e:
            logger.error("MongoDB error getting user", error=e)
            raise ErrorResponse("Database error during user retrieval", status_code=503)
        return self._doc_to_response(doc)

    async def list_users(self, query: ListQuery) -> List[UserResponse]:
        try:
            cursor = self.collection.find({**query.filter, **ACTIVE})
            cursor = cursor.sort(query.sort).skip(query.skip).limit(query.limit)
            docs = await cursor.to_list(length=query.limit)
        except PyMongoError as e:
            logger.error("MongoDB error listing users", error=e)
            raise ErrorResponse("Database error during user listing", status_code=503)
        return [self._doc_to_response(doc) for doc in docs]

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserResponse]:
        """Update an active user; returns None when there is no such user"""
        oid = to_object_id(user_id)
        if oid is None:
            return None
        if not changes:
            return await self.get_by_id(user_id)

        changes = {**changes, "updated_at": datetime.now(timezone.utc)}
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": oid, **ACTIVE},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise self._duplicate_email(changes.get("email"))
        except PyMongoError as e:
            logger.error("MongoDB error updating user", error=e)
            raise ErrorResponse("Database error during user update", status_code=503)
        return self._doc_to_response(doc)

    async def deactivate(self, user_id: str) -> bool:
        """Soft delete: the document stays, flagged inactive"""
        oid = to_object_id(user_id)
        if oid is None:
            return False
        try:
            result = await self.collection.update_one(
                {"_id": oid, **ACTIVE},
                {"$set": {"active": False, "updated_at": datetime.now(timezone.utc)}},
            )
        except PyMongoError as e:
            logger.error("MongoDB error deactivating user", error=e)
            raise ErrorResponse("Database error during user deactivation", status_code=503)
        return result.matched_count > 0

    async def delete(self, user_id: str) -> bool:
        oid = to_object_id(user_id)
        if oid is None:
            return False
        try:
            result = await self.collection.delete_one({"_id": oid})
        except PyMongoError as e:
            logger.error("MongoDB error deleting user", error=e)
            raise ErrorResponse("Database error during user deletion", status_code=503)
        return result.deleted_count > 0
