"""Tests for UserRepository"""
import pytest
from unittest.mock import MagicMock
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from natours.core.errors import ErrorResponse
from natours.repositories.user import ACTIVE, UserRepository
from natours.schemas.user import UserCreate
from natours.utils.query_features import ListQuery
from tests.conftest import USER_ID, make_cursor


@pytest.fixture
def repository(mock_collection):
    return UserRepository(mock_collection)


@pytest.fixture
def user_doc():
    return {
        "_id": ObjectId(USER_ID),
        "name": "Lourdes Browning",
        "email": "loulou@example.com",
        "role": "user",
        "photo": "user-2.jpg",
        "active": True,
    }


class TestReads:

    @pytest.mark.asyncio
    async def test_get_by_id_only_active(self, repository, mock_collection, user_doc):
        mock_collection.find_one.return_value = user_doc

        user = await repository.get_by_id(USER_ID)

        assert user.id == USER_ID
        assert user.email == "loulou@example.com"
        mock_collection.find_one.assert_awaited_once_with({"_id": ObjectId(USER_ID), **ACTIVE})

    @pytest.mark.asyncio
    async def test_get_by_malformed_id(self, repository, mock_collection):
        assert await repository.get_by_id("not-an-id") is None
        mock_collection.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_photo_gets_default(self, repository, mock_collection, user_doc):
        del user_doc["photo"]
        mock_collection.find_one.return_value = user_doc

        user = await repository.get_by_id(USER_ID)

        assert user.photo == "default.jpg"

    @pytest.mark.asyncio
    async def test_list_excludes_inactive(self, repository, mock_collection, user_doc):
        mock_collection.find.return_value = make_cursor([user_doc])

        users = await repository.list_users(ListQuery(filter={"role": "user"}))

        assert [u.id for u in users] == [USER_ID]
        assert mock_collection.find.call_args[0][0] == {"role": "user", **ACTIVE}

    @pytest.mark.asyncio
    async def test_database_error(self, repository, mock_collection):
        mock_collection.find_one.side_effect = ServerSelectionTimeoutError("down")

        with pytest.raises(ErrorResponse) as exc_info:
            await repository.get_by_id(USER_ID)
        assert exc_info.value.status_code == 503


class TestWrites:

    @pytest.mark.asyncio
    async def test_create(self, repository, mock_collection):
        mock_collection.insert_one.return_value = MagicMock(inserted_id=ObjectId(USER_ID))

        user = await repository.create(UserCreate(name="Lourdes Browning", email="LouLou@Example.com"))

        stored = mock_collection.insert_one.call_args[0][0]
        assert stored["active"] is True
        assert stored["role"] == "user"
        assert user.email == "loulou@example.com"

    @pytest.mark.asyncio
    async def test_create_duplicate_email(self, repository, mock_collection):
        mock_collection.insert_one.side_effect = DuplicateKeyError("E11000")

        with pytest.raises(ErrorResponse) as exc_info:
            await repository.create(UserCreate(name="Lourdes Browning", email="loulou@example.com"))
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_update_only_active_users(self, repository, mock_collection, user_doc):
        user_doc["name"] = "Lou Browning"
        mock_collection.find_one_and_update.return_value = user_doc

        user = await repository.update(USER_ID, {"name": "Lou Browning"})

        query, update = mock_collection.find_one_and_update.call_args[0]
        assert query == {"_id": ObjectId(USER_ID), **ACTIVE}
        assert update["$set"]["name"] == "Lou Browning"
        assert "updated_at" in update["$set"]
        assert user.name == "Lou Browning"

    @pytest.mark.asyncio
    async def test_update_without_changes_reads(self, repository, mock_collection, user_doc):
        mock_collection.find_one.return_value = user_doc

        user = await repository.update(USER_ID, {})

        assert user.id == USER_ID
        mock_collection.find_one_and_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_deactivate_is_soft_delete(self, repository, mock_collection):
        mock_collection.update_one.return_value = MagicMock(matched_count=1)

        assert await repository.deactivate(USER_ID) is True

        query, update = mock_collection.update_one.call_args[0]
        assert query == {"_id": ObjectId(USER_ID), **ACTIVE}
        assert update["$set"]["active"] is False
        mock_collection.delete_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_deactivate_missing(self, repository, mock_collection):
        mock_collection.update_one.return_value = MagicMock(matched_count=0)
        assert await repository.deactivate(USER_ID) is False

    @pytest.mark.asyncio
    async def test_delete(self, repository, mock_collection):
        mock_collection.delete_one.return_value = MagicMock(deleted_count=1)

        assert await repository.delete(USER_ID) is True
        mock_collection.delete_one.assert_awaited_once_with({"_id": ObjectId(USER_ID)})
