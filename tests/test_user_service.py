"""Unit tests for UserService against a mocked Motor collection."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from pymongo import DESCENDING, ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from common.utils.exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
)
from app.models.user import LIST_PROJECTION, PUBLIC_PROJECTION
from tests.helpers import ADDRESS, make_cursor


# ─────────────────────────────────────────────────────────────────
# list_users / get_all_users
# ─────────────────────────────────────────────────────────────────


class TestListUsers:
    @pytest.mark.asyncio
    async def test_projects_listing_fields(self, user_service, mock_collection, sample_user_doc):
        mock_collection.find = MagicMock(return_value=make_cursor([sample_user_doc]))

        users = await user_service.list_users()

        mock_collection.find.assert_called_once_with({}, LIST_PROJECTION)
        assert users[0]["id"] == str(sample_user_doc["_id"])
        assert users[0]["publicAddress"] == ADDRESS
        assert users[0]["creationDate"] == "2026-10-19T10:00:00"
        assert "_id" not in users[0]

    @pytest.mark.asyncio
    async def test_empty_collection(self, user_service):
        assert await user_service.list_users() == []


class TestGetAllUsers:
    @pytest.mark.asyncio
    async def test_paginates_and_counts(self, user_service, mock_collection, sample_user_doc):
        cursor = make_cursor([sample_user_doc])
        mock_collection.find = MagicMock(return_value=cursor)
        mock_collection.count_documents = AsyncMock(return_value=41)

        users, total = await user_service.get_all_users(page=3, limit=20)

        mock_collection.find.assert_called_once_with({}, PUBLIC_PROJECTION)
        cursor.sort.assert_called_once_with("creationDate", DESCENDING)
        cursor.skip.assert_called_once_with(40)
        cursor.limit.assert_called_once_with(20)
        assert total == 41
        assert len(users) == 1

    @pytest.mark.asyncio
    async def test_ascending_sort(self, user_service, mock_collection):
        cursor = make_cursor([])
        mock_collection.find = MagicMock(return_value=cursor)
        mock_collection.count_documents = AsyncMock(return_value=0)

        await user_service.get_all_users(sort="nickName")

        cursor.sort.assert_called_once_with("nickName", ASCENDING)

    @pytest.mark.asyncio
    async def test_rejects_unknown_sort_field(self, user_service):
        with pytest.raises(BadRequestException) as exc:
            await user_service.get_all_users(sort="-nonce")
        assert exc.value.status_code == 400


# ─────────────────────────────────────────────────────────────────
# Lookups
# ─────────────────────────────────────────────────────────────────


class TestGetUserById:
    @pytest.mark.asyncio
    async def test_returns_user_without_nonce(self, user_service, mock_collection, sample_user_doc, sample_user_id):
        mock_collection.find_one = AsyncMock(return_value=sample_user_doc)

        user = await user_service.get_user_by_id(sample_user_id)

        mock_collection.find_one.assert_called_once_with(
            {"_id": ObjectId(sample_user_id)}, PUBLIC_PROJECTION
        )
        assert user["id"] == sample_user_id

    @pytest.mark.asyncio
    async def test_missing_user_is_404(self, user_service, mock_collection, sample_user_id):
        mock_collection.find_one = AsyncMock(return_value=None)

        with pytest.raises(NotFoundException):
            await user_service.get_user_by_id(sample_user_id)

    @pytest.mark.asyncio
    async def test_malformed_id_is_404_without_query(self, user_service, mock_collection):
        with pytest.raises(NotFoundException):
            await user_service.get_user_by_id("not-an-object-id")
        mock_collection.find_one.assert_not_called()


class TestGetAddressById:
    @pytest.mark.asyncio
    async def test_resolves_address(self, user_service, mock_collection, sample_user_id):
        mock_collection.find_one = AsyncMock(return_value={"_id": ObjectId(sample_user_id), "publicAddress": ADDRESS})

        assert await user_service.get_address_by_id(sample_user_id) == ADDRESS

    @pytest.mark.asyncio
    async def test_unknown_id(self, user_service, mock_collection, sample_user_id):
        mock_collection.find_one = AsyncMock(return_value=None)

        with pytest.raises(NotFoundException) as exc:
            await user_service.get_address_by_id(sample_user_id)
        assert exc.value.detail["message"] == "No user with such ID"


class TestGetUserByAddress:
    @pytest.mark.asyncio
    async def test_lookup_is_lower_cased(self, user_service, mock_collection, sample_user_doc):
        mock_collection.find_one = AsyncMock(return_value=sample_user_doc)

        user = await user_service.get_user_by_address(ADDRESS.upper())

        mock_collection.find_one.assert_called_once_with(
            {"publicAddress": ADDRESS.upper().lower()}, PUBLIC_PROJECTION
        )
        assert user["publicAddress"] == ADDRESS

    @pytest.mark.asyncio
    async def test_missing_address_is_404(self, user_service, mock_collection):
        mock_collection.find_one = AsyncMock(return_value=None)

        with pytest.raises(NotFoundException) as exc:
            await user_service.get_user_by_address(ADDRESS)
        assert exc.value.status_code == 404


# ─────────────────────────────────────────────────────────────────
# Writes
# ─────────────────────────────────────────────────────────────────


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_inserts_lower_cased_address_and_hides_nonce(self, user_service, mock_collection):
        inserted_id = ObjectId()
        mock_collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=inserted_id))

        user = await user_service.create_user("0xABCDEF0123456789ABCDEF0123456789ABCDEF01")

        doc = mock_collection.insert_one.call_args[0][0]
        assert doc["publicAddress"] == ADDRESS
        assert isinstance(doc["nonce"], int)
        assert doc["ageVerified"] is False

        assert user["id"] == str(inserted_id)
        assert user["publicAddress"] == ADDRESS
        assert "nonce" not in user

    @pytest.mark.asyncio
    async def test_blank_address_is_rejected_before_insert(self, user_service, mock_collection):
        with pytest.raises(BadRequestException) as exc:
            await user_service.create_user("   ")
        assert exc.value.code == "INVALID_ADDRESS"
        mock_collection.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_address_is_conflict(self, user_service, mock_collection):
        mock_collection.insert_one = AsyncMock(side_effect=DuplicateKeyError("E11000 duplicate key"))

        with pytest.raises(ConflictException) as exc:
            await user_service.create_user(ADDRESS)
        assert exc.value.status_code == 409


class TestUpdateByAddress:
    @pytest.mark.asyncio
    async def test_sets_fields_and_returns_after_image(self, user_service, mock_collection, sample_user_doc):
        updated = {**sample_user_doc, "nickName": "vitalik"}
        mock_collection.find_one_and_update = AsyncMock(return_value=updated)

        user = await user_service.update_by_address(ADDRESS.upper(), {"nickName": "vitalik"})

        args, kwargs = mock_collection.find_one_and_update.call_args
        assert args[0] == {"publicAddress": ADDRESS}
        assert args[1] == {"$set": {"nickName": "vitalik"}}
        assert kwargs["projection"] == PUBLIC_PROJECTION
        assert kwargs["return_document"] == ReturnDocument.AFTER
        assert user["nickName"] == "vitalik"

    @pytest.mark.asyncio
    async def test_vanished_user_is_404(self, user_service, mock_collection):
        mock_collection.find_one_and_update = AsyncMock(return_value=None)

        with pytest.raises(NotFoundException):
            await user_service.update_by_address(ADDRESS, {"email": "a@b.c"})


class TestSetAgeVerified:
    @pytest.mark.asyncio
    async def test_flags_user(self, user_service, mock_collection, sample_user_id):
        await user_service.set_age_verified(sample_user_id)

        mock_collection.update_one.assert_called_once_with(
            {"_id": ObjectId(sample_user_id)},
            {"$set": {"ageVerified": True}},
        )

    @pytest.mark.asyncio
    async def test_invalid_id(self, user_service, mock_collection):
        with pytest.raises(BadRequestException):
            await user_service.set_age_verified("nope")
        mock_collection.update_one.assert_not_called()
