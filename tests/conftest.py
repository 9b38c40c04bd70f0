"""Shared test fixtures for the users service tests."""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from app.services.user_service import UserService
from tests.helpers import ADDRESS, make_cursor


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # count_documents etc. stay as AsyncMock.
    collection.find = MagicMock(return_value=make_cursor([]))
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def user_service(mock_db):
    return UserService(mock_db)


@pytest.fixture
def sample_user_doc(sample_user_id):
    """A users document as returned with the nonce projected out."""
    return {
        "_id": ObjectId(sample_user_id),
        "publicAddress": ADDRESS,
        "nickName": "satoshi",
        "email": "satoshi@example.com",
        "avatar": None,
        "background": None,
        "ageVerified": False,
        "creationDate": datetime(2026, 10, 19, 10, 0, 0),
    }


@pytest.fixture
def session_user(sample_user_id):
    return {"id": sample_user_id, "publicAddress": ADDRESS, "ageVerified": False}
