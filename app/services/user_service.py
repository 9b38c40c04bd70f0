"""
User service for the users collection.

Handles user creation, lookups by address or id, listing, and profile updates.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError
from pydantic import ValidationError

from common.utils.exceptions import ConflictException, NotFoundException, BadRequestException
from app.models.user import (
    User,
    USERS_COLLECTION,
    LIST_PROJECTION,
    PUBLIC_PROJECTION,
    normalize_address,
    serialize_user,
)

logger = logging.getLogger(__name__)


class UserService:
    """
    Manages user documents.
    """

    SORTABLE_FIELDS = ("creationDate", "nickName", "publicAddress", "email")
    DEFAULT_SORT = "-creationDate"

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize UserService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._users_collection = db[USERS_COLLECTION]

    # ─────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────

    async def list_users(self) -> List[dict]:
        """
        All users with the public listing projection.

        Returns:
            List of dicts with id, email, nickName, publicAddress, creationDate
        """
        cursor = self._users_collection.find({}, LIST_PROJECTION)
        docs = await cursor.to_list(length=None)
        return [serialize_user(doc) for doc in docs]

    async def list_users_raw(self) -> List[dict]:
        """Same as list_users() but keeps native types (datetimes) for export."""
        cursor = self._users_collection.find({}, LIST_PROJECTION)
        return await cursor.to_list(length=None)

    async def get_all_users(
        self,
        page: int = 1,
        limit: int = 20,
        sort: Optional[str] = None,
    ) -> Tuple[List[dict], int]:
        """
        Paginated users without the nonce.

        Args:
            page: 1-indexed page number
            limit: Page size
            sort: Field name, prefixed with "-" for descending

        Returns:
            (users on the page, total user count)
        """
        sort_field, sort_direction = self._parse_sort(sort or self.DEFAULT_SORT)

        cursor = (
            self._users_collection.find({}, PUBLIC_PROJECTION)
            .sort(sort_field, sort_direction)
            .skip((page - 1) * limit)
            .limit(limit)
        )
        docs = await cursor.to_list(length=limit)
        total = await self._users_collection.count_documents({})

        return [serialize_user(doc) for doc in docs], total

    async def get_user_by_id(self, user_id: str) -> dict:
        """
        Get a user by document id.

        Raises:
            NotFoundException: Unknown or malformed id
        """
        doc = await self._find_by_id(user_id, PUBLIC_PROJECTION)
        if not doc:
            raise NotFoundException(
                message="No document found with that ID",
                code="USER_NOT_FOUND"
            )
        return serialize_user(doc)

    async def get_address_by_id(self, user_id: str) -> str:
        """
        Resolve a document id to the user's public address.

        Raises:
            NotFoundException: Unknown or malformed id
        """
        doc = await self._find_by_id(user_id, {"publicAddress": 1})
        if not doc:
            raise NotFoundException(
                message="No user with such ID",
                code="USER_NOT_FOUND"
            )
        return doc["publicAddress"]

    async def find_by_address(self, public_address: str) -> Optional[dict]:
        """Raw document for an address (case-insensitive), or None."""
        return await self._users_collection.find_one(
            {"publicAddress": normalize_address(public_address)},
            PUBLIC_PROJECTION,
        )

    async def get_user_by_address(self, public_address: str) -> dict:
        """
        Get a user by public address.

        Raises:
            NotFoundException: No user with that address
        """
        doc = await self.find_by_address(public_address)
        if not doc:
            raise NotFoundException(
                message="No User found with that Public Address",
                code="USER_NOT_FOUND"
            )
        return serialize_user(doc)

    # ─────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────

    async def create_user(self, public_address: str) -> dict:
        """
        Create a user for a wallet address.

        Args:
            public_address: Wallet address, any case

        Returns:
            Created user without the nonce

        Raises:
            BadRequestException: Blank address
            ConflictException: Address already registered
        """
        try:
            user = User(publicAddress=public_address)
        except ValidationError:
            raise BadRequestException(
                message="Public address is required",
                code="INVALID_ADDRESS"
            )
        doc = user.to_document()

        try:
            result = await self._users_collection.insert_one(doc)
        except DuplicateKeyError:
            logger.info(f"Duplicate registration attempt for {user.publicAddress}")
            raise ConflictException(
                message=f"User with address {user.publicAddress} already exists",
                code="USER_ALREADY_EXISTS"
            )

        doc["_id"] = result.inserted_id
        logger.info(f"Created user {result.inserted_id} for {user.publicAddress}")

        return serialize_user(doc)

    async def update_by_address(self, public_address: str, fields: Dict[str, Any]) -> dict:
        """
        Set profile fields and return the updated user.

        Args:
            public_address: Wallet address, any case
            fields: Already allow-listed fields to $set

        Raises:
            NotFoundException: User vanished between lookup and update
        """
        address = normalize_address(public_address)

        doc = await self._users_collection.find_one_and_update(
            {"publicAddress": address},
            {"$set": fields},
            projection=PUBLIC_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFoundException(
                message="User not found.",
                code="USER_NOT_FOUND"
            )

        logger.info(f"Updated user {address}: {sorted(fields)}")
        return serialize_user(doc)

    async def set_age_verified(self, user_id: str) -> None:
        """Flag a user as age verified."""
        try:
            object_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            raise BadRequestException(
                message="Invalid user id in session",
                code="INVALID_USER_ID"
            )

        await self._users_collection.update_one(
            {"_id": object_id},
            {"$set": {"ageVerified": True}},
        )
        logger.info(f"User {user_id} marked as age verified")

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    async def _find_by_id(self, user_id: str, projection: dict) -> Optional[dict]:
        try:
            object_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            return None
        return await self._users_collection.find_one({"_id": object_id}, projection)

    def _parse_sort(self, sort: str) -> Tuple[str, int]:
        direction = DESCENDING if sort.startswith("-") else ASCENDING
        field = sort.lstrip("-+")
        if field not in self.SORTABLE_FIELDS:
            raise BadRequestException(
                message=f"Cannot sort by {field}. Allowed: {', '.join(self.SORTABLE_FIELDS)}",
                code="INVALID_SORT"
            )
        return field, direction
