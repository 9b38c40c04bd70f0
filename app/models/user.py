"""
User document for the users collection.

A user is keyed by the lower-cased public (wallet) address. The nonce is
used by wallet-signature login elsewhere and never leaves the service.
"""

import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, Field, field_validator

USERS_COLLECTION = "users"

# Fields returned by the list and export handlers
LIST_PROJECTION = {
    "email": 1,
    "nickName": 1,
    "publicAddress": 1,
    "creationDate": 1,
}

# Everything except the write-protected nonce
PUBLIC_PROJECTION = {"nonce": 0}

# Profile fields a user may change; the file fields only with an upload
TEXT_FIELDS = ("nickName", "email")
FILE_FIELDS = ("avatar", "background")
UPDATABLE_FIELDS = ("nickName", "avatar", "email", "background")

NONCE_UPPER_BOUND = 1_000_000


def _utcnow() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def generate_nonce() -> int:
    return secrets.randbelow(NONCE_UPPER_BOUND)


def normalize_address(address: str) -> str:
    """Public addresses are stored and looked up lower-cased."""
    return address.strip().lower()


class User(BaseModel):
    """
    User document as written to MongoDB.

    Field names are the camelCase keys stored in the collection.
    """

    publicAddress: str = Field(..., min_length=1)
    nickName: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    background: Optional[str] = None
    ageVerified: bool = False
    nonce: int = Field(default_factory=generate_nonce)
    creationDate: datetime = Field(default_factory=_utcnow)

    @field_validator("publicAddress", mode="before")
    @classmethod
    def _lower_address(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalize_address(value)
        return value

    def to_document(self) -> Dict[str, Any]:
        """Document ready for insert_one()."""
        return self.model_dump()


def serialize_user(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Convert a raw users-collection document into a JSON-safe dict.

    ObjectIds become strings, ``_id`` is exposed as ``id`` and the nonce is
    dropped even if a caller forgot the projection.
    """
    if doc is None:
        return None

    result: Dict[str, Any] = {}
    for key, value in doc.items():
        if key == "nonce":
            continue
        if key == "_id":
            result["id"] = str(value)
            continue
        if isinstance(value, ObjectId):
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        result[key] = value
    return result
