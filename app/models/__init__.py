"""
Users-service database models.
"""

from app.models.user import (
    User,
    USERS_COLLECTION,
    LIST_PROJECTION,
    PUBLIC_PROJECTION,
    TEXT_FIELDS,
    FILE_FIELDS,
    UPDATABLE_FIELDS,
    normalize_address,
    serialize_user,
)

__all__ = [
    "User",
    "USERS_COLLECTION",
    "LIST_PROJECTION",
    "PUBLIC_PROJECTION",
    "TEXT_FIELDS",
    "FILE_FIELDS",
    "UPDATABLE_FIELDS",
    "normalize_address",
    "serialize_user",
]
