"""Test helpers shared across modules."""

from unittest.mock import AsyncMock, MagicMock

ADDRESS = "0xabcdef0123456789abcdef0123456789abcdef01"


def make_cursor(docs):
    """Motor-like cursor: chainable sort/skip/limit, async to_list."""
    cursor = MagicMock()
    cursor.sort = MagicMock(return_value=cursor)
    cursor.skip = MagicMock(return_value=cursor)
    cursor.limit = MagicMock(return_value=cursor)
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor
