"""
Storage module - S3-compatible object storage.
"""

from common.storage.object_storage import ObjectStorage

__all__ = ["ObjectStorage"]
