"""
Upload service for profile images.

Pushes multipart uploads to object storage concurrently. A failed upload
never fails the batch: its error is carried in the result in place of a link.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from fastapi import UploadFile

from common.storage import ObjectStorage
from app.models.user import FILE_FIELDS

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    """Outcome of one file upload."""

    filename: str
    link: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.link is not None


class UploadService:
    """
    Uploads user files to the image bucket.
    """

    DEFAULT_CONTENT_TYPE = "application/octet-stream"

    def __init__(self, storage: ObjectStorage, bucket: str):
        """
        Initialize UploadService.

        Args:
            storage: Object storage client
            bucket: Bucket that receives profile images
        """
        self._storage = storage
        self._bucket = bucket

    async def upload_files(self, files: Iterable[UploadFile]) -> List[UploadResult]:
        """Upload every file concurrently; results keep the input order."""
        return list(await asyncio.gather(*(self._upload_one(f) for f in files)))

    async def _upload_one(self, file: UploadFile) -> UploadResult:
        filename = file.filename or ""
        try:
            content = await file.read()
            object_name = await self._storage.upload_bytes(
                self._bucket,
                filename,
                content,
                file.content_type or self.DEFAULT_CONTENT_TYPE,
            )
        except Exception as e:
            logger.error(f"Failed to upload {filename} to {self._bucket}: {e}")
            return UploadResult(filename=filename, error=e)

        if not object_name:
            return UploadResult(filename=filename)

        logger.info(f"File {filename} has added to bucket {self._bucket}.")
        return UploadResult(
            filename=filename,
            link=self._storage.public_url(self._bucket, object_name),
        )

    @staticmethod
    def resolve_file_fields(fields: Dict[str, Any], results: List[UploadResult]) -> Dict[str, Any]:
        """
        Swap avatar/background file names for the links of matching uploads.

        A file field whose value names no successfully uploaded file is dropped.
        When several uploads share a name, the first one wins.
        """
        resolved = dict(fields)
        links: Dict[str, str] = {}
        for result in results:
            if result.ok:
                links.setdefault(result.filename, result.link)

        for key in FILE_FIELDS:
            if key not in resolved:
                continue
            link = links.get(resolved[key])
            if link:
                resolved[key] = link
            else:
                del resolved[key]

        return resolved

    @staticmethod
    async def clean_storage(files: Iterable[UploadFile]) -> None:
        """Release the temporary files backing the uploads."""
        for file in files:
            await file.close()
