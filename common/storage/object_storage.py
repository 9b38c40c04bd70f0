"""
S3-compatible object storage client built on the MinIO SDK.

Works against MinIO, AWS S3 and Google Cloud Storage's interoperability
endpoint. Public links are composed from a configured gateway rather than
the API endpoint, so buckets can sit behind a CDN.

Example:
    from common.storage import ObjectStorage

    storage = ObjectStorage(
        endpoint="https://storage.googleapis.com",
        access_key="...",
        secret_key="...",
        gateway="https://storage.googleapis.com",
    )
    object_name = await storage.upload_bytes("images", "avatar.png", data, "image/png")
    url = storage.public_url("images", object_name)
"""

import asyncio
import logging
import re
import uuid
from io import BytesIO
from typing import Optional

from minio import Minio

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ObjectStorage:
    """Uploads objects and builds their public URLs."""

    def __init__(
        self,
        endpoint: str,
        access_key: Optional[str],
        secret_key: Optional[str],
        gateway: str,
        region: Optional[str] = None,
        client: Optional[Minio] = None,
    ):
        """
        Initialize ObjectStorage.

        Args:
            endpoint: Storage API endpoint, scheme decides TLS
            access_key: HMAC access key
            secret_key: HMAC secret key
            gateway: Base URL that public links are built from
            region: Optional bucket region
            client: Pre-built Minio client (tests)
        """
        self._gateway = gateway.rstrip("/")

        if client is None:
            host = endpoint.replace("http://", "").replace("https://", "")
            client = Minio(
                host,
                access_key=access_key,
                secret_key=secret_key,
                secure=endpoint.startswith("https"),
                region=region,
            )
        self._client = client

    @staticmethod
    def make_object_name(filename: str) -> str:
        """Unique object key that keeps the original name readable."""
        safe = _UNSAFE_CHARS.sub("_", filename or "file").strip("_") or "file"
        return f"{uuid.uuid4().hex}-{safe}"

    async def upload_bytes(
        self,
        bucket: str,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """
        Upload a file held in memory.

        The SDK is blocking, so the put runs in the default executor and
        several uploads can proceed concurrently.

        Args:
            bucket: Bucket name
            filename: Original file name, used to derive the object key
            content: File bytes
            content_type: MIME type

        Returns:
            The object key inside the bucket
        """
        object_name = self.make_object_name(filename)
        loop = asyncio.get_running_loop()

        await loop.run_in_executor(
            None,
            lambda: self._client.put_object(
                bucket,
                object_name,
                BytesIO(content),
                length=len(content),
                content_type=content_type,
            ),
        )

        logger.debug(f"Uploaded {len(content)} bytes to {bucket}/{object_name}")
        return object_name

    def public_url(self, bucket: str, object_name: str) -> str:
        """Public link for an object: <gateway>/<bucket>/<object>."""
        return f"{self._gateway}/{bucket}/{object_name}"
