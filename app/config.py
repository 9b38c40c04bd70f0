"""
Rair users service settings.

Extends the base settings with storage, verification and export configuration.
"""

import tempfile
from typing import Optional

from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """Users-service settings."""

    # ==========================================================================
    # Object Storage (S3-compatible, GCS interoperability works)
    # ==========================================================================
    STORAGE_ENDPOINT: str = "https://storage.googleapis.com"
    STORAGE_ACCESS_KEY: Optional[str] = None
    STORAGE_SECRET_KEY: Optional[str] = None
    STORAGE_REGION: Optional[str] = None
    STORAGE_GATEWAY: str = "https://storage.googleapis.com"
    IMAGE_BUCKET_NAME: str = "rair-images"

    # ==========================================================================
    # Yoti Age Verification
    # ==========================================================================
    YOTI_CLIENT_ID: Optional[str] = None
    YOTI_PEM_FILE_PATH: str = "keys/yoti.pem"
    YOTI_BASE_URL: str = "https://api.yoti.com/ai/v1"
    AGE_THRESHOLD: int = 25

    # ==========================================================================
    # User Export
    # ==========================================================================
    EXPORT_DIR: str = tempfile.gettempdir()
    EXPORT_CLEANUP_DELAY_SECONDS: float = 2.0

    def collect_errors(self) -> list:
        errors = super().collect_errors()

        if not self.STORAGE_ACCESS_KEY or not self.STORAGE_SECRET_KEY:
            errors.append("STORAGE_ACCESS_KEY and STORAGE_SECRET_KEY are required for uploads")

        return errors


# Global settings instance
settings = Settings()
