"""
FastAPI dependencies for the users service.

Provides dependency injection for services and the session user.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.storage import ObjectStorage
from common.utils.exceptions import UnauthorizedException
from common.yoti import YotiClient
from app.config import Settings
from app.services.user_service import UserService
from app.services.upload_service import UploadService
from app.services.export_service import ExportService
from app.services.age_verification_service import AgeVerificationService

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "userData"

_user_service: UserService | None = None
_upload_service: UploadService | None = None
_export_service: ExportService | None = None
_age_verification_service: AgeVerificationService | None = None


def init_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """
    Initialize services with database connection and settings.

    Called once at application startup.

    Args:
        db: MongoDB database connection
        settings: Application settings
    """
    global _user_service, _upload_service, _export_service, _age_verification_service

    _user_service = UserService(db=db)

    storage = ObjectStorage(
        endpoint=settings.STORAGE_ENDPOINT,
        access_key=settings.STORAGE_ACCESS_KEY,
        secret_key=settings.STORAGE_SECRET_KEY,
        gateway=settings.STORAGE_GATEWAY,
        region=settings.STORAGE_REGION,
    )
    _upload_service = UploadService(storage=storage, bucket=settings.IMAGE_BUCKET_NAME)

    _export_service = ExportService(
        user_service=_user_service,
        export_dir=settings.EXPORT_DIR,
        cleanup_delay_seconds=settings.EXPORT_CLEANUP_DELAY_SECONDS,
    )

    yoti_client: Optional[YotiClient] = None
    if settings.YOTI_CLIENT_ID:
        yoti_client = YotiClient(
            client_id=settings.YOTI_CLIENT_ID,
            pem_file_path=settings.YOTI_PEM_FILE_PATH,
            base_url=settings.YOTI_BASE_URL,
        )
    else:
        logger.warning("YOTI_CLIENT_ID not set, age verification disabled")

    _age_verification_service = AgeVerificationService(
        user_service=_user_service,
        yoti_client=yoti_client,
        threshold=settings.AGE_THRESHOLD,
    )


def get_user_service() -> UserService:
    """Get user service instance."""
    if _user_service is None:
        raise RuntimeError("Services not initialized. Call init_services first.")
    return _user_service


def get_upload_service() -> UploadService:
    """Get upload service instance."""
    if _upload_service is None:
        raise RuntimeError("Services not initialized. Call init_services first.")
    return _upload_service


def get_export_service() -> ExportService:
    """Get export service instance."""
    if _export_service is None:
        raise RuntimeError("Services not initialized. Call init_services first.")
    return _export_service


def get_age_verification_service() -> AgeVerificationService:
    """Get age verification service instance."""
    if _age_verification_service is None:
        raise RuntimeError("Services not initialized. Call init_services first.")
    return _age_verification_service


# =============================================================================
# Session Dependencies
# =============================================================================
async def get_session_user(request: Request) -> dict:
    """
    The logged-in user stored in the session by wallet login.

    Raises:
        UnauthorizedException: No user in the session
    """
    user = request.session.get(SESSION_USER_KEY)
    if not user or not user.get("id"):
        raise UnauthorizedException(
            message="Authentication required",
            code="AUTH_REQUIRED"
        )
    return user


def merge_session_user(request: Request, updates: dict) -> None:
    """Overlay fields onto the session user data."""
    current = request.session.get(SESSION_USER_KEY) or {}
    request.session[SESSION_USER_KEY] = {**current, **updates}


async def user_address_filter(
    user_id: str,
    user_service: UserService = Depends(get_user_service),
) -> str:
    """
    Resolve a ``{user_id}`` path parameter to that user's public address.

    For resources filtered by owner address, e.g. contracts or tokens.

    Raises:
        NotFoundException: No user with such id
    """
    return await user_service.get_address_by_id(user_id)
