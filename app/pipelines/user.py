"""
User pipeline functions.

Stateless orchestration logic for multi-step user operations.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import UploadFile

from common.utils.exceptions import BadRequestException, ForbiddenException, NotFoundException
from common.utils.text import sanitize_text
from app.models.user import TEXT_FIELDS, UPDATABLE_FIELDS, normalize_address
from app.services.user_service import UserService
from app.services.upload_service import UploadService
from app.services.age_verification_service import AgeVerificationService, AgeCheckResult

logger = logging.getLogger(__name__)


def pick(fields: Dict[str, Any], allowed) -> Dict[str, Any]:
    """Keep only allowed keys."""
    return {key: value for key, value in fields.items() if key in allowed}


async def update_user_pipeline(
    user_service: UserService,
    upload_service: UploadService,
    public_address: str,
    session_user: dict,
    fields: Dict[str, Any],
    files: Optional[List[UploadFile]] = None,
) -> dict:
    """
    Update the caller's own profile.

    Args:
        user_service: For lookup and persistence
        upload_service: For avatar/background uploads
        public_address: Address from the path, any case
        session_user: The caller's session user data
        fields: Submitted profile fields
        files: Uploaded files, if any

    Returns:
        Updated user dict

    Raises:
        NotFoundException: No user with that address
        ForbiddenException: Caller does not own the address
        BadRequestException: Nothing left to update
    """
    address = normalize_address(public_address)

    found = await user_service.find_by_address(address)
    if not found:
        raise NotFoundException(message="User not found.", code="USER_NOT_FOUND")

    caller_address = normalize_address(session_user.get("publicAddress") or "")
    if address != caller_address:
        raise ForbiddenException(
            message=f"You have no permissions for updating user {address}.",
            code="FORBIDDEN"
        )

    if files:
        try:
            results = await upload_service.upload_files(files)
            updates = pick(
                upload_service.resolve_file_fields(fields, results),
                UPDATABLE_FIELDS,
            )
        finally:
            await upload_service.clean_storage(files)
    else:
        updates = pick(fields, TEXT_FIELDS)

    if not updates:
        raise BadRequestException(message="Nothing to update.", code="NOTHING_TO_UPDATE")

    if updates.get("nickName"):
        updates["nickName"] = sanitize_text(updates["nickName"])

    return await user_service.update_by_address(address, updates)


async def verify_age_pipeline(
    age_service: AgeVerificationService,
    session_user: dict,
    image: Optional[str],
) -> Optional[AgeCheckResult]:
    """
    Run the age check for the caller.

    Returns:
        AgeCheckResult, or None when Yoti is not configured or no image was sent
    """
    if not age_service.is_configured or not image:
        logger.warning("Age verification skipped: missing client id or image")
        return None

    return await age_service.verify(str(session_user["id"]), image)
