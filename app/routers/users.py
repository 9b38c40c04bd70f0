"""
FastAPI router for User endpoints.

Provides listing, export, registration, lookup, profile update and
age verification.
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from common.utils import success_response, paginated_response
from app.dependencies import (
    get_session_user,
    get_user_service,
    get_upload_service,
    get_export_service,
    get_age_verification_service,
    merge_session_user,
    user_address_filter,
)
from app.services.user_service import UserService
from app.services.upload_service import UploadService
from app.services.export_service import ExportService
from app.services.age_verification_service import AgeVerificationService
from app.schemas.user import CreateUserRequest, AgeVerificationRequest
from app.pipelines import user as pipelines

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def get_all_users(
    user_service: Annotated[UserService, Depends(get_user_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    sort: Optional[str] = None,
):
    """
    Get users, paginated.

    Sort by creationDate, nickName, publicAddress or email; prefix "-" for descending.
    """
    users, total = await user_service.get_all_users(page=page, limit=limit, sort=sort)
    return paginated_response(users, total=total, page=page, limit=limit)


@router.get("/list")
async def list_users(
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """List every user's email, nickname, address and creation date."""
    users = await user_service.list_users()
    return success_response(users)


@router.get("/export", response_class=FileResponse)
async def export_users(
    export_service: Annotated[ExportService, Depends(get_export_service)],
):
    """
    Download the user listing as a semicolon-delimited CSV.

    The file is deleted shortly after it has been sent.
    """
    path = await export_service.export_users()
    return FileResponse(
        path,
        media_type="text/csv",
        filename=path.name,
        background=BackgroundTask(export_service.remove_later, path),
    )


@router.post("/verify-age")
async def verify_age(
    request: Request,
    session_user: Annotated[dict, Depends(get_session_user)],
    age_service: Annotated[AgeVerificationService, Depends(get_age_verification_service)],
    body: Optional[AgeVerificationRequest] = None,
):
    """
    Check the caller's age from a selfie.

    Answers success=false without calling the provider when it is not
    configured or no image was sent.
    """
    result = await pipelines.verify_age_pipeline(
        age_service=age_service,
        session_user=session_user,
        image=body.image if body else None,
    )

    if result is None:
        return {"success": False, "message": "Cannot process age verification"}

    if result.passed:
        merge_session_user(request, {"ageVerified": True})

    return success_response(result.response)


@router.get("/id/{user_id}")
async def get_user_by_id(
    user_id: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Get a user by document id."""
    user = await user_service.get_user_by_id(user_id)
    return success_response({"user": user})


@router.get("/id/{user_id}/address")
async def get_user_address(
    user_id: str,
    public_address: Annotated[str, Depends(user_address_filter)],
):
    """Resolve a user id to the public address used to filter owned resources."""
    return success_response({"userId": user_id, "publicAddress": public_address})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: CreateUserRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Register a wallet address."""
    user = await user_service.create_user(body.publicAddress)
    return success_response({"user": user})


@router.get("/{public_address}")
async def get_user_by_address(
    public_address: str,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Get a user by public address (case-insensitive)."""
    user = await user_service.get_user_by_address(public_address)
    return success_response({"user": user})


@router.patch("/{public_address}")
async def update_user_by_address(
    public_address: str,
    request: Request,
    session_user: Annotated[dict, Depends(get_session_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    upload_service: Annotated[UploadService, Depends(get_upload_service)],
    nickName: Annotated[Optional[str], Form()] = None,
    email: Annotated[Optional[str], Form()] = None,
    avatar: Annotated[Optional[str], Form()] = None,
    background: Annotated[Optional[str], Form()] = None,
    files: Annotated[Optional[List[UploadFile]], File()] = None,
):
    """
    Update the caller's own profile.

    avatar and background name one of the uploaded files and are replaced
    by its public link. Without uploads only nickName and email change.
    """
    submitted = {
        "nickName": nickName,
        "email": email,
        "avatar": avatar,
        "background": background,
    }
    fields = {key: value for key, value in submitted.items() if value is not None}

    user = await pipelines.update_user_pipeline(
        user_service=user_service,
        upload_service=upload_service,
        public_address=public_address,
        session_user=session_user,
        fields=fields,
        files=files,
    )

    merge_session_user(request, user)

    return success_response({"user": user})
