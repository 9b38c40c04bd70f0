"""
Users-service business logic.
"""

from app.services.user_service import UserService
from app.services.upload_service import UploadService, UploadResult
from app.services.export_service import ExportService
from app.services.age_verification_service import AgeVerificationService, AgeCheckResult

__all__ = [
    "UserService",
    "UploadService",
    "UploadResult",
    "ExportService",
    "AgeVerificationService",
    "AgeCheckResult",
]
