"""
Users-service request schemas.
"""

from app.schemas.user import CreateUserRequest, AgeVerificationRequest

__all__ = ["CreateUserRequest", "AgeVerificationRequest"]
