"""
User request schemas.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class CreateUserRequest(BaseModel):
    """Register a wallet address."""

    model_config = ConfigDict(str_strip_whitespace=True)

    publicAddress: str = Field(..., min_length=1, max_length=100)


class AgeVerificationRequest(BaseModel):
    """Selfie for age estimation, base64 or data URL."""

    image: Optional[str] = None
