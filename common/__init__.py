"""
Common library for reusable infrastructure components.

This package provides generic modules that can be used across services:

- database: Async MongoDB connection with Motor
- storage: S3-compatible object storage (MinIO SDK)
- yoti: Signed-request client for Yoti AI services
- utils: Standard responses, exceptions, error handlers, sanitization
- config: Base settings class
"""

from common.database import MongoDB
from common.storage import ObjectStorage
from common.yoti import YotiClient
from common.utils import (
    success_response,
    error_response,
    paginated_response,
    APIException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    BadGatewayException,
    sanitize_text,
    register_error_handlers,
)
from common.config import BaseAppSettings

__all__ = [
    # Database
    "MongoDB",
    # Storage
    "ObjectStorage",
    # Yoti
    "YotiClient",
    # Utils
    "success_response",
    "error_response",
    "paginated_response",
    "APIException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "BadGatewayException",
    "sanitize_text",
    "register_error_handlers",
    # Config
    "BaseAppSettings",
]
