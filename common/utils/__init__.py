"""
Utilities module - Common helpers for API responses, exceptions, and sanitization.
"""

from common.utils.responses import success_response, error_response, paginated_response
from common.utils.exceptions import (
    APIException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    BadGatewayException,
)
from common.utils.text import sanitize_text
from common.utils.error_handlers import register_error_handlers

__all__ = [
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
]
