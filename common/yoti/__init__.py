"""
Yoti module - Signed-request client for Yoti AI age estimation.
"""

from common.yoti.client import YotiClient, build_digest_message, sign_message

__all__ = ["YotiClient", "build_digest_message", "sign_message"]
