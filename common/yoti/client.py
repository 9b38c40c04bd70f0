"""
Yoti AI services client.

Yoti authenticates requests with the SDK id in ``X-Yoti-Auth-Id`` and a
digest header: the string ``METHOD&endpoint?nonce=..&timestamp=..`` (plus
``&base64(body)`` when there is a body), signed RSA-SHA256 with the
application's PEM key.

Example:
    from common.yoti import YotiClient

    client = YotiClient(client_id="...", pem_file_path="keys/app.pem")
    result = await client.age_antispoofing_verify(image_base64, threshold=25)
    if result["age"]["age_check"] == "pass":
        ...
"""

import base64
import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from common.utils.exceptions import BadGatewayException

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.yoti.com/ai/v1"
AGE_ANTISPOOFING_ENDPOINT = "/age-antispoofing-verify"


def build_digest_message(method: str, endpoint: str, body: Optional[bytes] = None) -> bytes:
    """Canonical string that Yoti expects to be signed."""
    message = f"{method.upper()}&{endpoint}"
    if body:
        message += "&" + base64.b64encode(body).decode("ascii")
    return message.encode("utf-8")


def sign_message(private_key: RSAPrivateKey, message: bytes) -> str:
    """RSA-SHA256 (PKCS#1 v1.5) signature, base64 encoded."""
    signature = private_key.sign(message, padding.PKCS1v15(), hashes.SHA256())
    return base64.b64encode(signature).decode("ascii")


class YotiClient:
    """Signed-request client for the Yoti AI endpoints."""

    def __init__(
        self,
        client_id: str,
        pem_file_path: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        private_key: Optional[RSAPrivateKey] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize YotiClient.

        Args:
            client_id: Yoti SDK/client id
            pem_file_path: Path to the application's PEM private key
            base_url: API base URL
            private_key: Already loaded key (takes precedence over the path)
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests, proxies)
        """
        if private_key is None and not pem_file_path:
            raise ValueError("Either private_key or pem_file_path is required")

        self._client_id = client_id
        self._pem_file_path = pem_file_path
        self._base_url = base_url.rstrip("/")
        self._private_key = private_key
        self._timeout = timeout
        self._transport = transport

    @property
    def private_key(self) -> RSAPrivateKey:
        if self._private_key is None:
            pem = Path(self._pem_file_path).read_bytes()
            self._private_key = serialization.load_pem_private_key(pem, password=None)
        return self._private_key

    def build_request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> httpx.Request:
        """Build a signed request without sending it."""
        query = urlencode({
            "nonce": str(uuid.uuid4()),
            "timestamp": int(time.time() * 1000),
        })
        signed_endpoint = f"{endpoint}?{query}"
        body = json.dumps(payload).encode("utf-8") if payload is not None else None

        headers = {
            "X-Yoti-Auth-Id": self._client_id,
            "X-Yoti-Auth-Digest": sign_message(
                self.private_key,
                build_digest_message(method, signed_endpoint, body),
            ),
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        return httpx.Request(
            method.upper(),
            f"{self._base_url}{signed_endpoint}",
            headers=headers,
            content=body,
        )

    async def execute(self, request: httpx.Request) -> Dict[str, Any]:
        """
        Send a signed request and parse the JSON response.

        Raises:
            BadGatewayException: Transport failure or non-2xx answer
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.send(request)
        except httpx.RequestError as e:
            logger.error(f"Yoti request error: {e}")
            raise BadGatewayException(
                message="Failed to connect to age verification service",
                code="AGE_VERIFICATION_UNAVAILABLE",
            )

        if response.status_code >= 400:
            logger.error(f"Yoti API error: {response.status_code} - {response.text}")
            raise BadGatewayException(
                message="Age verification service rejected the request",
                code="AGE_VERIFICATION_FAILED",
                details={"status": response.status_code},
            )

        return response.json()

    async def age_antispoofing_verify(
        self,
        image: str,
        threshold: int = 25,
        operator: str = "OVER",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Estimate age and check liveness for a base64 image.

        Args:
            image: Base64-encoded image (data URL accepted)
            threshold: Age to compare against
            operator: "OVER" or "UNDER"
            metadata: Extra request metadata

        Returns:
            Parsed Yoti response, e.g. {"age": {"age_check": "pass", ...}, "antispoofing": {...}}
        """
        payload = {
            "img": image,
            "threshold": threshold,
            "operator": operator,
            "metadata": metadata or {"device": "unknown"},
        }
        request = self.build_request("POST", AGE_ANTISPOOFING_ENDPOINT, payload)
        return await self.execute(request)
