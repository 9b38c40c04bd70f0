"""
Age verification through Yoti AI age estimation with anti-spoofing.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from common.yoti import YotiClient
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

AGE_CHECK_PASS = "pass"


@dataclass
class AgeCheckResult:
    passed: bool
    response: Dict[str, Any] = field(default_factory=dict)


class AgeVerificationService:
    """
    Sends a selfie to Yoti and records a passing age check on the user.
    """

    OPERATOR = "OVER"
    METADATA = {"device": "unknown"}

    def __init__(
        self,
        user_service: UserService,
        yoti_client: Optional[YotiClient],
        threshold: int = 25,
    ):
        """
        Initialize AgeVerificationService.

        Args:
            user_service: For persisting the verified flag
            yoti_client: Configured client, None when Yoti is not set up
            threshold: Minimum age the check compares against
        """
        self._user_service = user_service
        self._yoti = yoti_client
        self._threshold = threshold

    @property
    def is_configured(self) -> bool:
        return self._yoti is not None

    async def verify(self, user_id: str, image: str) -> AgeCheckResult:
        """
        Run the age check and flag the user when it passes.

        Args:
            user_id: The caller's own user id
            image: Base64 image

        Returns:
            AgeCheckResult with the parsed provider response
        """
        if self._yoti is None:
            raise RuntimeError("Yoti client is not configured")

        response = await self._yoti.age_antispoofing_verify(
            image,
            threshold=self._threshold,
            operator=self.OPERATOR,
            metadata=dict(self.METADATA),
        )

        age = response.get("age") or {}
        passed = age.get("age_check") == AGE_CHECK_PASS

        if passed:
            await self._user_service.set_age_verified(user_id)
        logger.info(f"Age check for user {user_id}: {age.get('age_check', 'unknown')}")

        return AgeCheckResult(passed=passed, response=response)
