"""
CAPTCHA challenge issuance and one-shot verification.

Only the challenge text is produced here; rendering it as an image is
left to the client.
"""

from dataclasses import dataclass
from functools import lru_cache
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from civicdesk.config.redis import get_redis_client
from civicdesk.config.settings import settings
from civicdesk.core.exceptions import CaptchaVerificationError
from civicdesk.core.logging import get_logger
from civicdesk.services.cache.ttl_store import TTLStore
from civicdesk.utils.hashing import TokenHasher

logger = get_logger(__name__)


@dataclass(frozen=True)
class CaptchaChallenge:
    challenge_id: str
    text: str
    expires_at: datetime


class CaptchaService:
    """
    Issues challenges into a Redis-backed TTL store and verifies answers.

    A challenge is consumed by the first verification attempt, whether
    the answer was right or not.
    """

    def __init__(
        self,
        store: Optional[TTLStore[str]] = None,
        ttl_seconds: Optional[int] = None,
        length: Optional[int] = None,
        text_generator: Optional[Callable[[int], str]] = None,
    ):
        self.store: TTLStore[str] = (
            store if store is not None else TTLStore(get_redis_client(), prefix=settings.CAPTCHA_KEY_PREFIX)
        )
        self.ttl_seconds = ttl_seconds or settings.CAPTCHA_TTL_SECONDS
        self.length = length or settings.CAPTCHA_LENGTH
        self._generate_text = text_generator or TokenHasher.generate_challenge_text

    def issue(self) -> CaptchaChallenge:
        challenge_id = str(uuid4())
        text = self._generate_text(self.length)
        entry = self.store.put(challenge_id, text, self.ttl_seconds)
        logger.debug("CAPTCHA challenge issued", extra={"challenge_id": challenge_id})
        return CaptchaChallenge(challenge_id=challenge_id, text=text, expires_at=entry.expires_at)

    def verify(self, challenge_id: Optional[str], answer: Optional[str]) -> bool:
        if not challenge_id:
            return False
        expected = self.store.pop(challenge_id)
        if expected is None or not answer:
            return False
        return expected.upper() == answer.strip().upper()

    def require(self, challenge_id: Optional[str], answer: Optional[str]) -> None:
        """
        Raises:
            CaptchaVerificationError: Missing, expired, consumed or wrong answer.
        """
        if not self.verify(challenge_id, answer):
            logger.warning("CAPTCHA verification failed", extra={"challenge_id": challenge_id})
            raise CaptchaVerificationError(
                "CAPTCHA verification failed",
                rule="captcha_required",
                field="captcha_answer",
            )

    def purge_expired(self) -> int:
        return self.store.purge_expired()


@lru_cache()
def get_captcha_service() -> CaptchaService:
    """Process-wide service; challenges are shared through Redis."""
    return CaptchaService()
