"""
CAPTCHA challenge schemas.
"""

from datetime import datetime

from civicdesk.schemas.common.base import BaseSchema

__all__ = ["CaptchaChallengeResponse"]


class CaptchaChallengeResponse(BaseSchema):
    """The client renders `text`; only the id and the answer come back."""

    challenge_id: str
    text: str
    expires_at: datetime
