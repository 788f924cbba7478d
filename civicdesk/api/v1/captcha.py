"""
CAPTCHA challenge issuance.
"""

from fastapi import APIRouter, Depends, status

from civicdesk.api import deps
from civicdesk.schemas.auth.captcha import CaptchaChallengeResponse
from civicdesk.services.captcha.captcha_service import CaptchaService

router = APIRouter(prefix="/captcha", tags=["CAPTCHA"])


@router.post("", response_model=CaptchaChallengeResponse, status_code=status.HTTP_201_CREATED)
def issue_challenge(captcha: CaptchaService = Depends(deps.get_captcha)) -> CaptchaChallengeResponse:
    challenge = captcha.issue()
    return CaptchaChallengeResponse(
        challenge_id=challenge.challenge_id,
        text=challenge.text,
        expires_at=challenge.expires_at,
    )
