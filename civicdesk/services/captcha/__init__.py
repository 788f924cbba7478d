from civicdesk.services.captcha.captcha_service import (
    CaptchaChallenge,
    CaptchaService,
    get_captcha_service,
)

__all__ = ["CaptchaChallenge", "CaptchaService", "get_captcha_service"]
