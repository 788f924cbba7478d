from civicdesk.schemas.auth.captcha import CaptchaChallengeResponse

__all__ = ["CaptchaChallengeResponse"]
