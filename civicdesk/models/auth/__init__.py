from civicdesk.models.auth.otp_session import OTPSession

__all__ = ["OTPSession"]
