from civicdesk.repositories.auth.otp_session_repository import OTPSessionRepository

__all__ = ["OTPSessionRepository"]
