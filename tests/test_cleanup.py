from __future__ import annotations

from datetime import timedelta

from civicdesk.models.auth.otp_session import OTPSession
from civicdesk.models.base.enums import OTPPurpose
from civicdesk.services.background.cleanup_service import CleanupConfig, CleanupService, CleanupTask

from .conftest import T0


def _session(db_session, expires_at) -> OTPSession:
    session = OTPSession(
        email="guest@example.com",
        code_hash="x" * 64,
        purpose=OTPPurpose.GUEST_VERIFICATION,
        expires_at=expires_at,
        created_at=T0,
        updated_at=T0,
    )
    db_session.add(session)
    db_session.commit()
    return session


def test_purges_only_sessions_past_retention(db_session, captcha, clock) -> None:
    _session(db_session, T0 - timedelta(hours=30))
    _session(db_session, T0 - timedelta(hours=1))
    _session(db_session, T0 + timedelta(minutes=5))
    service = CleanupService(db_session, captcha, CleanupConfig(otp_retention_hours=24), clock)

    result = service.run([CleanupTask.OTP_SESSIONS])

    assert result.is_success
    assert result.data["details"]["otp_sessions"]["count"] == 1
    assert db_session.query(OTPSession).count() == 2


def test_purges_expired_captcha_challenges(db_session, captcha, clock) -> None:
    captcha.issue()
    clock.advance(seconds=600)
    captcha.issue()
    service = CleanupService(db_session, captcha, CleanupConfig(otp_retention_hours=24), clock)

    result = service.run()

    assert result.data["details"]["captcha_challenges"]["count"] == 1
    assert result.data["failed_tasks"] == []
    assert len(captcha.store) == 1


def test_failing_task_does_not_stop_others(db_session, captcha, clock, monkeypatch) -> None:
    _session(db_session, T0 - timedelta(days=3))
    service = CleanupService(db_session, captcha, CleanupConfig(otp_retention_hours=24), clock)

    def broken():
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(captcha, "purge_expired", broken)
    result = service.run()

    assert result.data["failed_tasks"] == ["captcha_challenges"]
    assert result.data["total_cleaned"] == 1
