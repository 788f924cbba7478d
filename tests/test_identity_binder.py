from __future__ import annotations

from civicdesk.models.auth.otp_session import OTPSession
from civicdesk.models.base.enums import ComplaintStatus, UserRole
from civicdesk.repositories.complaint.complaint_repository import ComplaintRepository
from civicdesk.repositories.complaint.status_log_repository import StatusLogRepository
from civicdesk.repositories.user.user_repository import UserRepository
from civicdesk.schemas.guest.guest_complaint import GuestComplaintSubmit
from civicdesk.services.auth.identity_binder import IdentityBinder
from civicdesk.services.base.notification_dispatcher import TemplateKind
from civicdesk.services.base.service_result import ErrorCode

from .conftest import CAPTCHA_TEXT

GUEST_EMAIL = "guest@example.com"


def _guest_payload(captcha, ward_id, **overrides) -> GuestComplaintSubmit:
    challenge = captcha.issue()
    fields = {
        "type": "WATER_SUPPLY",
        "description": "Water pipe burst near the school gate",
        "ward_id": ward_id,
        "contact_name": "Asha Guest",
        "contact_email": GUEST_EMAIL,
        "captcha_id": challenge.challenge_id,
        "captcha_answer": CAPTCHA_TEXT.lower(),
    }
    fields.update(overrides)
    return GuestComplaintSubmit(**fields)


def _submit(binder, captcha, seed):
    result = binder.submit_guest(_guest_payload(captcha, seed.ward.id))
    assert result.is_success
    return result.data


def test_submit_files_unbound_complaint_and_sends_code(binder, captcha, seed, dispatcher) -> None:
    submission = _submit(binder, captcha, seed)

    assert submission.complaint.submitted_by_id is None
    assert submission.complaint.status == ComplaintStatus.REGISTERED
    assert submission.otp_session.complaint_id == submission.complaint.id
    sent = dispatcher.of_kind(TemplateKind.OTP_CODE)
    assert [n.recipient for n in sent] == [GUEST_EMAIL]
    assert sent[0].payload["code"] == "123456"
    assert submission.otp_session.code_hash != "123456"


def test_wrong_captcha_refuses_submission(binder, captcha, seed, db_session) -> None:
    result = binder.submit_guest(_guest_payload(captcha, seed.ward.id, captcha_answer="WRONG"))

    assert result.error_code == ErrorCode.CAPTCHA_FAILED
    assert ComplaintRepository(db_session).count() == 0


def test_dispatch_failure_rolls_back_complaint(binder, captcha, seed, dispatcher, db_session) -> None:
    dispatcher.fail_for.add(TemplateKind.OTP_CODE)

    result = binder.submit_guest(_guest_payload(captcha, seed.ward.id))

    assert result.error_code == ErrorCode.EXTERNAL_SERVICE_ERROR
    assert ComplaintRepository(db_session).count() == 0
    assert db_session.query(OTPSession).count() == 0


def test_wrong_code_then_right_code_binds(binder, captcha, seed, db_session, dispatcher) -> None:
    submission = _submit(binder, captcha, seed)

    wrong = binder.verify_guest(GUEST_EMAIL, "000000", submission.complaint.sequence_code)
    assert wrong.error_code == ErrorCode.INVALID_CREDENTIAL
    assert wrong.error.details["attempts_remaining"] == binder.settings.OTP_MAX_ATTEMPTS - 1
    db_session.refresh(submission.otp_session)
    assert submission.otp_session.attempt_count == 1

    result = binder.verify_guest(GUEST_EMAIL, "123456", submission.complaint.sequence_code)

    assert result.is_success
    binding = result.data
    assert binding.is_new_user
    assert binding.user.role == UserRole.CITIZEN
    assert binding.user.ward_id == seed.ward.id
    assert binding.complaint.submitted_by_id == binding.user.id
    logs = StatusLogRepository(db_session).list_for_complaint(binding.complaint.id)
    assert logs[-1].comment == "Complaint verified and registered"
    assert logs[-1].actor_id == binding.user.id
    assert dispatcher.recipients(TemplateKind.WELCOME) == [GUEST_EMAIL]
    assert dispatcher.recipients(TemplateKind.VERIFIED_COMPLAINT) == [seed.officer.email]


def test_code_cannot_be_replayed(binder, captcha, seed) -> None:
    submission = _submit(binder, captcha, seed)
    assert binder.verify_guest(GUEST_EMAIL, "123456", submission.complaint.id).is_success

    replay = binder.verify_guest(GUEST_EMAIL, "123456", submission.complaint.id)

    assert replay.error_code == ErrorCode.CREDENTIAL_EXPIRED_OR_USED


def test_existing_account_is_reused(binder, captcha, seed, db_session) -> None:
    payload = _guest_payload(captcha, seed.ward.id, contact_email=seed.citizen.email)
    submission = binder.submit_guest(payload).data

    result = binder.verify_guest(seed.citizen.email, "123456", submission.complaint.id)

    assert result.is_success
    assert not result.data.is_new_user
    assert result.data.user.id == seed.citizen.id
    assert UserRepository(db_session).count() == 6


def test_expired_code_is_refused(binder, captcha, seed, clock) -> None:
    submission = _submit(binder, captcha, seed)
    clock.advance(minutes=11)

    result = binder.verify_guest(GUEST_EMAIL, "123456", submission.complaint.id)

    assert result.error_code == ErrorCode.CREDENTIAL_EXPIRED_OR_USED


def test_resend_invalidates_previous_code(db_session, workflow, captcha, seed, dispatcher) -> None:
    codes = iter(["111111", "222222"])
    binder = IdentityBinder(db_session, workflow, code_generator=lambda: next(codes))
    submission = _submit(binder, captcha, seed)

    resent = binder.resend(GUEST_EMAIL, submission.complaint.sequence_code)
    assert resent.is_success
    assert ComplaintRepository(db_session).count() == 1

    stale = binder.verify_guest(GUEST_EMAIL, "111111", submission.complaint.id)
    assert stale.error_code == ErrorCode.CREDENTIAL_EXPIRED_OR_USED

    fresh = binder.verify_guest(GUEST_EMAIL, "222222", submission.complaint.id)
    assert fresh.is_success
    assert [n.payload["code"] for n in dispatcher.of_kind(TemplateKind.OTP_CODE)] == ["111111", "222222"]


def test_resend_requires_matching_email(binder, captcha, seed) -> None:
    submission = _submit(binder, captcha, seed)

    result = binder.resend("someone.else@example.com", submission.complaint.id)

    assert result.error_code == ErrorCode.AUTHORIZATION_ERROR
    assert result.error.rule == "contact_mismatch"


def test_resend_refused_once_bound(binder, captcha, seed) -> None:
    submission = _submit(binder, captcha, seed)
    binder.verify_guest(GUEST_EMAIL, "123456", submission.complaint.id)

    result = binder.resend(GUEST_EMAIL, submission.complaint.id)

    assert result.error.rule == "complaint_already_bound"


def test_attempts_are_limited(binder, captcha, seed) -> None:
    submission = _submit(binder, captcha, seed)
    for _ in range(binder.settings.OTP_MAX_ATTEMPTS):
        result = binder.verify_guest(GUEST_EMAIL, "999999", submission.complaint.id)
        assert result.error_code == ErrorCode.INVALID_CREDENTIAL

    locked = binder.verify_guest(GUEST_EMAIL, "123456", submission.complaint.id)

    assert locked.error_code == ErrorCode.CREDENTIAL_EXPIRED_OR_USED
