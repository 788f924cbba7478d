"""
Guest identity binding: submit, verify and resend.

Phase 1 files an unbound complaint and issues a one-time code in the same
transaction; if the code cannot be dispatched, both are rolled back.
Phase 2 consumes the code once and links the complaint to a citizen
account, creating it when needed.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from civicdesk.core.exceptions import (
    AuthorizationError,
    BaseAppException,
    ExpiredOrUsedCredentialError,
    InvalidCredentialError,
    NotificationDeliveryError,
    ResourceNotFoundError,
    StateError,
)
from civicdesk.models.auth.otp_session import OTPSession
from civicdesk.models.base.enums import OTPPurpose, UserRole
from civicdesk.models.complaint.complaint import Complaint
from civicdesk.models.user.user import User
from civicdesk.repositories.auth.otp_session_repository import OTPSessionRepository
from civicdesk.schemas.guest.guest_complaint import GuestComplaintSubmit
from civicdesk.services.base.base_service import BaseService
from civicdesk.services.base.notification_dispatcher import TemplateKind, notify_quietly
from civicdesk.services.base.service_result import ServiceResult
from civicdesk.services.complaint.workflow_service import WorkflowService
from civicdesk.utils.hashing import TokenHasher

PURPOSE = OTPPurpose.GUEST_VERIFICATION


@dataclass
class GuestSubmission:
    complaint: Complaint
    otp_session: OTPSession


@dataclass
class BindingResult:
    user: User
    complaint: Complaint
    is_new_user: bool


class IdentityBinder(BaseService):
    """
    Runs the unauthenticated submission flow on top of WorkflowService.
    """

    def __init__(
        self,
        db_session: Session,
        workflow: WorkflowService,
        code_generator: Optional[Callable[[], str]] = None,
    ):
        super().__init__(db_session, workflow.now)
        self.workflow = workflow
        self.settings = workflow.settings
        self.dispatcher = workflow.dispatcher
        self.otp_sessions = OTPSessionRepository(db_session)
        self.complaints = workflow.complaints
        self.users = workflow.users
        self._generate_code = code_generator or (lambda: TokenHasher.generate_numeric_code(6))

    # -------------------------------------------------------------------------
    # Phase 1
    # -------------------------------------------------------------------------

    def submit_guest(self, data: GuestComplaintSubmit) -> ServiceResult[GuestSubmission]:
        """
        File a complaint without an account and send a verification code.

        Returns:
            ServiceResult with the unbound complaint and the issued session
        """
        issued = {}

        def issue(complaint: Complaint) -> None:
            issued["session"] = self._issue(
                complaint, data.contact_email, data.contact_phone, self.now()
            )

        result = self.workflow.create_complaint(data, actor=None, on_created=issue)
        if not result:
            return result

        return ServiceResult.success(
            GuestSubmission(complaint=result.data, otp_session=issued["session"]),
            message="Complaint received, verification code sent",
            metadata={"sequence_code": result.data.sequence_code},
        )

    def resend(self, email: str, complaint_ref: str) -> ServiceResult[OTPSession]:
        """
        Invalidate the live code for this email and send a fresh one.

        Never creates another complaint.
        """
        try:
            with self.transaction():
                complaint = self._load_complaint(complaint_ref)
                if complaint.is_bound:
                    raise StateError(
                        "Complaint is already verified",
                        rule="complaint_already_bound",
                    )
                if (complaint.contact_email or "").lower() != email.lower():
                    raise AuthorizationError(
                        "Email does not match the complaint",
                        rule="contact_mismatch",
                    )
                session = self._issue(complaint, email, complaint.contact_phone, self.now())
        except BaseAppException as e:
            return self._refuse(e, "resend verification code")
        except Exception as e:
            return self._handle_exception(e, "resend verification code", complaint_ref)

        return ServiceResult.success(session, message="Verification code sent")

    def _issue(
        self,
        complaint: Complaint,
        email: str,
        phone: Optional[str],
        now: datetime,
    ) -> OTPSession:
        """
        Replace any live session for (email, purpose) and dispatch the code.

        Raises:
            NotificationDeliveryError: The dispatcher failed; the caller's
                transaction must roll back.
        """
        email = email.lower()
        invalidated = self.otp_sessions.invalidate_live(email, PURPOSE, now)
        code = self._generate_code()
        expiry_minutes = self.workflow.config.otp_expiry_minutes()

        session = OTPSession(
            email=email,
            phone_number=phone,
            code_hash=TokenHasher.hash_code(code, self.settings.SECRET_KEY),
            purpose=PURPOSE,
            complaint_id=complaint.id,
            expires_at=now + timedelta(minutes=expiry_minutes),
            max_attempts=self.settings.OTP_MAX_ATTEMPTS,
            created_at=now,
            updated_at=now,
        )
        self.otp_sessions.add(session)

        payload = {
            "code": code,
            "sequence_code": complaint.sequence_code,
            "expires_in_minutes": expiry_minutes,
        }
        try:
            delivered = self.dispatcher.send(email, TemplateKind.OTP_CODE, payload)
        except Exception as e:
            raise NotificationDeliveryError(
                "Verification code could not be sent",
                rule="otp_dispatch",
            ) from e
        if not delivered:
            raise NotificationDeliveryError(
                "Verification code could not be sent",
                rule="otp_dispatch",
            )

        self._logger.info(
            "Verification code issued",
            extra={
                "sequence_code": complaint.sequence_code,
                "otp_session_id": session.id,
                "invalidated_sessions": invalidated,
            },
        )
        return session

    # -------------------------------------------------------------------------
    # Phase 2
    # -------------------------------------------------------------------------

    def verify_guest(self, email: str, code: str, complaint_ref: str) -> ServiceResult[BindingResult]:
        """
        Consume a code and bind the complaint to a citizen account.

        A wrong code counts against the live session and is committed;
        an expired or already used code is refused distinctly so the
        caller can offer a resend.
        """
        email = email.lower()
        refusal: Optional[BaseAppException] = None
        binding: Optional[BindingResult] = None
        try:
            with self.transaction():
                now = self.now()
                code_hash = TokenHasher.hash_code(code, self.settings.SECRET_KEY)
                complaint = self._load_complaint(complaint_ref)
                live = self.otp_sessions.find_live(email, PURPOSE, now)

                if (
                    live is not None
                    and live.complaint_id == complaint.id
                    and TokenHasher.verify_code(code, live.code_hash, self.settings.SECRET_KEY)
                ):
                    binding = self._bind(live, complaint, email, now)
                else:
                    refusal = self._failed_attempt(live, email, code_hash, now)
        except BaseAppException as e:
            return self._refuse(e, "verify guest")
        except Exception as e:
            return self._handle_exception(e, "verify guest", complaint_ref)

        if refusal is not None:
            return self._refuse(refusal, "verify guest")

        self._notify_bound(binding)
        return ServiceResult.success(
            binding,
            message="Complaint verified",
            metadata={"is_new_user": binding.is_new_user},
        )

    def _failed_attempt(
        self,
        live: Optional[OTPSession],
        email: str,
        code_hash: str,
        now: datetime,
    ) -> BaseAppException:
        """Classify a failed verification; counts it against the live session."""
        matched = self.otp_sessions.find_latest_by_code(email, PURPOSE, code_hash)
        if matched is not None and (live is None or matched.id != live.id):
            return ExpiredOrUsedCredentialError(
                "This code has expired or was already used",
                rule="otp_single_use",
                field="code",
            )
        if live is None:
            return ExpiredOrUsedCredentialError(
                "No active verification code; request a new one",
                rule="otp_no_live_session",
                field="code",
            )

        self.otp_sessions.register_failed_attempt(live, now)
        self._logger.warning(
            "Wrong verification code",
            extra={"otp_session_id": live.id, "attempts_remaining": live.attempts_remaining},
        )
        return InvalidCredentialError(
            "Invalid verification code",
            rule="otp_match",
            field="code",
            details={"attempts_remaining": live.attempts_remaining},
        )

    def _bind(self, session: OTPSession, complaint: Complaint, email: str, now: datetime) -> BindingResult:
        if complaint.is_bound:
            raise StateError("Complaint is already verified", rule="complaint_already_bound")

        user = self.users.find_by_email(email)
        is_new_user = user is None
        if user is None:
            user = User(
                email=email,
                full_name=complaint.contact_name or email.split("@")[0],
                phone_number=session.phone_number or complaint.contact_phone,
                role=UserRole.CITIZEN,
                ward_id=complaint.ward_id,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            self.users.add(user)

        if not self.otp_sessions.mark_verified(session.id, user.id, now):
            raise ExpiredOrUsedCredentialError(
                "This code has expired or was already used",
                rule="otp_single_use",
                field="code",
            )

        complaint.submitted_by_id = user.id
        self.workflow.lifecycle.record_binding(complaint, user.id, now)
        self._logger.info(
            "Guest complaint bound",
            extra={"sequence_code": complaint.sequence_code, "user_id": user.id, "new_user": is_new_user},
        )
        return BindingResult(user=user, complaint=complaint, is_new_user=is_new_user)

    def _load_complaint(self, complaint_ref: str) -> Complaint:
        complaint = self.complaints.find_by_reference(complaint_ref, for_update=True)
        if complaint is None:
            raise ResourceNotFoundError("Complaint")
        return complaint

    def _notify_bound(self, binding: BindingResult) -> None:
        complaint = binding.complaint
        payload = {
            "sequence_code": complaint.sequence_code,
            "type": complaint.type,
            "priority": complaint.priority.value,
        }
        for officer in self.users.find_active_staff(UserRole.WARD_OFFICER, complaint.ward_id):
            notify_quietly(self.dispatcher, officer.email, TemplateKind.VERIFIED_COMPLAINT, payload)
        if binding.is_new_user:
            notify_quietly(
                self.dispatcher,
                binding.user.email,
                TemplateKind.WELCOME,
                {"full_name": binding.user.full_name, "sequence_code": complaint.sequence_code},
            )
