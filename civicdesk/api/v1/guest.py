"""
Guest submission, verification and tracking endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import ValidationError as PydanticValidationError

from civicdesk.api import deps
from civicdesk.api.errors import unwrap_or_raise
from civicdesk.core.exceptions import ValidationError
from civicdesk.schemas.complaint import ComplaintResponse, PublicComplaintView
from civicdesk.schemas.guest import (
    CitizenSummary,
    GuestComplaintSubmit,
    GuestResendRequest,
    GuestSubmitResponse,
    GuestVerifyRequest,
    GuestVerifyResponse,
    OTPIssuedResponse,
    TrackComplaintQuery,
)
from civicdesk.services.auth.identity_binder import IdentityBinder
from civicdesk.services.complaint.tracking_service import TrackingService

router = APIRouter(prefix="/guest", tags=["Guest"])


@router.post("/complaints", response_model=GuestSubmitResponse, status_code=status.HTTP_201_CREATED)
def submit_guest_complaint(
    payload: GuestComplaintSubmit,
    binder: IdentityBinder = Depends(deps.get_identity_binder),
) -> GuestSubmitResponse:
    submission = unwrap_or_raise(binder.submit_guest(payload))
    return GuestSubmitResponse(
        complaint_id=submission.complaint.id,
        sequence_code=submission.complaint.sequence_code,
        otp_session_id=submission.otp_session.id,
        otp_expires_at=submission.otp_session.expires_at,
    )


@router.post("/verify", response_model=GuestVerifyResponse)
def verify_guest(
    payload: GuestVerifyRequest,
    binder: IdentityBinder = Depends(deps.get_identity_binder),
) -> GuestVerifyResponse:
    binding = unwrap_or_raise(binder.verify_guest(payload.email, payload.code, payload.complaint_id))
    return GuestVerifyResponse(
        user=CitizenSummary.model_validate(binding.user),
        complaint=ComplaintResponse.model_validate(binding.complaint),
        is_new_user=binding.is_new_user,
    )


@router.post("/resend", response_model=OTPIssuedResponse)
def resend_code(
    payload: GuestResendRequest,
    binder: IdentityBinder = Depends(deps.get_identity_binder),
) -> OTPIssuedResponse:
    session = unwrap_or_raise(binder.resend(payload.email, payload.complaint_id))
    return OTPIssuedResponse(otp_session_id=session.id, otp_expires_at=session.expires_at)


@router.get("/track/{sequence_code}", response_model=PublicComplaintView)
def track_complaint(
    sequence_code: str,
    email: Optional[str] = Query(default=None),
    phone: Optional[str] = Query(default=None),
    service: TrackingService = Depends(deps.get_tracking_service),
):
    try:
        query = TrackComplaintQuery(email=email, phone=phone)
    except PydanticValidationError as e:
        raise ValidationError(
            "Provide the email or phone number used when filing",
            rule="contact_required",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
    return unwrap_or_raise(service.track(sequence_code, email=query.email, phone=query.phone))
