from civicdesk.schemas.guest.guest_complaint import (
    CitizenSummary,
    GuestComplaintSubmit,
    GuestResendRequest,
    GuestSubmitResponse,
    GuestVerifyRequest,
    GuestVerifyResponse,
    OTPIssuedResponse,
    TrackComplaintQuery,
)

__all__ = [
    "CitizenSummary",
    "GuestComplaintSubmit",
    "GuestResendRequest",
    "GuestSubmitResponse",
    "GuestVerifyRequest",
    "GuestVerifyResponse",
    "OTPIssuedResponse",
    "TrackComplaintQuery",
]
