from civicdesk.services.common.permissions import (
    ROLE_CAPABILITIES,
    Capability,
    Principal,
    can_transition,
    can_view,
    check_transition,
)

__all__ = [
    "ROLE_CAPABILITIES",
    "Capability",
    "Principal",
    "can_transition",
    "can_view",
    "check_transition",
]
