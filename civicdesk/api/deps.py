"""
FastAPI dependencies.

Example usage in a router:
    from fastapi import Depends, APIRouter
    from civicdesk.api import deps

    @router.get("/complaints/{complaint_id}")
    def read(service = Depends(deps.get_workflow_service),
             actor = Depends(deps.get_current_principal)):
        ...
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from civicdesk.core.exceptions import AuthorizationError
from civicdesk.core.logging import actor_id as actor_id_var
from civicdesk.db.session import get_db
from civicdesk.repositories.user.user_repository import UserRepository
from civicdesk.services.auth.identity_binder import IdentityBinder
from civicdesk.services.base.notification_dispatcher import (
    LoggingNotificationDispatcher,
    NotificationDispatcher,
)
from civicdesk.services.captcha.captcha_service import CaptchaService, get_captcha_service
from civicdesk.services.common.permissions import Principal
from civicdesk.services.complaint.tracking_service import TrackingService
from civicdesk.services.complaint.workflow_service import WorkflowService
from civicdesk.services.system.config_provider import ConfigProvider, DatabaseConfigProvider

_dispatcher = LoggingNotificationDispatcher()


# --- Collaborators ----------------------------------------------------------------

def get_dispatcher() -> NotificationDispatcher:
    return _dispatcher


def get_captcha() -> CaptchaService:
    return get_captcha_service()


def get_config_provider(db: Session = Depends(get_db)) -> ConfigProvider:
    return DatabaseConfigProvider(db)


# --- Services --------------------------------------------------------------------

def get_workflow_service(
    db: Session = Depends(get_db),
    config: ConfigProvider = Depends(get_config_provider),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    captcha: CaptchaService = Depends(get_captcha),
) -> WorkflowService:
    return WorkflowService(db, config=config, dispatcher=dispatcher, captcha=captcha)


def get_identity_binder(
    db: Session = Depends(get_db),
    workflow: WorkflowService = Depends(get_workflow_service),
) -> IdentityBinder:
    return IdentityBinder(db, workflow)


def get_tracking_service(db: Session = Depends(get_db)) -> TrackingService:
    return TrackingService(db)


# --- Acting user -----------------------------------------------------------------

def _principal_for(db: Session, user_id: str) -> Principal:
    user = UserRepository(db).find_by_id(user_id)
    if user is None or not user.is_active:
        raise AuthorizationError("Unknown or inactive user", rule="actor_active")
    actor_id_var.set(user.id)
    return Principal.from_user(user)


async def get_optional_principal(
    db: Session = Depends(get_db),
    x_user_id: Optional[str] = Header(default=None),
) -> Optional[Principal]:
    """
    The acting user, or None for anonymous callers.

    Async so the actor id bound to the logging context stays visible to
    the endpoint and the services it calls.
    """
    if not x_user_id:
        return None
    return _principal_for(db, x_user_id)


async def get_current_principal(
    db: Session = Depends(get_db),
    x_user_id: Optional[str] = Header(default=None),
) -> Principal:
    """Authentication happens upstream; the gateway forwards X-User-Id."""
    if not x_user_id:
        raise AuthorizationError("Authentication required", rule="actor_required")
    return _principal_for(db, x_user_id)


__all__ = [
    "get_db",
    "get_dispatcher",
    "get_captcha",
    "get_config_provider",
    "get_workflow_service",
    "get_identity_binder",
    "get_tracking_service",
    "get_optional_principal",
    "get_current_principal",
]
