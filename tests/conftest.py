from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterator, List, Optional, Set

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from civicdesk.api import deps
from civicdesk.db.init_db import init_db
from civicdesk.main import create_app
from civicdesk.models.base.enums import UserRole
from civicdesk.models.user.user import User
from civicdesk.models.ward.ward import Ward
from civicdesk.schemas.complaint.complaint_base import ComplaintCreate
from civicdesk.services.auth.identity_binder import IdentityBinder
from civicdesk.services.base.notification_dispatcher import NotificationDispatcher, TemplateKind
from civicdesk.services.cache.ttl_store import TTLStore
from civicdesk.services.captcha.captcha_service import CaptchaService
from civicdesk.services.common.permissions import Principal
from civicdesk.services.complaint.workflow_service import WorkflowService
from civicdesk.services.system.config_provider import SequenceFormat, StaticConfigProvider

T0 = datetime(2024, 3, 1, 9, 0, 0)
CAPTCHA_TEXT = "AB3CD"


class FrozenClock:
    """Naive-UTC clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@dataclass
class SentNotification:
    recipient: str
    template_kind: TemplateKind
    payload: Dict[str, Any]


class RecordingNotificationDispatcher(NotificationDispatcher):
    """Keeps every send; templates listed in `fail_for` report failure."""

    def __init__(self) -> None:
        self.sent: List[SentNotification] = []
        self.fail_for: Set[TemplateKind] = set()

    def send(self, recipient: str, template_kind: TemplateKind, payload: Dict[str, Any]) -> bool:
        if template_kind in self.fail_for:
            return False
        self.sent.append(SentNotification(recipient, template_kind, dict(payload)))
        return True

    def of_kind(self, template_kind: TemplateKind) -> List[SentNotification]:
        return [n for n in self.sent if n.template_kind == template_kind]

    def recipients(self, template_kind: TemplateKind) -> List[str]:
        return [n.recipient for n in self.of_kind(template_kind)]


# --- Database -----------------------------------------------------------------------

@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine) -> Iterator[Session]:
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = factory()
    try:
        yield session
    finally:
        session.close()


# --- Seed data ----------------------------------------------------------------------

@dataclass
class Seed:
    ward: Ward
    other_ward: Ward
    empty_ward: Ward
    admin: User
    officer: User
    other_officer: User
    maintainer: User
    other_maintainer: User
    citizen: User

    def principal(self, user: User) -> Principal:
        return Principal.from_user(user)


def make_user(
    session: Session,
    email: str,
    role: UserRole,
    ward: Optional[Ward] = None,
    created_at: datetime = T0,
    is_active: bool = True,
) -> User:
    user = User(
        email=email,
        full_name=email.split("@")[0].replace(".", " ").title(),
        role=role,
        ward_id=ward.id if ward is not None else None,
        is_active=is_active,
        created_at=created_at,
        updated_at=created_at,
    )
    session.add(user)
    session.flush()
    return user


@pytest.fixture()
def seed(db_session: Session) -> Seed:
    ward = Ward(name="Ward 1")
    other_ward = Ward(name="Ward 2")
    empty_ward = Ward(name="Ward 3")
    db_session.add_all([ward, other_ward, empty_ward])
    db_session.flush()

    day = timedelta(days=1)
    data = Seed(
        ward=ward,
        other_ward=other_ward,
        empty_ward=empty_ward,
        admin=make_user(db_session, "admin@city.gov", UserRole.ADMINISTRATOR, created_at=T0 - 30 * day),
        officer=make_user(db_session, "officer.one@city.gov", UserRole.WARD_OFFICER, ward, T0 - 20 * day),
        other_officer=make_user(db_session, "officer.two@city.gov", UserRole.WARD_OFFICER, other_ward, T0 - 19 * day),
        maintainer=make_user(db_session, "crew.one@city.gov", UserRole.MAINTENANCE_TEAM, ward, T0 - 10 * day),
        other_maintainer=make_user(
            db_session, "crew.two@city.gov", UserRole.MAINTENANCE_TEAM, other_ward, T0 - 9 * day
        ),
        citizen=make_user(db_session, "resident@example.com", UserRole.CITIZEN, ward, T0 - 5 * day),
    )
    db_session.commit()
    return data


# --- Services -----------------------------------------------------------------------

@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def dispatcher() -> RecordingNotificationDispatcher:
    return RecordingNotificationDispatcher()


@pytest.fixture()
def config() -> StaticConfigProvider:
    return StaticConfigProvider(
        sequence_format=SequenceFormat("KSC", 1, 4),
        complaint_types={"WATER_SUPPLY": 24, "STREET_LIGHT": 72},
    )


@pytest.fixture()
def redis_client() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture()
def captcha(clock: FrozenClock, redis_client) -> CaptchaService:
    return CaptchaService(
        store=TTLStore(redis_client, clock, prefix="test:captcha:"),
        ttl_seconds=300,
        length=5,
        text_generator=lambda length: CAPTCHA_TEXT,
    )


@pytest.fixture()
def workflow(db_session, config, dispatcher, captcha, clock) -> WorkflowService:
    return WorkflowService(
        db_session,
        config=config,
        dispatcher=dispatcher,
        captcha=captcha,
        clock=clock,
        sleep=lambda seconds: None,
    )


@pytest.fixture()
def binder(db_session, workflow) -> IdentityBinder:
    return IdentityBinder(db_session, workflow, code_generator=lambda: "123456")


def complaint_data(ward_id: str, **overrides) -> ComplaintCreate:
    fields = {
        "type": "WATER_SUPPLY",
        "description": "No water supply since yesterday morning",
        "ward_id": ward_id,
        "area": "Market Road",
    }
    fields.update(overrides)
    return ComplaintCreate(**fields)


# --- HTTP ---------------------------------------------------------------------------

@pytest.fixture()
def client(db_session, config, dispatcher, captcha) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[deps.get_db] = lambda: db_session
    app.dependency_overrides[deps.get_config_provider] = lambda: config
    app.dependency_overrides[deps.get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[deps.get_captcha] = lambda: captcha
    yield TestClient(app)
    app.dependency_overrides.clear()
