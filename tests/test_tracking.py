from __future__ import annotations

from datetime import timedelta

import pytest

from civicdesk.config.settings import Settings
from civicdesk.models.base.enums import ComplaintStatus, SlaStatus
from civicdesk.services.base.service_result import ErrorCode
from civicdesk.services.complaint.tracking_service import TrackingService
from civicdesk.services.complaint.workflow_service import WorkflowService

from .conftest import complaint_data


@pytest.fixture()
def tracking(db_session, clock) -> TrackingService:
    return TrackingService(db_session, clock)


@pytest.fixture()
def filed(workflow, seed):
    data = complaint_data(seed.ward.id, contact_email="caller@example.com", contact_phone="9876543210")
    return workflow.create_complaint(data, seed.principal(seed.citizen)).data


def test_track_by_contact_email(tracking, filed, seed) -> None:
    result = tracking.track(filed.sequence_code.lower(), email="CALLER@example.com")

    assert result.is_success
    view = result.data
    assert view.sequence_code == filed.sequence_code
    assert view.status == ComplaintStatus.REGISTERED
    assert view.ward_name == seed.ward.name
    assert view.is_verified
    assert [entry.to_status for entry in view.history] == [ComplaintStatus.REGISTERED]


def test_track_by_phone_or_submitter_email(tracking, filed, seed) -> None:
    assert tracking.track(filed.sequence_code, phone="9876543210").is_success
    assert tracking.track(filed.sequence_code, email=seed.citizen.email).is_success


def test_contact_mismatch_looks_like_unknown_code(tracking, filed) -> None:
    mismatch = tracking.track(filed.sequence_code, email="stranger@example.com")
    unknown = tracking.track("KSC9999", email="caller@example.com")

    assert mismatch.error_code == ErrorCode.NOT_FOUND
    assert unknown.error_code == ErrorCode.NOT_FOUND
    assert mismatch.error.message == unknown.error.message


def test_tracked_sla_is_current(tracking, filed, clock) -> None:
    clock.advance(hours=25)

    view = tracking.track(filed.sequence_code, email="caller@example.com").data

    assert view.sla_status == SlaStatus.OVERDUE
    assert view.deadline == filed.deadline
    assert view.submitted_at == filed.created_at
    assert view.deadline - view.submitted_at == timedelta(hours=24)


def test_tracking_and_reads_share_the_warning_window(db_session, config, dispatcher, captcha, clock, seed) -> None:
    narrow = Settings(SLA_WARNING_WINDOW_HOURS=2)
    workflow = WorkflowService(
        db_session,
        config=config,
        dispatcher=dispatcher,
        captcha=captcha,
        clock=clock,
        app_settings=narrow,
        sleep=lambda seconds: None,
    )
    data = complaint_data(seed.ward.id, contact_email="caller@example.com")
    complaint = workflow.create_complaint(data, seed.principal(seed.citizen)).data
    clock.advance(hours=12)

    read = workflow.get_complaint(complaint.id, seed.principal(seed.admin)).data
    tracked = TrackingService(db_session, clock, app_settings=narrow).track(
        complaint.sequence_code, email="caller@example.com"
    ).data

    assert read.sla_status == SlaStatus.ON_TIME
    assert tracked.sla_status == SlaStatus.ON_TIME
