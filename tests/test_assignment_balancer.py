from __future__ import annotations

from datetime import timedelta

from civicdesk.models.base.enums import ComplaintStatus, UserRole
from civicdesk.models.complaint.complaint import Complaint
from civicdesk.services.base.notification_dispatcher import TemplateKind
from civicdesk.services.complaint.workflow_service import WorkflowService
from civicdesk.services.system.config_provider import StaticConfigProvider

from .conftest import T0, complaint_data, make_user


def _open_complaints(
    db_session, ward, officer, count, status=ComplaintStatus.ASSIGNED, start=0, column="ward_officer_id"
):
    for n in range(count):
        db_session.add(
            Complaint(
                sequence_code=f"SEED{start + n:04d}",
                type="WATER_SUPPLY",
                description="Seeded workload complaint",
                status=status,
                deadline=T0 + timedelta(days=2),
                ward_id=ward.id,
                **{column: officer.id},
            )
        )
    db_session.commit()


def test_least_loaded_officer_wins(workflow, seed, db_session) -> None:
    newer = make_user(db_session, "officer.three@city.gov", UserRole.WARD_OFFICER, seed.ward, T0 - timedelta(days=1))
    _open_complaints(db_session, seed.ward, seed.officer, 5)
    _open_complaints(db_session, seed.ward, newer, 2, start=10)

    chosen = workflow.balancer.select_assignee(seed.ward.id, UserRole.WARD_OFFICER)

    assert chosen.id == newer.id


def test_tie_goes_to_oldest_account(workflow, seed, db_session) -> None:
    newer = make_user(db_session, "officer.three@city.gov", UserRole.WARD_OFFICER, seed.ward, T0 - timedelta(days=1))
    _open_complaints(db_session, seed.ward, seed.officer, 1)
    _open_complaints(db_session, seed.ward, newer, 1, start=10)

    chosen = workflow.balancer.select_assignee(seed.ward.id, UserRole.WARD_OFFICER)

    assert chosen.id == seed.officer.id


def test_closed_work_is_not_load(workflow, seed, db_session) -> None:
    newer = make_user(db_session, "officer.three@city.gov", UserRole.WARD_OFFICER, seed.ward, T0 - timedelta(days=1))
    _open_complaints(db_session, seed.ward, seed.officer, 3, status=ComplaintStatus.CLOSED)
    _open_complaints(db_session, seed.ward, newer, 1, start=10)

    chosen = workflow.balancer.select_assignee(seed.ward.id, UserRole.WARD_OFFICER)

    assert chosen.id == seed.officer.id


def test_inactive_and_other_ward_staff_ignored(workflow, seed, db_session) -> None:
    seed.officer.is_active = False
    db_session.commit()

    assert workflow.balancer.select_assignee(seed.ward.id, UserRole.WARD_OFFICER) is None
    assert workflow.balancer.select_assignee(seed.other_ward.id, UserRole.WARD_OFFICER).id == seed.other_officer.id


def test_unassignable_complaint_is_broadcast(workflow, seed, dispatcher) -> None:
    result = workflow.create_complaint(complaint_data(seed.empty_ward.id), seed.principal(seed.citizen))

    assert result.is_success
    assert result.data.ward_officer_id is None
    assert result.metadata["auto_assigned"] is False
    assert dispatcher.recipients(TemplateKind.UNASSIGNED_BROADCAST) == [seed.admin.email]


def test_broadcast_stays_within_ward_staff(workflow, seed, dispatcher, db_session) -> None:
    seed.officer.is_active = False
    db_session.commit()

    workflow.create_complaint(complaint_data(seed.ward.id), seed.principal(seed.citizen))

    assert dispatcher.recipients(TemplateKind.UNASSIGNED_BROADCAST) == [seed.maintainer.email]


def test_auto_assign_can_be_disabled(db_session, seed, dispatcher, captcha, clock) -> None:
    workflow = WorkflowService(
        db_session,
        config=StaticConfigProvider(complaint_types={"WATER_SUPPLY": 24}, auto_assign=False),
        dispatcher=dispatcher,
        captcha=captcha,
        clock=clock,
    )

    result = workflow.create_complaint(complaint_data(seed.ward.id), seed.principal(seed.citizen))

    assert result.data.ward_officer_id is None
    assert dispatcher.sent == []


def test_maintenance_staff_balanced_per_ward(workflow, seed, db_session) -> None:
    day = timedelta(days=1)
    crew_three = make_user(db_session, "crew.three@city.gov", UserRole.MAINTENANCE_TEAM, seed.ward, T0 - day)
    crew_four = make_user(db_session, "crew.four@city.gov", UserRole.MAINTENANCE_TEAM, seed.other_ward, T0 - day)
    crew = {"column": "maintenance_team_id"}
    _open_complaints(db_session, seed.ward, seed.maintainer, 5, **crew)
    _open_complaints(db_session, seed.ward, crew_three, 2, start=10, **crew)
    _open_complaints(db_session, seed.other_ward, seed.other_maintainer, 1, start=20, **crew)
    _open_complaints(db_session, seed.other_ward, crew_four, 1, start=30, **crew)

    assert workflow.balancer.select_assignee(seed.ward.id, UserRole.MAINTENANCE_TEAM).id == crew_three.id
    assert workflow.balancer.select_assignee(seed.other_ward.id, UserRole.MAINTENANCE_TEAM).id == seed.other_maintainer.id
