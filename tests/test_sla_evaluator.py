from __future__ import annotations

from datetime import timedelta

from civicdesk.models.base.enums import ComplaintStatus, SlaStatus
from civicdesk.services.complaint.sla_evaluator import SlaEvaluator, evaluate_sla

from .conftest import T0, complaint_data

DEADLINE = T0 + timedelta(hours=48)


def test_on_time_outside_warning_window() -> None:
    assert evaluate_sla(DEADLINE, T0, ComplaintStatus.REGISTERED) == SlaStatus.ON_TIME


def test_warning_inside_window_and_at_boundary() -> None:
    assert evaluate_sla(DEADLINE, DEADLINE - timedelta(hours=24), ComplaintStatus.ASSIGNED) == SlaStatus.WARNING
    assert evaluate_sla(DEADLINE, DEADLINE - timedelta(hours=1), ComplaintStatus.ASSIGNED) == SlaStatus.WARNING
    assert evaluate_sla(DEADLINE, DEADLINE, ComplaintStatus.ASSIGNED) == SlaStatus.WARNING


def test_overdue_past_deadline() -> None:
    assert evaluate_sla(DEADLINE, DEADLINE + timedelta(seconds=1), ComplaintStatus.IN_PROGRESS) == SlaStatus.OVERDUE


def test_completed_ignores_deadline() -> None:
    late = DEADLINE + timedelta(days=10)
    assert evaluate_sla(DEADLINE, late, ComplaintStatus.RESOLVED) == SlaStatus.COMPLETED
    assert evaluate_sla(DEADLINE, late, ComplaintStatus.CLOSED) == SlaStatus.COMPLETED
    assert evaluate_sla(DEADLINE, late, ComplaintStatus.REOPENED) == SlaStatus.OVERDUE


def test_warning_window_is_configurable() -> None:
    evaluator = SlaEvaluator(timedelta(hours=2))
    assert evaluator.evaluate(DEADLINE, DEADLINE - timedelta(hours=3), ComplaintStatus.ASSIGNED) == SlaStatus.ON_TIME
    assert evaluator.evaluate(DEADLINE, DEADLINE - timedelta(hours=1), ComplaintStatus.ASSIGNED) == SlaStatus.WARNING


def test_evaluation_is_pure(workflow, seed, clock) -> None:
    complaint = workflow.create_complaint(complaint_data(seed.ward.id), seed.principal(seed.citizen)).data
    cached = complaint.sla_status

    clock.advance(hours=30)
    assert workflow.evaluate_sla(complaint) == SlaStatus.OVERDUE
    assert workflow.evaluate_sla(complaint) == SlaStatus.OVERDUE
    assert complaint.sla_status == cached


def test_water_supply_deadline_scenario(workflow, seed, clock) -> None:
    complaint = workflow.create_complaint(complaint_data(seed.ward.id), seed.principal(seed.citizen)).data

    assert complaint.deadline == T0 + timedelta(hours=24)
    assert workflow.evaluate_sla(complaint, T0 + timedelta(hours=23)) == SlaStatus.WARNING
    assert workflow.evaluate_sla(complaint, T0 + timedelta(hours=25)) == SlaStatus.OVERDUE


def test_get_complaint_refreshes_cached_status(workflow, seed, clock) -> None:
    complaint = workflow.create_complaint(complaint_data(seed.ward.id), seed.principal(seed.citizen)).data
    assert complaint.sla_status == SlaStatus.WARNING

    clock.advance(hours=25)
    result = workflow.get_complaint(complaint.id, seed.principal(seed.admin))

    assert result.is_success
    assert result.data.sla_status == SlaStatus.OVERDUE
