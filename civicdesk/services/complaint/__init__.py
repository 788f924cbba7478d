"""
Complaint workflow engine.
"""

from civicdesk.services.complaint.assignment_balancer import AssignmentBalancer
from civicdesk.services.complaint.lifecycle_machine import (
    TRANSITIONS,
    AssignmentFields,
    LifecycleMachine,
    TransitionOutcome,
)
from civicdesk.services.complaint.sequence_allocator import SequenceAllocator
from civicdesk.services.complaint.sla_evaluator import SlaEvaluator, evaluate_sla
from civicdesk.services.complaint.tracking_service import TrackingService
from civicdesk.services.complaint.workflow_service import CreationOutcome, WorkflowService

__all__ = [
    "TRANSITIONS",
    "AssignmentBalancer",
    "AssignmentFields",
    "CreationOutcome",
    "LifecycleMachine",
    "SequenceAllocator",
    "SlaEvaluator",
    "TrackingService",
    "TransitionOutcome",
    "WorkflowService",
    "evaluate_sla",
]
