"""
Complaint endpoints for authenticated users (and public creation).
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from civicdesk.api import deps
from civicdesk.api.errors import unwrap_or_raise
from civicdesk.schemas.complaint import (
    ComplaintCreate,
    ComplaintReopenRequest,
    ComplaintResponse,
    ComplaintTransitionRequest,
)
from civicdesk.services.common.permissions import Principal
from civicdesk.services.complaint.lifecycle_machine import AssignmentFields
from civicdesk.services.complaint.workflow_service import WorkflowService

router = APIRouter(prefix="/complaints", tags=["Complaints"])


@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
def create_complaint(
    payload: ComplaintCreate,
    actor: Optional[Principal] = Depends(deps.get_optional_principal),
    service: WorkflowService = Depends(deps.get_workflow_service),
):
    """File a complaint; anonymous callers must answer a CAPTCHA."""
    return unwrap_or_raise(service.create_complaint(payload, actor))


@router.get("/{complaint_id}", response_model=ComplaintResponse)
def get_complaint(
    complaint_id: str,
    actor: Principal = Depends(deps.get_current_principal),
    service: WorkflowService = Depends(deps.get_workflow_service),
):
    return unwrap_or_raise(service.get_complaint(complaint_id, actor))


@router.post("/{complaint_id}/transition", response_model=ComplaintResponse)
def transition_complaint(
    complaint_id: str,
    payload: ComplaintTransitionRequest,
    actor: Principal = Depends(deps.get_current_principal),
    service: WorkflowService = Depends(deps.get_workflow_service),
):
    assignment = AssignmentFields(
        ward_officer_id=payload.ward_officer_id,
        maintenance_team_id=payload.maintenance_team_id,
    )
    result = service.transition_complaint(
        complaint_id, payload.status, actor, assignment=assignment, comment=payload.comment
    )
    return unwrap_or_raise(result)


@router.post("/{complaint_id}/reopen", response_model=ComplaintResponse)
def reopen_complaint(
    complaint_id: str,
    payload: Optional[ComplaintReopenRequest] = None,
    actor: Principal = Depends(deps.get_current_principal),
    service: WorkflowService = Depends(deps.get_workflow_service),
):
    comment = payload.comment if payload is not None else None
    return unwrap_or_raise(service.reopen_complaint(complaint_id, actor, comment))
