"""Success criterion endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from hypolab.api.deps import WorkflowDep
from hypolab.api.schemas import ActualValueRequest
from hypolab.models.hypothesis import SuccessCriteria

router = APIRouter(prefix="/success-criteria", tags=["success-criteria"])


@router.patch("/{criterion_id}", response_model=SuccessCriteria)
def record_actual_value(
    criterion_id: int,
    request: ActualValueRequest,
    workflow: WorkflowDep,
) -> SuccessCriteria:
    return workflow.record_actual_value(criterion_id, request.actual_value)
