from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

from plan_directory.config import logger
from plan_directory.core.plans import PlanRepositoryError, PlanService
from plan_directory.responses import error_response, success
from plan_directory.routers.deps import get_plan_service
from plan_directory.schemas import ErrorResponse, MessageResponse, PlanCreateRequest, PlanUpdateRequest

router = APIRouter(
    prefix="/api/plans",
    tags=["Plans"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)

# PlanValidationError and PlanNotFoundError are mapped to 400/404 by the
# application's exception handlers; storage faults get a per-route message.


@router.get("")
def list_plans(
    active: Optional[str] = None,
    popular: Optional[str] = None,
    service: PlanService = Depends(get_plan_service),
) -> Dict[str, Any]:
    """List plans, optionally only active and/or popular ones."""
    try:
        plans = service.list_plans(active_only=active == "true", popular_only=popular == "true")
    except PlanRepositoryError:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch plans")

    return success([plan.to_response() for plan in plans], count=len(plans))


@router.get("/{plan_id}")
def get_plan(
    plan_id: str,
    service: PlanService = Depends(get_plan_service),
) -> Dict[str, Any]:
    """Get a specific plan by ID."""
    try:
        plan = service.get_plan(plan_id)
    except PlanRepositoryError:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch plan")

    return success(plan.to_response())


@router.post("", status_code=status.HTTP_201_CREATED)
def create_plan(
    payload: Optional[PlanCreateRequest] = None,
    service: PlanService = Depends(get_plan_service),
) -> Dict[str, Any]:
    """Create a new plan. Omitted fields take their defaults."""
    try:
        plan = service.create_plan(payload or PlanCreateRequest())
    except PlanRepositoryError:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create plan")

    logger.info("Plan '%s' created with id %s", plan.name, plan.id)
    return success(plan.to_response())


@router.put("/{plan_id}")
def update_plan(
    plan_id: str,
    payload: Optional[PlanUpdateRequest] = None,
    service: PlanService = Depends(get_plan_service),
) -> Dict[str, Any]:
    """Update an existing plan. Fields left out of the body are kept."""
    try:
        plan = service.update_plan(plan_id, payload or PlanUpdateRequest())
    except PlanRepositoryError:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update plan")

    return success(plan.to_response())


@router.delete("/{plan_id}", response_model=MessageResponse)
def delete_plan(
    plan_id: str,
    service: PlanService = Depends(get_plan_service),
) -> MessageResponse:
    """Soft delete a plan."""
    try:
        service.delete_plan(plan_id)
    except PlanRepositoryError:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete plan")

    logger.info("Plan %s deactivated", plan_id)
    return MessageResponse(message="Plan deleted successfully")


@router.get("/{plan_id}/features")
def get_plan_features(
    plan_id: str,
    service: PlanService = Depends(get_plan_service),
) -> Dict[str, Any]:
    """Get only the features and limits of a plan."""
    try:
        feature_set = service.get_plan_features(plan_id)
    except PlanRepositoryError:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch plan features")

    return success(feature_set.to_response())
