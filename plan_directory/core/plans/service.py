"""
Plan Service

Business logic layer for plan management: validation and default filling
ahead of every write, and the merge policy for updates.
"""

from typing import Any, Dict, List

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from plan_directory.config import logger
from plan_directory.core.plans.exceptions import PlanNotFoundError, PlanValidationError
from plan_directory.core.plans.models import Plan, PlanFeatureSet, utcnow
from plan_directory.core.plans.repository import PlanRepository

REQUIRED_FIELDS_MESSAGE = "Plan name and price are required"

# Optional fields that fall back to their default when explicitly cleared
DEFAULTED_FIELDS = frozenset({
    "currency",
    "interval",
    "features",
    "limits",
    "is_active",
    "is_popular",
    "sort_order",
})


def _describe(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(loc) for loc in err.get("loc", []))
    message = err.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


class PlanService:
    """
    Service layer for plan management operations.

    Keeps validation separate from data access.
    """

    def __init__(self, repository: PlanRepository):
        self._repo = repository

    def list_plans(self, active_only: bool = False, popular_only: bool = False) -> List[Plan]:
        return self._repo.get_all(active_only=active_only, popular_only=popular_only)

    def get_plan(self, plan_id: str) -> Plan:
        plan = self._repo.get_by_id(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        return plan

    def get_plan_features(self, plan_id: str) -> PlanFeatureSet:
        feature_set = self._repo.get_features(plan_id)
        if feature_set is None:
            raise PlanNotFoundError(plan_id)
        return feature_set

    def create_plan(self, payload: BaseModel) -> Plan:
        """
        Create a new plan with every omitted field set to its default.

        Args:
            payload: Request model whose fields are named like those of ``Plan``

        Raises:
            PlanValidationError: If name or price is missing or a field is invalid
        """
        data = payload.model_dump(exclude_none=True)
        if not data.get("name") or data.get("price") is None:
            raise PlanValidationError(REQUIRED_FIELDS_MESSAGE)

        now = utcnow()
        try:
            plan = Plan(**data, created_at=now, updated_at=now)
        except PydanticValidationError as e:
            raise PlanValidationError(_describe(e)) from e

        return self._repo.create(plan)

    def update_plan(self, plan_id: str, payload: BaseModel) -> Plan:
        """
        Update an existing plan.

        Only the fields present in the request are written; omitted fields keep
        their stored values. A null optional field is cleared, a null defaulted
        field is reset to its default, and a null name or price is rejected.

        Raises:
            PlanValidationError: If the merged plan is invalid
            PlanNotFoundError: If the id does not resolve
        """
        updates: Dict[str, Any] = payload.model_dump(exclude_unset=True)

        if "name" in updates and not updates["name"]:
            raise PlanValidationError(REQUIRED_FIELDS_MESSAGE)
        if "price" in updates and updates["price"] is None:
            raise PlanValidationError(REQUIRED_FIELDS_MESSAGE)

        for key, value in updates.items():
            if value is None and key in DEFAULTED_FIELDS:
                updates[key] = Plan.model_fields[key].get_default(call_default_factory=True)

        existing = self.get_plan(plan_id)

        try:
            merged = Plan(**{**existing.model_dump(), **updates})
        except PydanticValidationError as e:
            raise PlanValidationError(_describe(e)) from e

        document = merged.to_firestore_dict()
        changes = {key: document[key] for key in updates if key in document}

        plan = self._repo.update(plan_id, changes)
        if plan is None:
            raise PlanNotFoundError(plan_id)

        logger.debug("Plan %s updated fields: %s", plan_id, sorted(changes))
        return plan

    def delete_plan(self, plan_id: str) -> Plan:
        """Soft delete: the plan stays readable with ``is_active`` cleared."""
        plan = self._repo.soft_delete(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        return plan
