"""
Plan Management Module

Plan records backed by Firestore, with validation and default filling
ahead of every write.
"""

from plan_directory.core.plans.models import Plan, PlanFeature, PlanFeatureSet, PlanInterval, PlanLimits
from plan_directory.core.plans.exceptions import (
    PlanError,
    PlanNotFoundError,
    PlanRepositoryError,
    PlanValidationError,
)
from plan_directory.core.plans.repository import PlanRepository
from plan_directory.core.plans.service import PlanService

__all__ = [
    "Plan",
    "PlanFeature",
    "PlanFeatureSet",
    "PlanInterval",
    "PlanLimits",
    "PlanError",
    "PlanNotFoundError",
    "PlanRepositoryError",
    "PlanValidationError",
    "PlanRepository",
    "PlanService",
]
