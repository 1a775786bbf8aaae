"""
Plan exceptions for clean error handling.

Each exception maps onto one response class of the HTTP surface.
"""


class PlanError(Exception):
    """Base exception for all plan errors."""
    pass


class PlanValidationError(PlanError):
    """Raised when a plan payload fails validation."""
    pass


class PlanNotFoundError(PlanError):
    """Raised when a plan id does not resolve to a stored plan."""

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Plan '{plan_id}' not found")


class PlanRepositoryError(PlanError):
    """Raised when the underlying document store fails."""
    pass
