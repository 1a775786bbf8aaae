"""
Plan Repository

Data access layer for plan documents in Firestore.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google.api_core.exceptions import NotFound
from google.cloud import firestore
from google.cloud.firestore_v1 import FieldFilter

from plan_directory.config import PLANS_COLLECTION, logger
from plan_directory.core.plans.exceptions import PlanRepositoryError
from plan_directory.core.plans.models import Plan, PlanFeatureSet

# Firestore document id constraints
MAX_DOCUMENT_ID_BYTES = 1500

PING_TIMEOUT_SECONDS = 5.0


def is_valid_document_id(plan_id: Optional[str]) -> bool:
    """Check a candidate id against Firestore's document id rules."""
    if not plan_id or not isinstance(plan_id, str):
        return False
    if "/" in plan_id or plan_id in (".", ".."):
        return False
    if plan_id.startswith("__") and plan_id.endswith("__"):
        return False
    return len(plan_id.encode("utf-8")) <= MAX_DOCUMENT_ID_BYTES


class PlanRepository:
    """
    Repository for plan documents.

    The Firestore client is injected so that the process owns exactly one
    client, created at startup, and tests can substitute their own.
    """

    def __init__(self, client: firestore.Client, collection_name: str = PLANS_COLLECTION):
        self.client = client
        self.collection_name = collection_name

    @property
    def collection(self) -> firestore.CollectionReference:
        return self.client.collection(self.collection_name)

    def _document(self, plan_id: str) -> Optional[firestore.DocumentReference]:
        if not is_valid_document_id(plan_id):
            logger.debug("Rejected malformed plan id %r", plan_id)
            return None
        return self.collection.document(plan_id)

    def get_all(self, active_only: bool = False, popular_only: bool = False) -> List[Plan]:
        """
        List plans ordered by sort order, then price.

        Args:
            active_only: Only return plans with ``is_active`` set
            popular_only: Only return plans with ``is_popular`` set
        """
        try:
            query = self.collection
            if active_only:
                query = query.where(filter=FieldFilter("is_active", "==", True))
            if popular_only:
                query = query.where(filter=FieldFilter("is_popular", "==", True))

            plans = [Plan.from_firestore_dict(doc.id, doc.to_dict() or {}) for doc in query.stream()]
        except Exception as e:
            logger.error("Failed to list plans: %s", e, exc_info=True)
            raise PlanRepositoryError(f"Failed to list plans: {e}") from e

        return sorted(plans, key=lambda p: p.sort_key)

    def get_by_id(self, plan_id: str) -> Optional[Plan]:
        """Get a plan by id, or None if it does not exist or the id is malformed."""
        doc_ref = self._document(plan_id)
        if doc_ref is None:
            return None

        try:
            doc = doc_ref.get()
        except Exception as e:
            logger.error("Failed to fetch plan %s: %s", plan_id, e, exc_info=True)
            raise PlanRepositoryError(f"Failed to fetch plan: {e}") from e

        if not doc.exists:
            return None
        return Plan.from_firestore_dict(doc.id, doc.to_dict() or {})

    def get_features(self, plan_id: str) -> Optional[PlanFeatureSet]:
        """Fetch only the features and limits of a plan."""
        doc_ref = self._document(plan_id)
        if doc_ref is None:
            return None

        try:
            doc = doc_ref.get(field_paths=["features", "limits"])
        except Exception as e:
            logger.error("Failed to fetch features of plan %s: %s", plan_id, e, exc_info=True)
            raise PlanRepositoryError(f"Failed to fetch plan features: {e}") from e

        if not doc.exists:
            return None
        return PlanFeatureSet.from_firestore_dict(doc.to_dict() or {})

    def create(self, plan: Plan) -> Plan:
        """
        Persist a new plan under a store-assigned id.

        Returns:
            The stored plan, carrying its new id
        """
        try:
            doc_ref = self.collection.document()
            doc_ref.set(plan.to_firestore_dict())
        except Exception as e:
            logger.error("Failed to create plan %s: %s", plan.name, e, exc_info=True)
            raise PlanRepositoryError(f"Failed to create plan: {e}") from e

        logger.info("Created plan: %s (%s)", doc_ref.id, plan.name)
        return plan.model_copy(update={"id": doc_ref.id})

    def update(self, plan_id: str, updates: Dict[str, Any]) -> Optional[Plan]:
        """
        Apply a field map to an existing plan and stamp ``updated_at``.

        Args:
            plan_id: Plan identifier
            updates: Firestore field names mapped to their new values

        Returns:
            The updated plan, or None if the id does not resolve
        """
        doc_ref = self._document(plan_id)
        if doc_ref is None:
            return None

        update_data = dict(updates)
        update_data.pop("created_at", None)
        update_data["updated_at"] = datetime.now(timezone.utc)

        try:
            doc_ref.update(update_data)
        except NotFound:
            return None
        except Exception as e:
            logger.error("Failed to update plan %s: %s", plan_id, e, exc_info=True)
            raise PlanRepositoryError(f"Failed to update plan: {e}") from e

        logger.info("Updated plan %s: %s", plan_id, sorted(update_data))
        return self.get_by_id(plan_id)

    def soft_delete(self, plan_id: str) -> Optional[Plan]:
        """Mark a plan inactive. Repeated calls keep succeeding."""
        plan = self.update(plan_id, {"is_active": False})
        if plan is not None:
            logger.info("Deactivated plan: %s", plan_id)
        return plan

    def ping(self, timeout: float = PING_TIMEOUT_SECONDS) -> None:
        """Round-trip to the store; raises if it is unreachable."""
        list(self.collection.limit(1).stream(timeout=timeout))
