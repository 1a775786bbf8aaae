"""FastAPI dependencies handing the process-wide Firestore client down to the plan layer."""

from fastapi import Depends, Request
from google.cloud import firestore

from plan_directory.config import PLANS_COLLECTION
from plan_directory.core.plans import PlanRepository, PlanRepositoryError, PlanService


def get_firestore_client(request: Request) -> firestore.Client:
    client = getattr(request.app.state, "firestore", None)
    if client is None:
        raise PlanRepositoryError("Firestore client is not initialized")
    return client


def get_plan_repository(client: firestore.Client = Depends(get_firestore_client)) -> PlanRepository:
    return PlanRepository(client, collection_name=PLANS_COLLECTION)


def get_plan_service(repository: PlanRepository = Depends(get_plan_repository)) -> PlanService:
    return PlanService(repository)
