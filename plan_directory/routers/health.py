import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from plan_directory.config import PLANS_COLLECTION, SERVICE_NAME, logger
from plan_directory.core.plans import PlanRepository
from plan_directory.schemas import HealthResponse, ReadinessResponse
from plan_directory.version import __version__

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness probe. Never touches the database."""
    started_at = getattr(request.app.state, "started_at", None)
    uptime = time.monotonic() - started_at if started_at is not None else 0.0
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        uptime=round(uptime, 3),
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    response_model_exclude_none=True,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ReadinessResponse}},
)
def readiness_check(request: Request):
    """Readiness probe - pings the plans store."""
    client = getattr(request.app.state, "firestore", None)
    try:
        if client is None:
            raise RuntimeError("Firestore client is not initialized")
        PlanRepository(client, collection_name=PLANS_COLLECTION).ping()
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=ReadinessResponse(status="not ready", error=str(e)).model_dump(exclude_none=True),
        )

    return ReadinessResponse(status="ready", service=SERVICE_NAME)
