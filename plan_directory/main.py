"""Plan Directory Service - FastAPI Application Entry Point.

Subscription plan records over HTTP with:
- Firestore-backed persistence
- Request ID tracking
- Security headers
- Request body size limit
- Uniform success/error envelopes
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from google.cloud import firestore
from starlette.exceptions import HTTPException as StarletteHTTPException

from plan_directory.config import (
    CORS_ORIGINS,
    DEBUG,
    FIRESTORE_CREDENTIALS_PATH,
    FIRESTORE_DATABASE,
    FIRESTORE_PROJECT_ID,
    HOST,
    MAX_REQUEST_SIZE,
    PORT,
    logger,
)
from plan_directory.core.firestore_client import create_firestore_client
from plan_directory.core.plans import PlanNotFoundError, PlanRepositoryError, PlanValidationError
from plan_directory.middleware import (
    BodySizeLimitMiddleware,
    ErrorSanitizationMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from plan_directory.responses import error_response
from plan_directory.routers import health, plans
from plan_directory.version import __version__


# -----------------------------------------------------------------------------
# Application Lifespan
# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Starting Plan Directory Service v%s", __version__)
    app.state.started_at = time.monotonic()

    if getattr(app.state, "firestore", None) is None:
        try:
            app.state.firestore = create_firestore_client(
                FIRESTORE_PROJECT_ID,
                database=FIRESTORE_DATABASE,
                credentials_path=FIRESTORE_CREDENTIALS_PATH or None,
            )
        except Exception as e:
            # Keep serving; /ready reports the outage
            logger.error("Firestore connection error: %s", e, exc_info=True)
            app.state.firestore = None

    yield

    logger.info("Shutting down Plan Directory Service")
    client = getattr(app.state, "firestore", None)
    if client is not None:
        client.close()
        app.state.firestore = None


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------

def create_app(firestore_client: Optional[firestore.Client] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        firestore_client: Client to serve from. When omitted, one is built
            from configuration at startup.
    """
    app = FastAPI(
        title="Plan Directory Service",
        description="Subscription plans, pricing tiers and usage limits",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )
    app.state.firestore = firestore_client

    # -------------------------------------------------------------------------
    # Middleware Stack (last added = outermost)
    # -------------------------------------------------------------------------

    # 1. Body size limit (innermost - rejects before the route reads the body)
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=MAX_REQUEST_SIZE)

    # 2. Request logging
    app.add_middleware(RequestLoggingMiddleware)

    # 3. Error sanitization (catches whatever escaped the routes)
    app.add_middleware(ErrorSanitizationMiddleware)

    # 4. CORS
    wildcard = CORS_ORIGINS == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=not wildcard,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # 5. Security headers
    app.add_middleware(SecurityHeadersMiddleware)

    # 6. Request ID injection (outermost)
    app.add_middleware(RequestIDMiddleware)

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report the first schema violation as a 400."""
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            err = errors[0]
            loc = [str(part) for part in err.get("loc", []) if part != "body"]
            field = ".".join(loc)
            msg = err.get("msg", "Invalid value")
            message = f"{field}: {msg}" if field else msg
        return error_response(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(PlanValidationError)
    async def plan_validation_handler(request: Request, exc: PlanValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(PlanNotFoundError)
    async def plan_not_found_handler(request: Request, exc: PlanNotFoundError):
        return error_response(status.HTTP_404_NOT_FOUND, "Plan not found")

    @app.exception_handler(PlanRepositoryError)
    async def plan_repository_handler(request: Request, exc: PlanRepositoryError):
        logger.error("Storage fault on %s %s: %s", request.method, request.url.path, exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Unmatched paths and methods are both reported as a missing route."""
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return error_response(status.HTTP_404_NOT_FOUND, "Route not found")
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------

    app.include_router(health.router)
    app.include_router(plans.router)

    return app


# Create the application instance
app = create_app()


def run() -> None:
    uvicorn.run(
        "plan_directory.main:app",
        host=HOST,
        port=PORT,
    )


if __name__ == "__main__":
    run()
