"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from classroom_observations.core.config import settings
from classroom_observations.core.exceptions import ServiceError
from classroom_observations.core.rate_limit import limiter
from classroom_observations.core.structured_logging import build_log_context, configure_logging
from classroom_observations.db.session import build_engine, build_session_factory, init_db
from classroom_observations.routers import (
    auth_router,
    observations_router,
    organization_router,
    reference_router,
    students_router,
)
from classroom_observations.utils.validation import describe_validation_errors

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,  # 10% of requests for performance monitoring
        send_default_pii=False,  # Student data never leaves the server
    )
    logger.info("Sentry initialized for error tracking")


INTERNAL_ERROR_DETAIL = "Internal server error"


def _request_context(request: Request) -> dict:
    return build_log_context(
        request_id=request.headers.get("x-request-id"),
        route=request.url.path,
        method=request.method,
    )


# ============================================================================
# Exception Handlers
# ============================================================================

async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Service error: %s", exc.detail, extra=_request_context(request))
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed requests are client errors (400) with a readable detail."""
    return JSONResponse(
        status_code=400, content={"detail": describe_validation_errors(exc.errors())}
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded", extra=_request_context(request))
    return JSONResponse(
        status_code=429, content={"detail": f"Rate limit exceeded: {exc.detail}"}
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error", extra=_request_context(request))
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_DETAIL})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra=_request_context(request))
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_DETAIL})


# ============================================================================
# FastAPI App
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        init_db(app.state.engine)
    yield


def create_app(session_factory: sessionmaker | None = None) -> FastAPI:
    """
    Build the API application.

    Args:
        session_factory: Session factory for request sessions. Built from
            DATABASE_URL when omitted.
    """
    if session_factory is None:
        session_factory = build_session_factory(build_engine(settings.DATABASE_URL))

    app = FastAPI(
        title="Classroom Observations API",
        description="Classroom behavior observations for school psychologists",
        version=settings.VERSION,
        docs_url="/docs" if settings.ENV == "dev" else None,
        redoc_url="/redoc" if settings.ENV == "dev" else None,
        lifespan=lifespan,
    )
    app.state.session_factory = session_factory
    app.state.engine = session_factory.kw["bind"]

    # Add rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # CORS middleware - must be added before routers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # Required for cookies
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["Content-Disposition"],
    )

    app.include_router(auth_router)
    app.include_router(observations_router)
    app.include_router(students_router)
    app.include_router(organization_router)
    app.include_router(reference_router)

    @app.get("/health")
    def health(request: Request):
        """
        Health check endpoint.

        Verifies database connectivity and returns environment info.
        """
        db = request.app.state.session_factory()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
        return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}

    return app


app = create_app()
