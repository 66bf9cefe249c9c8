import logging

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from repo_standards import __version__
from repo_standards.api.routes.health import router as health_router
from repo_standards.api.routes.standards import router as standards_router
from repo_standards.core.config import AppEnvironment, settings
from repo_standards.core.errors import StandardsError, get_status_code
from repo_standards.core.observability import (
    ObservabilityMiddleware,
    configure_structured_logging,
    get_run_id,
    render_metrics,
)

# Configure structured logging before creating logger
if settings.observability_structured_logs:
    configure_structured_logging(settings.app_log_level)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Sets up:
    - Observability middleware (run id propagation, metrics, request logs)
    - Exception handlers for domain errors
    - API routers
    - Metrics endpoint for Prometheus scraping
    """
    app = FastAPI(
        title=settings.app_name,
        description="Read-only access to the repository standards checklist and its projections",
        version=__version__,
    )

    app.add_middleware(ObservabilityMiddleware)
    logger.info("Creating %s (env=%s)", settings.app_name, settings.app_env.value)

    # ============================================================================
    # Exception Handlers
    # ============================================================================

    @app.exception_handler(StandardsError)
    async def standards_error_handler(request: Request, exc: StandardsError) -> JSONResponse:
        """
        Map domain exceptions to HTTP status codes with a structured body.

        Returns:
            JSON response with error, message and details
        """
        status_code = get_status_code(exc)
        context = {"details": exc.details, "path": request.url.path, "run_id": get_run_id()}

        if status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}", extra=context)
        else:
            logger.warning(f"{exc.__class__.__name__}: {exc.message}", extra=context)

        return JSONResponse(
            status_code=status_code,
            content={
                "error": exc.__class__.__name__,
                "message": exc.message,
                "details": exc.details,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                f"HTTP {exc.status_code}: {exc.detail}",
                extra={"path": request.url.path, "method": request.method},
            )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "HTTPException",
                "message": exc.detail,
                "details": {},
            },
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Catch-all handler for unexpected exceptions.

        Logs the full exception and returns a generic 500 error. Outside prod the
        exception type and message are included in ``details`` for debugging.
        """
        logger.error(
            f"Unhandled exception: {exc}",
            exc_info=True,
            extra={"path": request.url.path, "run_id": get_run_id()},
        )

        details = {}
        if settings.app_env is not AppEnvironment.PROD:
            details = {"exception": exc.__class__.__name__, "detail": str(exc)}

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "InternalServerError",
                "message": "An unexpected error occurred",
                "details": details,
            },
        )

    # ============================================================================
    # Router Registration
    # ============================================================================

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(standards_router, prefix=API_PREFIX)

    @app.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        """Prometheus metrics in text format."""
        return Response(
            content=render_metrics(),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    return app


app = create_app()
