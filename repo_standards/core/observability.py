"""
Observability module for the repository standards compiler.

Provides:
- Structured logging with JSON format and correlation IDs
- Run correlation ID (run_id) generation and propagation
- Prometheus metrics collection (validation, projection, build, HTTP)
- Request tracking middleware for the read-only API

Usage:
    from repo_standards.core.observability import (
        configure_structured_logging,
        get_run_id,
        set_run_id,
        metrics,
    )
"""

import json
import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import UTC, datetime

from fastapi import Request, Response
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# ============================================================================
# Context Variables for Run Tracking
# ============================================================================

# Correlation ID - links all logs for a single build or API request
_run_id_ctx: ContextVar[str] = ContextVar("run_id", default="")


def generate_run_id() -> str:
    """Generate a unique run ID for correlation."""
    return str(uuid.uuid4())


def get_run_id() -> str:
    """Get the current run ID from context."""
    return _run_id_ctx.get()


def set_run_id(run_id: str) -> None:
    """Set the correlation ID for the current run context."""
    _run_id_ctx.set(run_id)


# ============================================================================
# Structured Logging Configuration
# ============================================================================

# LogRecord attributes that are not user-supplied extras
_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "message",
        "asctime",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON with standard fields:
    - timestamp: ISO 8601 format
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - logger: Logger name
    - message: Log message
    - run_id: Correlation ID (if available)
    - exception: Exception type and message (if present)
    - extra: Any additional context from logging.extra
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        run_id = get_run_id()
        if run_id:
            log_entry["run_id"] = run_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        log_entry["function"] = record.funcName
        log_entry["line"] = record.lineno

        # Fields passed through logger.info("msg", extra={"key": "value"})
        extra_keys = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_KEYS
        }
        if extra_keys:
            log_entry["extra"] = extra_keys

        return json.dumps(log_entry, default=str)


def configure_structured_logging(level: str = "INFO") -> None:
    """
    Configure root logger with structured JSON formatting.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    root_logger.addHandler(handler)


# ============================================================================
# Prometheus Metrics
# ============================================================================

# Use a custom registry to avoid conflicts with other Prometheus metrics
_registry = CollectorRegistry()


class Metrics:
    """
    Centralized metrics collection.

    Metrics groups:
    - Validation: runs by result, findings by rule
    - Compiler: projections, build duration, artifact size
    - HTTP: request rate and latency of the read-only API
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry

        # -------------------------------------------------------------------
        # Validation Metrics
        # -------------------------------------------------------------------

        self.validations_total = Counter(
            "standards_validations_total",
            "Total validation runs of the master document",
            ["result"],
            registry=self.registry,
        )

        self.findings_total = Counter(
            "standards_findings_total",
            "Total validation findings by rule",
            ["kind"],
            registry=self.registry,
        )

        # -------------------------------------------------------------------
        # Compiler Metrics
        # -------------------------------------------------------------------

        self.projections_total = Counter(
            "standards_projections_total",
            "Total projections computed",
            ["scope"],
            registry=self.registry,
        )

        self.build_duration_seconds = Histogram(
            "standards_build_duration_seconds",
            "Duration of a full artifact build in seconds",
            ["status"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self.registry,
        )

        self.artifact_bytes = Histogram(
            "standards_artifact_bytes",
            "Size of persisted artifacts in bytes",
            buckets=(1_000, 5_000, 10_000, 50_000, 100_000, 500_000, 1_000_000),
            registry=self.registry,
        )

        # -------------------------------------------------------------------
        # HTTP Metrics
        # -------------------------------------------------------------------

        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "route", "status_code"],
            registry=self.registry,
        )

        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "route"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
            registry=self.registry,
        )


metrics = Metrics(_registry)


def render_metrics() -> bytes:
    """Render the private registry in Prometheus text format."""
    return generate_latest(_registry)


# ============================================================================
# Request Tracking Middleware
# ============================================================================


UNMATCHED_ROUTE = "unmatched"


def route_label(request: Request) -> str:
    """
    Route pattern for metric labels.

    Uses the matched route template (e.g. ``/api/v1/standards/{stack}``) so the
    label set stays bounded; requests no route matched share one label.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds observability to all API requests.

    - Propagates X-Request-ID as the run_id (generates one if absent)
    - Records request count and latency metrics
    - Logs each request with structured fields
    """

    def __init__(
        self,
        app: ASGIApp,
        metrics_instance: Metrics | None = None,
        skip_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.metrics = metrics_instance or metrics
        self.skip_paths = set(skip_paths or ["/api/v1/health", "/metrics"])

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        run_id = request.headers.get("X-Request-ID") or generate_run_id()
        set_run_id(run_id)

        path = request.url.path
        start_time = time.time()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = run_id
            return response
        finally:
            latency = time.time() - start_time
            route = route_label(request)
            self.metrics.http_requests_total.labels(
                method=request.method, route=route, status_code=status_code
            ).inc()
            self.metrics.http_request_duration_seconds.labels(
                method=request.method, route=route
            ).observe(latency)

            if path not in self.skip_paths:
                logging.getLogger("repo_standards.request").info(
                    f"{request.method} {path}",
                    extra={
                        "method": request.method,
                        "path": path,
                        "route": route,
                        "status_code": status_code,
                        "latency_ms": round(latency * 1000, 2),
                    },
                )
