"""
HTTP routes exposed by blog_engine.

The host application mounts the routers and stores its HealthChecker on
``app.state.health_checker``:

    app = FastAPI()
    app.state.health_checker = build_health_checker(config, manager)
    app.include_router(health_router)
    app.include_router(logs_router)
    app.add_middleware(RequestLoggingMiddleware)
"""

import logging
import os
from datetime import datetime

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..observability import get_logger
from .middleware import RequestLoggingMiddleware
from .schemas import ClientErrorAck, ClientErrorReport, HealthReport

logger = logging.getLogger(__name__)
contextual_logger = get_logger(__name__)

health_router = APIRouter(tags=["health"])
logs_router = APIRouter(prefix="/api/logs", tags=["logs"])


@health_router.get("/health", response_model=HealthReport)
async def health(request: Request) -> JSONResponse:
    """Run all health checks; 503 when any check fails."""
    checker = getattr(request.app.state, "health_checker", None)
    if checker is None:
        logger.error("No health checker configured on app.state")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": datetime.now().isoformat(),
                "environment": os.getenv("APP_ENV", "development"),
                "checks": {},
            },
        )

    report = await checker.run_checks()
    status_code = 200 if report["status"] == "healthy" else 503
    return JSONResponse(status_code=status_code, content=report)


@logs_router.post("/client-error", response_model=ClientErrorAck)
async def log_client_error(report: ClientErrorReport, request: Request) -> ClientErrorAck:
    """Record an error reported by the browser."""
    contextual_logger.error(
        "Client-side error",
        extra={
            "error_type": report.type or "client-error",
            "client_message": report.message,
            "stack": report.stack,
            "component_stack": report.component_stack,
            "user_agent": report.user_agent,
            "url": report.url,
            "reported_at": report.timestamp,
            "client_context": report.context or "unknown",
            "client_filename": report.filename,
            "client_lineno": report.lineno,
            "client_colno": report.colno,
            "ip": request.client.host if request.client else None,
            "headers": {
                "user-agent": request.headers.get("user-agent"),
                "referer": request.headers.get("referer"),
            },
        },
    )
    return ClientErrorAck()


__all__ = [
    "health_router",
    "logs_router",
    "RequestLoggingMiddleware",
    "ClientErrorReport",
    "ClientErrorAck",
    "HealthReport",
]
