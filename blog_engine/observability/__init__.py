"""
Observability components.

Provides contextual logging, metrics collection and health checks.
"""

from .health import (
    HealthChecker,
    HealthStatus,
    build_health_checker,
    check_database,
    check_environment,
    check_object_storage,
    check_system,
)
from .logging import (
    ContextualLoggerAdapter,
    clear_correlation_id,
    clear_request_context,
    get_correlation_id,
    get_logger,
    get_logging_context,
    log_operation,
    set_correlation_id,
    set_request_context,
)
from .metrics import (
    MetricsCollector,
    OperationMetrics,
    get_metrics_collector,
    record_operation,
    timed_operation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "OperationMetrics",
    "get_metrics_collector",
    "record_operation",
    "timed_operation",
    # Logging
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "set_request_context",
    "clear_request_context",
    "get_logging_context",
    "ContextualLoggerAdapter",
    "get_logger",
    "log_operation",
    # Health
    "HealthStatus",
    "HealthChecker",
    "build_health_checker",
    "check_environment",
    "check_database",
    "check_object_storage",
    "check_system",
]
