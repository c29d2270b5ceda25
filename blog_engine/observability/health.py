"""
Health checks for deployment monitoring.

A HealthChecker runs named async checks in order. A check passes when it
returns and fails when it raises; one failing check never stops the others.

Report format:
    {
        "status": "healthy" | "unhealthy",
        "timestamp": "...",
        "environment": "production",
        "checks": {
            "database": {"status": "pass", "duration": "12ms"},
            "s3": {"status": "fail", "duration": "3ms", "error": "...", "details": "<traceback>"},
        },
    }
"""

import asyncio
import functools
import logging
import os
import time
import traceback
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import Any

import boto3
import psutil

from ..constants import MAX_PROCESS_MEMORY_BYTES, MIN_JWT_SECRET_LENGTH, REQUIRED_ENV_VARS
from .metrics import record_operation

logger = logging.getLogger(__name__)

HealthCheck = Callable[[], Awaitable[Any]]


class HealthStatus(str, Enum):
    """Overall health status."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthChecker:
    """
    Ordered collection of named async health checks.

    Example:
        checker = HealthChecker(environment="production")
        checker.add_check("database", lambda: check_database(manager))
        report = await checker.run_checks()
    """

    def __init__(self, environment: str | None = None):
        self.environment = environment or os.getenv("APP_ENV", "development")
        self._checks: list[tuple[str, HealthCheck]] = []

    def add_check(self, name: str, check_func: HealthCheck) -> None:
        """
        Register a health check.

        Args:
            name: Key of the check in the report
            check_func: Zero-argument async callable; raising marks it failed
        """
        self._checks.append((name, check_func))

    @property
    def check_names(self) -> list[str]:
        return [name for name, _ in self._checks]

    async def run_checks(self) -> dict[str, Any]:
        """
        Run all registered checks in order.

        Returns:
            Report with overall status and per-check results
        """
        overall = HealthStatus.HEALTHY
        checks: dict[str, dict[str, Any]] = {}

        for name, check_func in self._checks:
            start_time = time.time()
            try:
                await check_func()
            except Exception as e:
                # Any failure marks the check failed; later checks still run
                duration_ms = (time.time() - start_time) * 1000
                record_operation("health.check", duration_ms, success=False, check=name)
                logger.error(f"Health check '{name}' failed: {e}")
                overall = HealthStatus.UNHEALTHY
                checks[name] = {
                    "status": "fail",
                    "duration": f"{round(duration_ms)}ms",
                    "error": str(e),
                    "details": "".join(traceback.format_exception(type(e), e, e.__traceback__)),
                }
                continue

            duration_ms = (time.time() - start_time) * 1000
            record_operation("health.check", duration_ms, success=True, check=name)
            checks[name] = {"status": "pass", "duration": f"{round(duration_ms)}ms"}

        return {
            "status": overall.value,
            "timestamp": datetime.now().isoformat(),
            "environment": self.environment,
            "checks": checks,
        }


# ============================================================================
# BUILT-IN CHECKS
# ============================================================================


async def check_environment(config) -> None:
    """
    Verify required configuration is present and well-formed.

    Args:
        config: BlogConfig

    Raises:
        RuntimeError: If a variable is missing or the token secret is too short
    """
    values = {
        "MONGODB_URI": config.mongodb_uri,
        "JWT_SECRET": config.jwt_secret,
        "AWS_ACCESS_KEY_ID": config.aws_access_key_id,
        "AWS_SECRET_ACCESS_KEY": config.aws_secret_access_key,
        "S3_BUCKET_NAME": config.s3_bucket_name,
        "AWS_REGION": config.aws_region,
    }
    missing = [name for name in REQUIRED_ENV_VARS if not values.get(name)]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    if len(config.jwt_secret) < MIN_JWT_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET should be at least {MIN_JWT_SECRET_LENGTH} characters long "
            f"for production"
        )


async def check_database(manager) -> None:
    """
    Verify the database answers a ping, connecting first if needed.

    The check makes a single connection attempt; the manager's retry policy
    is for startup.

    Args:
        manager: ConnectionManager
    """
    if not manager.is_connected():
        await manager.connect(max_retries=0)
    await manager.ping()


async def check_object_storage(config) -> None:
    """
    Verify the upload bucket exists and the credentials can reach it.

    The boto3 call is blocking, so it runs in the default executor.

    Args:
        config: BlogConfig
    """
    session = boto3.Session(
        aws_access_key_id=config.aws_access_key_id,
        aws_secret_access_key=config.aws_secret_access_key,
        region_name=config.aws_region,
    )
    s3_client = session.client("s3")
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(
        None, functools.partial(s3_client.head_bucket, Bucket=config.s3_bucket_name)
    )


async def check_system(max_memory_bytes: int = MAX_PROCESS_MEMORY_BYTES) -> dict[str, str]:
    """
    Verify process memory is below ``max_memory_bytes``.

    Returns:
        Uptime and resident memory, for logging
    """
    process = psutil.Process()
    rss = process.memory_info().rss
    rss_mb = round(rss / 1024 / 1024)

    if rss > max_memory_bytes:
        raise RuntimeError(f"High memory usage: {rss_mb}MB")

    uptime = time.time() - process.create_time()
    return {"uptime": f"{round(uptime)}s", "memory": f"{rss_mb}MB"}


def build_health_checker(config, manager) -> HealthChecker:
    """
    Health checker with the standard deployment checks.

    Args:
        config: BlogConfig
        manager: ConnectionManager

    Returns:
        HealthChecker running environment, database, s3 and system checks
    """
    checker = HealthChecker(environment=config.environment)
    checker.add_check("environment", lambda: check_environment(config))
    checker.add_check("database", lambda: check_database(manager))
    checker.add_check("s3", lambda: check_object_storage(config))
    checker.add_check("system", check_system)
    return checker
