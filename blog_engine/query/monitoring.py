"""
Query timing.

Wraps a query coroutine, logs how long it took and flags slow queries.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from ..constants import SLOW_QUERY_THRESHOLD_MS
from ..observability import record_operation

logger = logging.getLogger(__name__)


async def monitor_query(
    query: Callable[[], Awaitable[Any]],
    query_name: str = "unknown_query",
    slow_threshold_ms: float = SLOW_QUERY_THRESHOLD_MS,
) -> dict[str, Any]:
    """
    Run a query and report its execution time.

    Args:
        query: Zero-argument callable returning the query awaitable
        query_name: Name used in logs and metrics
        slow_threshold_ms: Queries slower than this are logged as warnings

    Returns:
        {"data": <query result>, "performance": {"execution_time_ms",
        "query_name", "timestamp"}}

    Example:
        result = await monitor_query(lambda: popular_blogs(store), "popular_blogs")
    """
    start_time = time.time()

    try:
        result = await query()
    except Exception as e:
        execution_time_ms = (time.time() - start_time) * 1000
        record_operation("query", execution_time_ms, success=False, query=query_name)
        logger.error(f"[Query Error] {query_name} failed after {execution_time_ms:.0f}ms: {e}")
        raise

    execution_time_ms = (time.time() - start_time) * 1000
    record_operation("query", execution_time_ms, success=True, query=query_name)
    logger.info(f"[Query Performance] {query_name}: {execution_time_ms:.0f}ms")

    if execution_time_ms > slow_threshold_ms:
        logger.warning(f"[Slow Query Alert] {query_name} took {execution_time_ms:.0f}ms")

    return {
        "data": result,
        "performance": {
            "execution_time_ms": round(execution_time_ms, 2),
            "query_name": query_name,
            "timestamp": datetime.now().isoformat(),
        },
    }
