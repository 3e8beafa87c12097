"""Timeout, metrics and logging around one aggregation"""

import asyncio
import time
from typing import Awaitable, TypeVar

from loanlight_admin.infrastructure.observability.logging import log_aggregation
from loanlight_admin.infrastructure.observability.metrics import record_aggregation

T = TypeVar("T")


async def run_bounded(aggregator: str, work: Awaitable[T], timeout: float, request_id: str) -> T:
    """
    Await `work` for at most `timeout` seconds.

    Raises:
        TimeoutError: "Timed out after <timeout>s" when the deadline passes
    """
    start_time = time.time()
    succeeded = False
    try:
        result = await asyncio.wait_for(work, timeout=timeout)
        succeeded = True
        return result
    except asyncio.TimeoutError as e:
        raise TimeoutError(f"Timed out after {timeout}s") from e
    finally:
        duration = time.time() - start_time
        record_aggregation(aggregator, succeeded, duration)
        log_aggregation(request_id, aggregator, succeeded, duration * 1000)
