"""
Latency bounding for query capabilities.

The chooser never times out or retries on its own. Hosts that want either wrap
their capability here before injecting it.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from warehouse_entry.chooser.controller import QueryCapability
from warehouse_entry.config import get_settings
from warehouse_entry.domain.models import QueryRequest
from warehouse_entry.utils.logging import get_logger

log = get_logger(__name__)

TRANSIENT_ERRORS = (asyncio.TimeoutError, OSError, ConnectionError)


def bounded_query(
    capability: QueryCapability,
    timeout_seconds: Optional[float] = None,
    attempts: Optional[int] = None,
    backoff_seconds: float = 0.2,
) -> QueryCapability:
    """
    Wrap `capability` with a per-attempt timeout and exponential-backoff retry.

    Only transient errors (timeouts, socket/connection errors) are retried; the
    last one is re-raised so the chooser reports it as a failed query.
    """
    settings = get_settings()
    timeout = settings.query_timeout_seconds if timeout_seconds is None else timeout_seconds
    max_attempts = settings.query_attempts if attempts is None else attempts

    async def _bounded(request: QueryRequest):
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=backoff_seconds, max=5),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    log.warning(
                        "Retrying query",
                        extra={"attempt": attempt.retry_state.attempt_number, "field": request.field},
                    )
                return await asyncio.wait_for(capability(request), timeout)

    return _bounded


__all__ = ["bounded_query"]
