"""
Timing of outbound API calls.

Each call to Airtable or the mail relay is wrapped in ``track_api_call`` so
its latency and outcome are logged in the same structured form.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from payment_monitor.utils.logging import ContextLoggerAdapter, log_api_call


@asynccontextmanager
async def track_api_call(
    logger_adapter: ContextLoggerAdapter,
    service: str,
    endpoint: str,
    method: str,
) -> AsyncIterator[Dict[str, Optional[int]]]:
    """
    Context manager to track API call timing.
    
    Usage:
        async with track_api_call(logger, "airtable", url, "POST") as call:
            response = await client.post(url, json=body)
            call["status_code"] = response.status_code
    
    Args:
        logger_adapter: Logger for logging API calls
        service: Service name
        endpoint: Endpoint or host being called
        method: HTTP method or protocol verb
        
    Yields:
        Mutable dict where the caller may store ``status_code``
    """
    call: Dict[str, Optional[int]] = {"status_code": None}
    start_time = time.perf_counter()
    error = None
    
    try:
        yield call
    except Exception as e:
        error = e
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        log_api_call(
            logger_adapter,
            service=service,
            endpoint=endpoint,
            method=method,
            status_code=call["status_code"],
            duration_ms=duration_ms,
            error=str(error) if error else None
        )
