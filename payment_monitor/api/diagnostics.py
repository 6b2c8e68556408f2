"""
Diagnostic endpoints: identity, liveness, recent logs and a synthetic test.
"""

import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from payment_monitor.api.dependencies import get_dispatcher, get_log_buffer
from payment_monitor.models.api_response import (
    HealthStatus,
    LogsResponse,
    ServiceInfo,
    TestRunResponse,
)
from payment_monitor.models.payment import FailurePayload, FailureRecord
from payment_monitor.services.dispatcher import FailureDispatcher
from payment_monitor.utils.log_buffer import DEFAULT_RECENT_LIMIT, LogBuffer
from payment_monitor.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["diagnostics"])

SERVICE_NAME = "Stripe Payment Monitor"
ENDPOINTS = ["/health", "/logs", "/test", "/webhook/stripe"]
TEST_ID_PREFIX = "test_"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_test_payload() -> FailurePayload:
    """Fabricate a payment failure with a unique, time-derived id."""
    return FailurePayload(
        id=f"{TEST_ID_PREFIX}{time.time_ns() // 1_000_000}",
        customer="cus_test",
        billing_details={"email": "test@example.com"},
        amount=1000,
        currency="usd",
        failure_message="Test payment failure",
    )


@router.get("/", response_model=ServiceInfo)
async def root() -> ServiceInfo:
    """Identity endpoint."""
    return ServiceInfo(name=SERVICE_NAME, status="running", endpoints=ENDPOINTS)


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Health check endpoint for container orchestration."""
    return HealthStatus(status="healthy", timestamp=utc_now_iso())


@router.get("/logs", response_model=LogsResponse)
async def recent_logs(log_buffer: LogBuffer = Depends(get_log_buffer)) -> LogsResponse:
    return LogsResponse(logs=log_buffer.recent(DEFAULT_RECENT_LIMIT))


@router.post(
    "/test",
    response_model=TestRunResponse,
    response_model_exclude_none=True,
    responses={500: {"model": TestRunResponse}}
)
async def run_test(dispatcher: FailureDispatcher = Depends(get_dispatcher)) -> Any:
    """
    Run the recorder and notifier against a fabricated failure.
    
    Returns:
        ``{"success": true, "message": ...}`` or a 500 with
        ``{"success": false, "error": ...}``
    """
    try:
        record = FailureRecord.from_payload(build_test_payload())
        logger.info(f"Running synthetic test for payment: {record.id}", extra={"payment_id": record.id})
        result = await dispatcher.dispatch(record)
        
        if not result.ok:
            logger.error(f"Test run failed: {result.first_error}", extra={"payment_id": record.id})
            return _failure(result.first_error)
        
        return TestRunResponse(success=True, message="Test completed")
        
    except Exception as e:
        logger.error(f"Test run failed: {e}", exc_info=True)
        return _failure(str(e) or type(e).__name__)


def _failure(message: str) -> JSONResponse:
    body = TestRunResponse(success=False, error=message).model_dump(exclude_none=True)
    return JSONResponse(status_code=500, content=body)
