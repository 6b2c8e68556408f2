"""
Webhook endpoint for Stripe events.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from payment_monitor.api.dependencies import get_dispatcher
from payment_monitor.models.api_response import ErrorResponse, WebhookAck
from payment_monitor.models.event import StripeEvent
from payment_monitor.models.payment import FailureRecord
from payment_monitor.services.dispatcher import FailureDispatcher
from payment_monitor.utils.logging import ContextLoggerAdapter, get_logger, log_error_with_context

logger = get_logger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhooks"])


@router.post(
    "/stripe",
    response_model=WebhookAck,
    responses={500: {"model": ErrorResponse}}
)
async def handle_stripe_webhook(
    request: Request,
    dispatcher: FailureDispatcher = Depends(get_dispatcher)
) -> Any:
    """
    Receive a Stripe event and handle payment failures.
    
    This endpoint:
    1. Parses the event envelope (no signature verification)
    2. Ignores every event type other than the three failure types
    3. Records the failure and emails an alert, concurrently
    4. Returns ``{"received": true}`` once both deliveries settled
    
    Any delivery failure is returned as a 500 with ``{"error": message}``.
    Stripe then retries the event; deliveries that already succeeded are
    skipped when the delivery ledger is enabled.
    
    Args:
        request: FastAPI request object
        dispatcher: Fan-out to recorder and notifier
        
    Returns:
        WebhookAck, or a JSONResponse with the error body
    """
    event_logger = logger
    try:
        body = await request.json()
        # Anything other than a JSON object is an event of unknown type
        event = StripeEvent.model_validate(body) if isinstance(body, dict) else StripeEvent()
        event_logger = logger.with_context(event_type=event.type, event_id=event.id)
        event_logger.info(f"Received webhook: {event.type}")
        
        if not event.is_failure:
            return WebhookAck()
        
        record = FailureRecord.from_payload(event.failure_payload())
        result = await dispatcher.dispatch(record, delivery_key=event.id)
        
        if not result.ok:
            return _error_response(event_logger, result.first_error, payment_id=record.id)
        
        return WebhookAck()
        
    except Exception as e:
        return _error_response(event_logger, str(e) or type(e).__name__, error=e)


def _error_response(
    event_logger: ContextLoggerAdapter,
    message: str,
    error: Optional[Exception] = None,
    **context: Any
) -> JSONResponse:
    if error is not None:
        log_error_with_context(event_logger, f"Webhook error: {message}", error, **context)
    else:
        event_logger.error(f"Webhook error: {message}", extra=context)
    return JSONResponse(status_code=500, content=ErrorResponse(error=message).model_dump())
