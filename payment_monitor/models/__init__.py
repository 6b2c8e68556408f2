"""Data models for the payment failure monitor."""

from .api_response import (
    ErrorResponse,
    HealthStatus,
    LogsResponse,
    ServiceInfo,
    TestRunResponse,
    WebhookAck,
)
from .event import FAILURE_EVENT_TYPES, StripeEvent
from .fan_out import FanOutResult, Outcome, OutcomeStatus
from .log_entry import LogEntry, LogLevel
from .payment import BillingDetails, FailurePayload, FailureRecord, TableRow

__all__ = [
    # Event models
    "StripeEvent",
    "FAILURE_EVENT_TYPES",
    # Payment models
    "BillingDetails",
    "FailurePayload",
    "FailureRecord",
    "TableRow",
    # Fan-out models
    "FanOutResult",
    "Outcome",
    "OutcomeStatus",
    # Log models
    "LogEntry",
    "LogLevel",
    # API response models
    "WebhookAck",
    "ErrorResponse",
    "ServiceInfo",
    "HealthStatus",
    "LogsResponse",
    "TestRunResponse",
]
