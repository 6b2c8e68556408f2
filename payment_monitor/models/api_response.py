"""API response data models."""

from typing import List, Optional

from pydantic import BaseModel

from .log_entry import LogEntry


class WebhookAck(BaseModel):
    """Acknowledgment returned to the webhook sender."""

    received: bool = True


class ErrorResponse(BaseModel):
    """Error body for failed webhook handling."""

    error: str


class ServiceInfo(BaseModel):
    """Identity payload."""

    name: str
    status: str
    endpoints: List[str]


class HealthStatus(BaseModel):
    status: str
    timestamp: str


class LogsResponse(BaseModel):
    logs: List[LogEntry]


class TestRunResponse(BaseModel):
    """Result of a synthetic test run."""

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
