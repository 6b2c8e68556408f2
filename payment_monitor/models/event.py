"""Stripe webhook event data models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .payment import FailurePayload

FAILURE_EVENT_TYPES = frozenset({
    "payment_intent.payment_failed",
    "charge.failed",
    "invoice.payment_failed",
})


class StripeEvent(BaseModel):
    """Stripe webhook envelope: ``{type, data: {object}}``."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    type: str = ""
    data: Dict[str, Any] = {}

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("data", mode="before")
    @classmethod
    def _data(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}

    @property
    def is_failure(self) -> bool:
        """Whether the event type is one of the payment failure types."""
        return self.type in FAILURE_EVENT_TYPES

    def failure_payload(self) -> FailurePayload:
        """Treat ``data.object`` as the failure payload."""
        obj = self.data.get("object")
        return FailurePayload.model_validate(obj if isinstance(obj, dict) else {})
