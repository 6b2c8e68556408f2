"""Payment failure data models."""

import math
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

PLACEHOLDER = "N/A"
UNKNOWN = "Unknown"
DEFAULT_CURRENCY = "USD"


def _coerce_text(value: Any) -> Optional[str]:
    """Turn loosely-typed payload values into text, or None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict) and isinstance(value.get("id"), str):
        # Expanded Stripe objects (e.g. customer) carry their id
        return value["id"]
    return None


class BillingDetails(BaseModel):
    """Billing details nested in a Stripe charge or payment method."""

    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return _coerce_text(value)


class FailurePayload(BaseModel):
    """
    The ``data.object`` of a Stripe failure event.

    Every field is optional and unknown fields are kept. Values of the wrong
    type are dropped instead of failing validation.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    customer: Optional[str] = None
    billing_details: Optional[BillingDetails] = None
    receipt_email: Optional[str] = None
    amount: Optional[Union[int, float]] = None
    currency: Optional[str] = None
    failure_message: Optional[str] = None

    @field_validator("id", "customer", "receipt_email", "currency", "failure_message", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return _coerce_text(value)

    @field_validator("billing_details", mode="before")
    @classmethod
    def _billing(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, BillingDetails)) else None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Optional[Union[int, float]]:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return value if math.isfinite(value) else None
        if isinstance(value, str):
            try:
                number = Decimal(value)
            except InvalidOperation:
                return None
            if not number.is_finite():
                return None
            return int(number) if number == number.to_integral_value() else float(number)
        return None


class FailureRecord(BaseModel):
    """Normalized payment failure consumed by the recorder and notifier."""

    id: Optional[str] = None
    customer_id: Optional[str] = None
    email: Optional[str] = None
    amount_minor_units: Optional[Union[int, float]] = None
    currency: str = DEFAULT_CURRENCY
    failure_reason: Optional[str] = None
    observed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_payload(cls, payload: FailurePayload) -> "FailureRecord":
        """
        Map a partial Stripe payload onto a normalized record.

        Args:
            payload: Inbound ``data.object`` payload

        Returns:
            FailureRecord with fallbacks applied
        """
        email = None
        if payload.billing_details and payload.billing_details.email:
            email = payload.billing_details.email
        elif payload.receipt_email:
            email = payload.receipt_email

        return cls(
            id=payload.id or None,
            customer_id=payload.customer or None,
            email=email,
            # Zero counts as missing
            amount_minor_units=payload.amount or None,
            currency=(payload.currency or DEFAULT_CURRENCY).upper(),
            failure_reason=payload.failure_message or None,
        )

    @property
    def amount_major(self) -> Optional[Decimal]:
        """Amount in major currency units."""
        if self.amount_minor_units is None:
            return None
        return Decimal(str(self.amount_minor_units)).scaleb(-2)

    @property
    def amount_display(self) -> str:
        """Amount as a plain decimal string: 500 -> "5", 1050 -> "10.5"."""
        amount = self.amount_major
        if amount is None:
            return PLACEHOLDER
        return format(amount.normalize(), "f")

    @property
    def amount_money(self) -> str:
        """Amount formatted for people: 1000 -> "$10.00"."""
        amount = self.amount_major
        if amount is None:
            return UNKNOWN
        return f"${amount.quantize(Decimal('0.01'))}"


class TableRow(BaseModel):
    """One row of the failed payments table."""

    payment_id: str = Field(serialization_alias="Payment ID")
    customer_id: str = Field(serialization_alias="Customer ID")
    customer_email: str = Field(serialization_alias="Customer Email")
    amount: str = Field(serialization_alias="Amount")
    currency: str = Field(serialization_alias="Currency")
    failure_reason: str = Field(serialization_alias="Failure Reason")
    date: str = Field(serialization_alias="Date")
    status: str = Field(default="Failed", serialization_alias="Status")

    @classmethod
    def from_record(cls, record: FailureRecord) -> "TableRow":
        return cls(
            payment_id=record.id or PLACEHOLDER,
            customer_id=record.customer_id or PLACEHOLDER,
            customer_email=record.email or PLACEHOLDER,
            amount=record.amount_display,
            currency=record.currency,
            failure_reason=record.failure_reason or UNKNOWN,
            date=record.observed_at.isoformat().replace("+00:00", "Z"),
        )

    def to_fields(self) -> Dict[str, str]:
        """Field mapping as the table expects it."""
        return self.model_dump(by_alias=True)
