"""
Unit tests for the Airtable recorder.
"""

import json
import logging
from typing import List

import httpx
import pytest

from payment_monitor.models.payment import FailurePayload, FailureRecord
from payment_monitor.services.errors import RecorderError
from payment_monitor.services.recorder import AirtableRecorder


def make_recorder(handler, table_name: str = "Failed Payments") -> AirtableRecorder:
    return AirtableRecorder(
        api_key="key_test",
        base_id="appTEST",
        table_name=table_name,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def sample_record() -> FailureRecord:
    return FailureRecord.from_payload(FailurePayload.model_validate({
        "id": "pi_1",
        "customer": "cus_1",
        "billing_details": {"email": "a@b.com"},
        "amount": 500,
        "currency": "usd",
        "failure_message": "card_declined",
    }))


def test_table_url_quotes_table_name():
    recorder = AirtableRecorder(api_key="k", base_id="appX", table_name="Failed Payments")
    
    assert recorder.table_url == "https://api.airtable.com/v0/appX/Failed%20Payments"


@pytest.mark.asyncio
async def test_record_posts_single_row(sample_record):
    """Test the recorder submits one field-mapped row with a bearer token."""
    requests: List[httpx.Request] = []
    
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"records": [{"id": "rec1"}]})
    
    row = await make_recorder(handler).record(sample_record)
    
    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.airtable.com/v0/appTEST/Failed%20Payments"
    assert request.headers["Authorization"] == "Bearer key_test"
    
    body = json.loads(request.content)
    assert len(body["records"]) == 1
    fields = body["records"][0]["fields"]
    assert fields["Payment ID"] == "pi_1"
    assert fields["Customer ID"] == "cus_1"
    assert fields["Customer Email"] == "a@b.com"
    assert fields["Amount"] == "5"
    assert fields["Currency"] == "USD"
    assert fields["Failure Reason"] == "card_declined"
    assert fields["Status"] == "Failed"
    assert row.amount == "5"


@pytest.mark.asyncio
async def test_record_raises_on_error_status(sample_record, caplog):
    """Test auth failures propagate as RecorderError and are logged."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "AUTHENTICATION_REQUIRED"})
    
    with caplog.at_level(logging.ERROR, logger="payment_monitor"):
        with pytest.raises(RecorderError) as exc_info:
            await make_recorder(handler).record(sample_record)
    
    assert "401" in str(exc_info.value)
    assert any("Error adding to Airtable" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_record_wraps_transport_errors(sample_record):
    """Test transport errors propagate as RecorderError without retry."""
    calls = []
    
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)
    
    with pytest.raises(RecorderError, match="connection refused"):
        await make_recorder(handler).record(sample_record)
    
    assert len(calls) == 1
