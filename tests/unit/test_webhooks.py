"""
Unit tests for the Stripe webhook endpoint.
"""

import json
import logging
from typing import List
from unittest.mock import AsyncMock

import fakeredis
import httpx
import pytest
from fastapi.testclient import TestClient

from payment_monitor.main import create_app
from payment_monitor.services.dedupe import RedisDedupeStore
from payment_monitor.services.dispatcher import FailureDispatcher
from payment_monitor.services.errors import NotifierError, RecorderError
from payment_monitor.services.recorder import AirtableRecorder


def failure_event(event_type: str = "payment_intent.payment_failed", **obj) -> dict:
    payload = {
        "id": "pi_1",
        "amount": 500,
        "currency": "usd",
        "billing_details": {"email": "a@b.com"},
    }
    payload.update(obj)
    return {"type": event_type, "data": {"object": payload}}


@pytest.mark.parametrize("event_type", [
    "payment_intent.payment_failed",
    "charge.failed",
    "invoice.payment_failed",
])
def test_failure_events_fan_out_once(client, recorder, notifier, event_type):
    """Test each failure type reaches both collaborators exactly once."""
    response = client.post("/webhook/stripe", json=failure_event(event_type))
    
    assert response.status_code == 200
    assert response.json() == {"received": True}
    
    recorder.record.assert_awaited_once()
    notifier.notify.assert_awaited_once()
    record = recorder.record.await_args.args[0]
    assert record is notifier.notify.await_args.args[0]
    assert record.id == "pi_1"
    assert record.amount_display == "5"
    assert record.currency == "USD"


@pytest.mark.parametrize("event_type", [
    "payment_intent.succeeded",
    "customer.created",
    "charge.failed.v2",
])
def test_other_events_are_acknowledged_without_side_effects(client, recorder, notifier, event_type):
    response = client.post("/webhook/stripe", json=failure_event(event_type))
    
    assert response.status_code == 200
    assert response.json() == {"received": True}
    recorder.record.assert_not_awaited()
    notifier.notify.assert_not_awaited()


def test_event_without_type_is_acknowledged(client, recorder):
    response = client.post("/webhook/stripe", json={})
    
    assert response.status_code == 200
    assert response.json() == {"received": True}
    recorder.record.assert_not_awaited()


def test_recorder_receives_normalized_row(test_settings, notifier, log_buffer):
    """Test the row sent to Airtable for a payment intent failure."""
    requests: List[httpx.Request] = []
    
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"records": []})
    
    recorder = AirtableRecorder(
        api_key="key_test",
        base_id="appTEST",
        table_name="Failed Payments",
        transport=httpx.MockTransport(handler),
    )
    dispatcher = FailureDispatcher(recorder=recorder, notifier=notifier)
    client = TestClient(create_app(settings=test_settings, dispatcher=dispatcher, log_buffer=log_buffer))
    
    response = client.post("/webhook/stripe", json=failure_event())
    
    assert response.status_code == 200
    assert response.json() == {"received": True}
    fields = json.loads(requests[0].content)["records"][0]["fields"]
    assert fields["Amount"] == "5"
    assert fields["Currency"] == "USD"
    assert fields["Customer Email"] == "a@b.com"
    messages = [entry.message for entry in log_buffer.recent()]
    assert "Received webhook: payment_intent.payment_failed" in messages
    assert "Added failed payment to Airtable: pi_1" in messages
    assert "Processed failed payment: pi_1" in messages


def test_missing_fields_degrade_to_placeholders(client, recorder):
    response = client.post("/webhook/stripe", json={"type": "charge.failed", "data": {"object": {}}})
    
    assert response.status_code == 200
    record = recorder.record.await_args.args[0]
    assert record.id is None
    assert record.currency == "USD"
    assert record.amount_display == "N/A"


def test_recorder_failure_returns_500(client, recorder, notifier, log_buffer):
    """Test a downstream failure surfaces as a 500 and an error log entry."""
    recorder.record.side_effect = RecorderError("Request failed with status code 401")
    
    response = client.post("/webhook/stripe", json=failure_event())
    
    assert response.status_code == 500
    assert response.json() == {"error": "Request failed with status code 401"}
    notifier.notify.assert_awaited_once()
    errors = [entry for entry in log_buffer.recent() if entry.level == "error"]
    assert errors
    assert errors[-1].message == "Webhook error: Request failed with status code 401"


def test_notifier_failure_returns_500(client, notifier):
    notifier.notify.side_effect = NotifierError("Invalid login")
    
    response = client.post("/webhook/stripe", json=failure_event())
    
    assert response.status_code == 500
    assert response.json() == {"error": "Invalid login"}


def test_malformed_json_returns_500(client, recorder):
    response = client.post(
        "/webhook/stripe",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    
    assert response.status_code == 500
    assert "error" in response.json()
    recorder.record.assert_not_awaited()


def test_unexpected_dispatch_error_returns_500(test_settings, log_buffer):
    dispatcher = AsyncMock()
    dispatcher.dispatch.side_effect = RuntimeError("unexpected")
    client = TestClient(create_app(settings=test_settings, dispatcher=dispatcher, log_buffer=log_buffer))
    
    response = client.post("/webhook/stripe", json=failure_event())
    
    assert response.status_code == 500
    assert response.json() == {"error": "unexpected"}


@pytest.mark.parametrize("body", [
    [{"type": "customer.created"}],
    [{"type": "charge.failed", "data": {"object": {"id": "ch_1"}}}],
    "charge.failed",
    42,
])
def test_non_object_body_is_acknowledged(client, recorder, notifier, body):
    """Test valid JSON that is not an event object is ignored, not a 500."""
    response = client.post("/webhook/stripe", json=body)
    
    assert response.status_code == 200
    assert response.json() == {"received": True}
    recorder.record.assert_not_awaited()
    notifier.notify.assert_not_awaited()


def test_infinite_amount_does_not_fail(client, recorder, notifier):
    """Test a JSON Infinity amount degrades to a placeholder."""
    response = client.post(
        "/webhook/stripe",
        content=b'{"type": "charge.failed", "data": {"object": {"id": "ch_1", "amount": Infinity}}}',
        headers={"Content-Type": "application/json"},
    )
    
    assert response.status_code == 200
    record = recorder.record.await_args.args[0]
    assert record.amount_display == "N/A"


@pytest.fixture
def deduping_client(test_settings, recorder, notifier, log_buffer):
    """Test client whose dispatcher keeps a fakeredis delivery ledger."""
    fake_redis = fakeredis.FakeAsyncRedis(decode_responses=True)
    dispatcher = FailureDispatcher(
        recorder=recorder,
        notifier=notifier,
        dedupe=RedisDedupeStore(client=fake_redis),
    )
    with TestClient(create_app(settings=test_settings, dispatcher=dispatcher, log_buffer=log_buffer)) as client:
        yield client


def test_repeated_failures_of_one_invoice_are_all_delivered(deduping_client, recorder, notifier):
    """Test distinct events sharing an invoice id each reach both collaborators."""
    for event_id in ("evt_attempt_1", "evt_attempt_2"):
        event = failure_event("invoice.payment_failed", id="in_1")
        event["id"] = event_id
        
        response = deduping_client.post("/webhook/stripe", json=event)
        
        assert response.status_code == 200
    
    assert recorder.record.await_count == 2
    assert notifier.notify.await_count == 2


def test_redelivered_event_repeats_only_failed_delivery(deduping_client, recorder, notifier):
    """Test a retried event id skips the delivery that already succeeded."""
    notifier.notify.side_effect = [NotifierError("Invalid login"), None]
    event = failure_event()
    event["id"] = "evt_1"
    
    first = deduping_client.post("/webhook/stripe", json=event)
    second = deduping_client.post("/webhook/stripe", json=event)
    
    assert first.status_code == 500
    assert second.status_code == 200
    assert recorder.record.await_count == 1
    assert notifier.notify.await_count == 2


def test_webhook_logs_carry_event_context(client, notifier, caplog):
    """Test per-request log records carry the event type and id."""
    notifier.notify.side_effect = NotifierError("Invalid login")
    event = failure_event("charge.failed")
    event["id"] = "evt_ctx"
    
    with caplog.at_level(logging.INFO, logger="payment_monitor"):
        response = client.post("/webhook/stripe", json=event)
    
    assert response.status_code == 500
    webhook_records = [
        r for r in caplog.records
        if r.getMessage().startswith(("Received webhook", "Webhook error"))
    ]
    assert len(webhook_records) == 2
    for record in webhook_records:
        assert record.event_type == "charge.failed"
        assert record.event_id == "evt_ctx"
