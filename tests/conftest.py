"""
Shared fixtures for the payment monitor tests.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from payment_monitor.config import Settings
from payment_monitor.main import create_app
from payment_monitor.services.dispatcher import FailureDispatcher
from payment_monitor.utils.log_buffer import LogBuffer


@pytest.fixture
def test_settings() -> Settings:
    """Settings that never point at real services."""
    return Settings(
        airtable_api_key="key_test",
        airtable_base_id="appTEST",
        airtable_table_name="Failed Payments",
        gmail_email="alerts@example.com",
        gmail_password="secret",
        redis_url=None,
        log_level="INFO",
    )


@pytest.fixture
def recorder() -> AsyncMock:
    mock = AsyncMock()
    mock.record = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def notifier() -> AsyncMock:
    mock = AsyncMock()
    mock.notify = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def dispatcher(recorder, notifier) -> FailureDispatcher:
    return FailureDispatcher(recorder=recorder, notifier=notifier)


@pytest.fixture
def log_buffer() -> LogBuffer:
    return LogBuffer(capacity=100)


@pytest.fixture
def client(test_settings, dispatcher, log_buffer) -> TestClient:
    """Create test client with mocked recorder and notifier."""
    app = create_app(settings=test_settings, dispatcher=dispatcher, log_buffer=log_buffer)
    return TestClient(app)
