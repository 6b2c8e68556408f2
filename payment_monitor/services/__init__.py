"""Business logic services package."""

from payment_monitor.services.errors import (
    DeliveryError,
    RecorderError,
    NotifierError
)
from payment_monitor.services.recorder import AirtableRecorder
from payment_monitor.services.notifier import EmailNotifier, render_alert
from payment_monitor.services.dedupe import (
    NullDedupeStore,
    RedisDedupeStore,
    build_dedupe_store
)
from payment_monitor.services.dispatcher import FailureDispatcher

__all__ = [
    'DeliveryError',
    'RecorderError',
    'NotifierError',
    'AirtableRecorder',
    'EmailNotifier',
    'render_alert',
    'NullDedupeStore',
    'RedisDedupeStore',
    'build_dedupe_store',
    'FailureDispatcher'
]
