"""
Fan-out of a failure record to the recorder and notifier.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Protocol

from payment_monitor.config import Settings
from payment_monitor.models.fan_out import FanOutResult, Outcome, OutcomeStatus
from payment_monitor.models.payment import FailureRecord
from payment_monitor.services.dedupe import NullDedupeStore, build_dedupe_store
from payment_monitor.services.notifier import EmailNotifier
from payment_monitor.services.recorder import AirtableRecorder
from payment_monitor.utils.logging import get_logger

logger = get_logger(__name__)

RECORDER = "recorded"
NOTIFIER = "notified"


class Recorder(Protocol):
    async def record(self, record: FailureRecord) -> object: ...


class Notifier(Protocol):
    async def notify(self, record: FailureRecord) -> object: ...


class FailureDispatcher:
    """Records and announces a payment failure, both concurrently."""
    
    def __init__(self, recorder: Recorder, notifier: Notifier, dedupe=None):
        """
        Initialize the dispatcher.
        
        Args:
            recorder: Service appending the failure to the table
            notifier: Service emailing the alert
            dedupe: Delivery ledger; defaults to one that never dedupes
        """
        self.recorder = recorder
        self.notifier = notifier
        self.dedupe = dedupe or NullDedupeStore()
    
    @classmethod
    def from_settings(cls, settings: Settings) -> "FailureDispatcher":
        return cls(
            recorder=AirtableRecorder.from_settings(settings),
            notifier=EmailNotifier.from_settings(settings),
            dedupe=build_dedupe_store(settings),
        )
    
    async def dispatch(self, record: FailureRecord, delivery_key: Optional[str] = None) -> FanOutResult:
        """
        Run recorder and notifier concurrently and wait for both.
        
        Neither delivery is cancelled or rolled back when the other fails.
        
        Args:
            record: Normalized failure record
            delivery_key: Id of the inbound event (``evt_...``). Deliveries
                already made for this key are skipped; without a key
                nothing is deduplicated.
            
        Returns:
            FanOutResult with one outcome per delivery
        """
        recorded, notified = await asyncio.gather(
            self._deliver(RECORDER, record, delivery_key, self.recorder.record),
            self._deliver(NOTIFIER, record, delivery_key, self.notifier.notify),
        )
        result = FanOutResult(payment_id=record.id, recorder=recorded, notifier=notified)
        
        if result.ok:
            logger.info(f"Processed failed payment: {record.id}", extra={"payment_id": record.id})
        return result
    
    async def _deliver(
        self,
        kind: str,
        record: FailureRecord,
        delivery_key: Optional[str],
        send: Callable[[FailureRecord], Awaitable[object]]
    ) -> Outcome:
        if delivery_key and await self.dedupe.has(kind, delivery_key):
            logger.info(
                f"Skipping already {kind} event: {delivery_key}",
                extra={"payment_id": record.id, "event_id": delivery_key}
            )
            return Outcome(status=OutcomeStatus.SKIPPED)
        
        try:
            await send(record)
        except Exception as e:
            return Outcome(status=OutcomeStatus.FAILED, error=str(e) or type(e).__name__)
        
        if delivery_key:
            await self.dedupe.mark(kind, delivery_key)
        return Outcome(status=OutcomeStatus.SUCCEEDED)
    
    async def close(self) -> None:
        await self.dedupe.close()
