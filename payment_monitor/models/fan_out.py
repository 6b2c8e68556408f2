"""Fan-out result data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class OutcomeStatus(str, Enum):
    """Result of one downstream delivery."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"  # Already delivered for this payment


class Outcome(BaseModel):
    """Outcome of one collaborator call."""

    status: OutcomeStatus
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.FAILED


class FanOutResult(BaseModel):
    """Per-collaborator outcome of recording and notifying one failure."""

    payment_id: Optional[str] = None
    recorder: Outcome
    notifier: Outcome

    @property
    def ok(self) -> bool:
        return not (self.recorder.failed or self.notifier.failed)

    @property
    def first_error(self) -> Optional[str]:
        for outcome in (self.recorder, self.notifier):
            if outcome.failed:
                return outcome.error
        return None
