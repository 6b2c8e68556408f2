"""
Bounded in-memory buffer of recent log entries.

The buffer is a logging handler: anything logged through the service's
package logger at INFO or above is appended, and the oldest entries are
evicted once capacity is reached.
"""

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, List

from payment_monitor.models.log_entry import LogEntry, LogLevel

DEFAULT_CAPACITY = 100
DEFAULT_RECENT_LIMIT = 20


class LogBuffer(logging.Handler):
    """
    Logging handler keeping the most recent entries in insertion order.
    
    Usage:
        buffer = LogBuffer(capacity=100)
        buffer.install(logging.getLogger("payment_monitor"))
        buffer.recent(20)
    """
    
    def __init__(self, capacity: int = DEFAULT_CAPACITY, level: int = logging.INFO):
        """
        Initialize the buffer.
        
        Args:
            capacity: Maximum number of entries kept
            level: Minimum level recorded
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        super().__init__(level)
        self.capacity = capacity
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
    
    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(
                timestamp=datetime.fromtimestamp(record.created, timezone.utc)
                .isoformat(timespec="milliseconds")
                .replace("+00:00", "Z"),
                level=LogLevel.ERROR if record.levelno >= logging.ERROR else LogLevel.INFO,
                message=record.getMessage(),
            )
        except Exception:
            self.handleError(record)
            return
        self._entries.append(entry)
    
    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[LogEntry]:
        """
        Return the newest entries, oldest first.
        
        Args:
            limit: Maximum number of entries returned
            
        Returns:
            Up to ``limit`` entries in insertion order
        """
        if limit <= 0:
            return []
        self.acquire()
        try:
            entries = list(self._entries)
        finally:
            self.release()
        return entries[-limit:]
    
    def clear(self) -> None:
        self.acquire()
        try:
            self._entries.clear()
        finally:
            self.release()
    
    def __len__(self) -> int:
        return len(self._entries)
    
    def install(self, logger: logging.Logger) -> "LogBuffer":
        """
        Attach this buffer to a logger, replacing any buffer attached before.
        
        Args:
            logger: Logger whose records should be buffered
            
        Returns:
            This buffer
        """
        for handler in list(logger.handlers):
            if isinstance(handler, LogBuffer):
                logger.removeHandler(handler)
        logger.addHandler(self)
        return self
