"""Log buffer data models."""

from enum import Enum

from pydantic import BaseModel


class LogLevel(str, Enum):
    """Level of a buffered log entry."""

    INFO = "info"
    ERROR = "error"


class LogEntry(BaseModel):
    """One entry of the recent log buffer."""

    timestamp: str
    level: LogLevel
    message: str
