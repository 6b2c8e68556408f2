"""
Utility modules for the payment failure monitor.
"""

from payment_monitor.utils.logging import (
    get_logger,
    setup_logging,
    log_api_call,
    log_error_with_context,
)
from payment_monitor.utils.log_buffer import LogBuffer
from payment_monitor.utils.metrics import track_api_call

__all__ = [
    "get_logger",
    "setup_logging",
    "log_api_call",
    "log_error_with_context",
    "LogBuffer",
    "track_api_call",
]
