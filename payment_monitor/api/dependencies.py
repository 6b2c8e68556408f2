"""
Request-scoped access to the collaborators built by the application factory.
"""

from fastapi import Request

from payment_monitor.services.dispatcher import FailureDispatcher
from payment_monitor.utils.log_buffer import LogBuffer


def get_dispatcher(request: Request) -> FailureDispatcher:
    return request.app.state.dispatcher


def get_log_buffer(request: Request) -> LogBuffer:
    return request.app.state.log_buffer
