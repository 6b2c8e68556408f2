"""
FastAPI application entry point.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from payment_monitor import __version__
from payment_monitor.api import diagnostics, webhooks
from payment_monitor.config import Settings, settings as default_settings
from payment_monitor.middleware.logging import RequestLoggingMiddleware
from payment_monitor.services.dispatcher import FailureDispatcher
from payment_monitor.utils.log_buffer import LogBuffer
from payment_monitor.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

PACKAGE_LOGGER = "payment_monitor"


def create_app(
    settings: Optional[Settings] = None,
    dispatcher: Optional[FailureDispatcher] = None,
    log_buffer: Optional[LogBuffer] = None
) -> FastAPI:
    """
    Build the application and its collaborators.
    
    Args:
        settings: Settings to use; defaults to the environment-loaded settings
        dispatcher: Fan-out to recorder and notifier; built from settings if omitted
        log_buffer: Recent log buffer; a new one is created if omitted
        
    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    
    # Configure structured logging
    setup_logging(settings.log_level)
    
    # The buffer keeps INFO entries even when the console is quieter
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(min(logging.INFO, logging.getLogger().getEffectiveLevel()))
    
    log_buffer = log_buffer or LogBuffer(capacity=settings.log_buffer_capacity)
    log_buffer.install(package_logger)
    
    app = FastAPI(
        title="Stripe Payment Monitor",
        description="Records failed Stripe payments to Airtable and emails an alert",
        version=__version__
    )
    app.state.settings = settings
    app.state.log_buffer = log_buffer
    app.state.dispatcher = dispatcher or FailureDispatcher.from_settings(settings)
    
    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)
    
    # Include API routers
    app.include_router(diagnostics.router)
    app.include_router(webhooks.router)
    
    @app.on_event("startup")
    async def startup_event():
        logger.info(f"Server running on port {settings.port}")
    
    @app.on_event("shutdown")
    async def shutdown_event():
        """Release collaborators on application shutdown."""
        logger.info("Shutting down Stripe Payment Monitor")
        await app.state.dispatcher.close()
    
    return app


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    import uvicorn
    
    uvicorn.run(create_app(), host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    run()
