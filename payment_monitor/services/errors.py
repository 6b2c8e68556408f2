"""Errors raised by downstream delivery services."""


class DeliveryError(Exception):
    """Raised when a failure record could not be delivered downstream."""
    pass


class RecorderError(DeliveryError):
    """Raised when the tabular store rejects or fails a row insert."""
    pass


class NotifierError(DeliveryError):
    """Raised when the alert email could not be sent."""
    pass
