"""Stripe payment failure monitor."""

__version__ = "0.1.0"
