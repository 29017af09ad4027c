"""Subscription client dashboard: REST backend, API access layer and CLI."""

__version__ = "1.0.0"
