"""NotifyHub - push notification bookkeeping server."""

__version__ = "1.0.0"
