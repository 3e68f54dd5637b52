"""Container filters, label metadata, recreation settings, flags and a token-protected update API."""

__version__ = "0.1.0"