"""Fan Inbox API: conversation normalization, caching and messaging endpoints."""

__version__ = "1.0.0"
