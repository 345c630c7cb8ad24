"""Personal task manager: REST API over per-user JSON storage."""

__version__ = "0.1.0"
