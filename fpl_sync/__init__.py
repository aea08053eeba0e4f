"""Fantasy Premier League data sync service."""

__version__ = "1.0.0"
