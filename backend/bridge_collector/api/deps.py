"""API dependencies for database access."""

from bridge_collector.database import get_db

__all__ = ["get_db"]
