"""API routers package."""

from bridge_collector.api import deposits, withdrawals, deps

__all__ = [
    "deposits",
    "withdrawals",
    "deps",
]
