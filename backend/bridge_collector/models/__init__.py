"""Database models package."""

from bridge_collector.models.deposit import Deposit
from bridge_collector.models.withdrawal import MessageStatus, Withdrawal, MESSAGE_STATUS_ORDER

__all__ = [
    "Deposit",
    "Withdrawal",
    "MessageStatus",
    "MESSAGE_STATUS_ORDER",
]
