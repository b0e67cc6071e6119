"""Pydantic schemas package."""

from bridge_collector.schemas.deposit import DepositResponse, DepositListResponse
from bridge_collector.schemas.withdrawal import WithdrawalResponse, WithdrawalListResponse

__all__ = [
    # Deposit schemas
    "DepositResponse",
    "DepositListResponse",
    # Withdrawal schemas
    "WithdrawalResponse",
    "WithdrawalListResponse",
]
