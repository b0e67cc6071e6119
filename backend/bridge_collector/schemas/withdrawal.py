"""Withdrawal response schemas."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class WithdrawalResponse(BaseModel):
    """A reconciled L2 -> L1 transfer and its latest observed stage."""

    hash: str
    l1_hash: str | None
    amount: str = Field(..., description="Raw token amount as 0x-prefixed hex")
    token_address: str
    token_decimals: int
    token_symbol: str
    address: str
    status: str
    recent_status: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WithdrawalListResponse(BaseModel):
    """One page of withdrawals."""

    items: List[WithdrawalResponse]
    total_items: int = Field(..., alias="totalItems")

    class Config:
        populate_by_name = True
