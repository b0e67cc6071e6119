"""Deposit response schemas."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class DepositResponse(BaseModel):
    """A reconciled L1 -> L2 transfer."""

    hash: str
    amount: str = Field(..., description="Raw token amount as 0x-prefixed hex")
    token_address: str
    token_decimals: int
    token_symbol: str
    address: str
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DepositListResponse(BaseModel):
    """One page of deposits."""

    items: List[DepositResponse]
    total_items: int = Field(..., alias="totalItems")

    class Config:
        populate_by_name = True
