"""Withdrawal query API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bridge_collector.api.deps import get_db
from bridge_collector.schemas.withdrawal import WithdrawalListResponse, WithdrawalResponse
from bridge_collector.services.query_service import list_withdrawals

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])


def _page(items, total) -> WithdrawalListResponse:
    return WithdrawalListResponse(
        items=[WithdrawalResponse.model_validate(w) for w in items],
        total_items=total
    )


@router.get("/{address}", response_model=WithdrawalListResponse)
async def get_withdrawals(
    address: str,
    page: int = Query(1, ge=1, description="1-indexed page number"),
    limit: int = Query(10, ge=1, le=100, description="Page size"),
    db: AsyncSession = Depends(get_db)
):
    """Get withdrawals received by an address on L1."""
    items, total = await list_withdrawals(db, address, page=page, limit=limit)
    return _page(items, total)


@router.get("/{address}/unfinished", response_model=WithdrawalListResponse)
async def get_unfinished_withdrawals(
    address: str,
    page: int = Query(1, ge=1, description="1-indexed page number"),
    limit: int = Query(10, ge=1, le=100, description="Page size"),
    db: AsyncSession = Depends(get_db)
):
    """Get withdrawals of an address that have not been relayed yet."""
    items, total = await list_withdrawals(db, address, page=page, limit=limit, unfinished=True)
    return _page(items, total)
