"""Deposit query API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bridge_collector.api.deps import get_db
from bridge_collector.schemas.deposit import DepositListResponse, DepositResponse
from bridge_collector.services.query_service import list_deposits

router = APIRouter(prefix="/deposits", tags=["deposits"])


@router.get("/{address}", response_model=DepositListResponse)
async def get_deposits(
    address: str,
    page: int = Query(1, ge=1, description="1-indexed page number"),
    limit: int = Query(10, ge=1, le=100, description="Page size"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get deposits received by an address.

    Args:
        address: Recipient address on L2
        page: Page number, starting at 1
        limit: Maximum number of deposits to return
        db: Database session

    Returns:
        Page of deposits and the total count
    """
    items, total = await list_deposits(db, address, page=page, limit=limit)
    return DepositListResponse(
        items=[DepositResponse.model_validate(d) for d in items],
        total_items=total
    )
