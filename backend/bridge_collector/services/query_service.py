"""Read access to reconciled records for the query API."""

from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bridge_collector.models.deposit import Deposit
from bridge_collector.models.withdrawal import Withdrawal
from bridge_collector.services.status_watcher_service import not_relayed_clause


def paginate(page: int, limit: int) -> Tuple[int, int]:
    """
    Convert a 1-indexed page number and page size into (offset, limit).

    Raises:
        ValueError: If page or limit is smaller than 1
    """
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be >= 1")
    return (page - 1) * limit, limit


async def _find_and_count(db: AsyncSession, model, conditions: list, page: int, limit: int):
    offset, limit = paginate(page, limit)

    total = await db.scalar(select(func.count()).select_from(model).where(*conditions))

    result = await db.execute(
        select(model)
        .where(*conditions)
        .order_by(model.created_at.desc(), model.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def list_deposits(
    db: AsyncSession,
    address: str,
    page: int = 1,
    limit: int = 10
) -> Tuple[List[Deposit], int]:
    """
    Deposits received by an address, newest first.

    Returns:
        Tuple of (deposits on the page, total matching deposits)
    """
    conditions = [Deposit.address == address.lower()]
    return await _find_and_count(db, Deposit, conditions, page, limit)


async def list_withdrawals(
    db: AsyncSession,
    address: str,
    page: int = 1,
    limit: int = 10,
    unfinished: bool = False
) -> Tuple[List[Withdrawal], int]:
    """
    Withdrawals received by an address, newest first.

    Args:
        unfinished: Only withdrawals that have not been relayed yet

    Returns:
        Tuple of (withdrawals on the page, total matching withdrawals)
    """
    conditions = [Withdrawal.address == address.lower()]
    if unfinished:
        conditions.append(not_relayed_clause())
    return await _find_and_count(db, Withdrawal, conditions, page, limit)
