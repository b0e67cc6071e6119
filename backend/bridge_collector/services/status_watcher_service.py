"""Polling of withdrawal message stages."""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bridge_collector.core.exceptions import TransientFetchError
from bridge_collector.models.deposit import utcnow
from bridge_collector.models.withdrawal import MessageStatus, Withdrawal
from bridge_collector.services.message_status_service import MessageStatusOracle

logger = logging.getLogger(__name__)


def not_relayed_clause():
    """
    SQL condition for withdrawals that have not reached the terminal stage.

    The oracle stage wins once observed; until then the indexer's coarse
    status is used.
    """
    return func.coalesce(Withdrawal.recent_status, Withdrawal.status) != MessageStatus.RELAYED.value


@dataclass
class WatchResult:
    """Counters for one status-watch cycle."""
    checked: int = 0
    updated: int = 0
    regressions: int = 0
    failed: int = 0


@dataclass(frozen=True)
class _PendingWithdrawal:
    id: int
    hash: str
    recent_status: Optional[str]


def _stage_index(stage: Optional[str]) -> Optional[int]:
    try:
        return MessageStatus(stage).code
    except ValueError:
        return None


class StatusWatcherService:
    """Advances ``recent_status`` of unfinished withdrawals from the status oracle."""

    def __init__(
        self,
        oracle: MessageStatusOracle,
        session_factory: async_sessionmaker,
        concurrency: int = 8
    ):
        self.oracle = oracle
        self.session_factory = session_factory
        self._semaphore = asyncio.Semaphore(max(1, concurrency))

    async def get_pending_withdrawals(self, db: AsyncSession) -> List[Withdrawal]:
        """Withdrawals still to be polled, oldest first."""
        result = await db.execute(
            select(Withdrawal)
            .where(not_relayed_clause())
            .order_by(Withdrawal.id)
        )
        return list(result.scalars().all())

    async def watch_withdrawals(self) -> WatchResult:
        """Run one status-watch cycle over every unfinished withdrawal."""
        async with self.session_factory() as session:
            pending = [
                _PendingWithdrawal(id=w.id, hash=w.hash, recent_status=w.recent_status)
                for w in await self.get_pending_withdrawals(session)
            ]

        logger.info(f"Total items for check status - {len(pending)}")
        result = WatchResult(checked=len(pending))

        stages = await asyncio.gather(*[self._observe(item) for item in pending])

        for item, stage in zip(pending, stages):
            if stage is None:
                result.failed += 1
                continue

            previous = _stage_index(item.recent_status)
            if previous is not None and stage.code < previous:
                result.regressions += 1
                logger.warning(
                    f"Stage regression for withdrawal {item.hash}: "
                    f"{item.recent_status!r} -> {stage.value!r}, storing reported stage"
                )

            try:
                async with self.session_factory() as session:
                    await session.execute(
                        update(Withdrawal)
                        .where(Withdrawal.id == item.id)
                        .values(recent_status=stage.value, updated_at=utcnow())
                    )
                    await session.commit()
                result.updated += 1
            except SQLAlchemyError as e:
                result.failed += 1
                logger.error(f"Failed to store status of withdrawal {item.hash}: {e}")

        logger.info(
            f"Status watch done: checked={result.checked} updated={result.updated} "
            f"regressions={result.regressions} failed={result.failed}"
        )
        return result

    async def _observe(self, item: _PendingWithdrawal) -> Optional[MessageStatus]:
        async with self._semaphore:
            try:
                code = await self.oracle.get_message_status(item.hash)
            except TransientFetchError as e:
                logger.warning(f"Message status unavailable for withdrawal {item.hash}: {e}")
                return None

        try:
            return MessageStatus.from_code(code)
        except ValueError as e:
            logger.warning(f"Withdrawal {item.hash}: {e}")
            return None
