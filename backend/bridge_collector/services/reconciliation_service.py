"""Reconciliation of indexer summaries into canonical deposit and withdrawal records."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bridge_collector.core.exceptions import PersistenceError, TransientFetchError
from bridge_collector.database import Base
from bridge_collector.models.deposit import Deposit, utcnow
from bridge_collector.models.withdrawal import MessageStatus, Withdrawal
from bridge_collector.services.chain_service import ChainClient
from bridge_collector.services.indexer_service import IndexerClient, TransactionSummary
from bridge_collector.services.log_decoder import BridgeDirection, BridgeEvent, decode_bridge_event
from bridge_collector.services.token_metadata_service import TokenMetadata, TokenMetadataResolver

logger = logging.getLogger(__name__)

DEPOSIT_STATUS = MessageStatus.RELAYED.value
UNKNOWN_STATUS = "Unknown"

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Columns an upsert must never overwrite
_IMMUTABLE_COLUMNS = {"id", "hash", "created_at"}


@dataclass
class ReconciliationResult:
    """Counters for one reconciliation cycle."""
    direction: BridgeDirection
    fetched: int = 0
    decoded: int = 0
    upserted: int = 0
    skipped: int = 0
    failed: int = 0


def build_upsert(dialect: str, model: Type[Base], values: Dict[str, Any]):
    """
    Build ``INSERT ... ON CONFLICT (hash) DO UPDATE`` for a record.

    ``created_at`` is only written on insert; ``updated_at`` is always refreshed.
    Columns absent from ``values`` are left untouched on update.

    Raises:
        PersistenceError: If the dialect has no upsert support
    """
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise PersistenceError(f"Upsert is not supported on dialect {dialect}")

    now = utcnow()
    values = {**values, "created_at": now, "updated_at": now}
    stmt = insert(model).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=["hash"],
        set_={
            column: stmt.excluded[column]
            for column in values
            if column not in _IMMUTABLE_COLUMNS
        }
    )


async def upsert_by_hash(session: AsyncSession, model: Type[Base], values: Dict[str, Any]) -> None:
    """
    Insert a record, or overwrite the existing one with the same hash.

    Raises:
        PersistenceError: If the statement fails or the dialect has no upsert support
    """
    stmt = build_upsert(session.bind.dialect.name, model, values)

    try:
        await session.execute(stmt)
    except SQLAlchemyError as e:
        raise PersistenceError(f"Upsert into {model.__tablename__} failed for {values.get('hash')}: {e}") from e


class ReconciliationService:
    """
    Turns the indexer's current snapshot into canonical records.

    Per item: receipt -> bridge event -> token metadata -> record. Items whose
    receipt, event or metadata is unavailable are skipped for this cycle and
    picked up again by the next one, since every upsert is idempotent.
    """

    def __init__(
        self,
        indexer: IndexerClient,
        l1: ChainClient,
        l2: ChainClient,
        token_resolver: TokenMetadataResolver,
        session_factory: async_sessionmaker,
        concurrency: int = 8
    ):
        self.indexer = indexer
        self.l1 = l1
        self.l2 = l2
        self.tokens = token_resolver
        self.session_factory = session_factory
        self._semaphore = asyncio.Semaphore(max(1, concurrency))

    async def process_deposits(self) -> ReconciliationResult:
        """Reconcile deposits: L1 receipts, L1 token metadata."""
        logger.info("Fetching deposits from indexer")
        summaries = await self.indexer.fetch_deposits()

        def build(summary: TransactionSummary, event: BridgeEvent, metadata: TokenMetadata) -> Dict[str, Any]:
            return {
                **self._common_fields(summary, event, metadata),
                "status": DEPOSIT_STATUS,
            }

        return await self._reconcile(BridgeDirection.DEPOSIT, summaries, self.l1, Deposit, build)

    async def process_withdrawals(self) -> ReconciliationResult:
        """Reconcile withdrawals: L2 receipts, L2 token metadata, indexer status."""
        logger.info("Fetching withdrawals from indexer")
        summaries = await self.indexer.fetch_withdrawals()

        def build(summary: TransactionSummary, event: BridgeEvent, metadata: TokenMetadata) -> Dict[str, Any]:
            return {
                **self._common_fields(summary, event, metadata),
                "l1_hash": summary.counterpart_tx_hash,
                "status": summary.status or UNKNOWN_STATUS,
            }

        return await self._reconcile(BridgeDirection.WITHDRAWAL, summaries, self.l2, Withdrawal, build)

    @staticmethod
    def _common_fields(summary: TransactionSummary, event: BridgeEvent, metadata: TokenMetadata) -> Dict[str, Any]:
        return {
            "hash": summary.initiating_tx_hash,
            "amount": hex(event.amount),
            "token_address": event.token_address.lower(),
            "token_decimals": metadata.decimals,
            "token_symbol": metadata.symbol,
            "address": event.recipient.lower(),
        }

    async def _reconcile(
        self,
        direction: BridgeDirection,
        summaries: List[TransactionSummary],
        chain: ChainClient,
        model: Type[Base],
        build: Callable[[TransactionSummary, BridgeEvent, TokenMetadata], Dict[str, Any]]
    ) -> ReconciliationResult:
        result = ReconciliationResult(direction=direction, fetched=len(summaries))

        resolved = await asyncio.gather(
            *[self._resolve(direction, chain, summary) for summary in summaries]
        )

        records = []
        for summary, item in zip(summaries, resolved):
            if item is None:
                result.skipped += 1
                continue
            event, metadata = item
            records.append(build(summary, event, metadata))
        result.decoded = len(records)

        logger.info(f"Collected {direction.value}s - {len(records)}, running upsert...")

        for record in records:
            try:
                async with self.session_factory() as session:
                    await upsert_by_hash(session, model, record)
                    await session.commit()
                result.upserted += 1
            except (PersistenceError, SQLAlchemyError) as e:
                result.failed += 1
                logger.error(f"Upsert {direction.value} failed for {record['hash']}: {e}")

        logger.info(
            f"Reconciled {direction.value}s: fetched={result.fetched} decoded={result.decoded} "
            f"upserted={result.upserted} skipped={result.skipped} failed={result.failed}"
        )
        return result

    async def _resolve(
        self,
        direction: BridgeDirection,
        chain: ChainClient,
        summary: TransactionSummary
    ) -> Optional[Tuple[BridgeEvent, TokenMetadata]]:
        tx_hash = summary.initiating_tx_hash
        async with self._semaphore:
            try:
                receipt = await chain.get_receipt(tx_hash)
                event = decode_bridge_event(receipt["logs"], direction)
                if event is None:
                    logger.warning(f"No bridge event found in {direction.value} {tx_hash}")
                    return None

                if event.is_native:
                    metadata = self.tokens.native
                else:
                    metadata = await self.tokens.resolve(chain, event.token_address)
            except TransientFetchError as e:
                logger.warning(f"Skipping {direction.value} {tx_hash} this cycle: {e}")
                return None

        return event, metadata
