"""Collector process: reconciles bridge transactions and watches withdrawal stages.

Run with ``python -m bridge_collector.collector``.
"""

import asyncio
import logging
import signal

from sqlalchemy import text

from bridge_collector.config import Settings, settings
from bridge_collector.core.scheduler import Scheduler
from bridge_collector.database import AsyncSessionLocal, engine
from bridge_collector.services.chain_service import ChainClient, ChainRole
from bridge_collector.services.indexer_service import IndexerClient
from bridge_collector.services.message_status_service import OptimismMessageStatusOracle
from bridge_collector.services.reconciliation_service import ReconciliationService
from bridge_collector.services.status_watcher_service import StatusWatcherService
from bridge_collector.services.token_metadata_service import TokenMetadataResolver

logger = logging.getLogger(__name__)

# Deposit and withdrawal reconciliation share one re-entrancy guard
RECONCILIATION_GROUP = "reconciliation"


def build_scheduler(
    config: Settings,
    reconciliation: ReconciliationService,
    watcher: StatusWatcherService
) -> Scheduler:
    """Register the three collector tasks according to their enable flags and intervals."""
    scheduler = Scheduler(cooldown=config.DATA_COLLECTOR_COOLDOWN_SECONDS)
    scheduler.add_task(
        "deposits",
        reconciliation.process_deposits,
        interval=config.task_interval("deposits"),
        enabled=config.DATA_COLLECTOR_ENABLE_DEPOSITS,
        group=RECONCILIATION_GROUP,
    )
    scheduler.add_task(
        "withdrawals",
        reconciliation.process_withdrawals,
        interval=config.task_interval("withdrawals"),
        enabled=config.DATA_COLLECTOR_ENABLE_WITHDRAWALS,
        group=RECONCILIATION_GROUP,
    )
    scheduler.add_task(
        "watcher",
        watcher.watch_withdrawals,
        interval=config.task_interval("watcher"),
        enabled=config.DATA_COLLECTOR_ENABLE_WATCHER,
    )
    return scheduler


def build_services(config: Settings, session_factory=AsyncSessionLocal):
    """Construct the clients and services from settings."""
    l1 = ChainClient.from_settings(ChainRole.L1, config)
    l2 = ChainClient.from_settings(ChainRole.L2, config)

    reconciliation = ReconciliationService(
        indexer=IndexerClient.from_settings(config),
        l1=l1,
        l2=l2,
        token_resolver=TokenMetadataResolver(native_symbol=config.NATIVE_TOKEN_SYMBOL),
        session_factory=session_factory,
        concurrency=config.RPC_CONCURRENCY,
    )
    watcher = StatusWatcherService(
        oracle=OptimismMessageStatusOracle.from_settings(l1, l2, config),
        session_factory=session_factory,
        concurrency=config.RPC_CONCURRENCY,
    )
    return reconciliation, watcher


async def run_collector(config: Settings = settings) -> None:
    """Start the scheduler and run until SIGINT/SIGTERM."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("Database connection established")

    reconciliation, watcher = build_services(config)
    scheduler = build_scheduler(config, reconciliation, watcher)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    scheduler.start()
    logger.info(f"Bridge collector started (L1 chain {config.L1_CHAIN_ID}, L2 chain {config.L2_CHAIN_ID})")
    try:
        await stop.wait()
    finally:
        logger.info("Bridge collector shutting down...")
        scheduler.shutdown()
        await engine.dispose()


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    asyncio.run(run_collector())


if __name__ == "__main__":
    main()
