"""Collector services package."""

from bridge_collector.services.chain_service import ChainClient, ChainRole
from bridge_collector.services.indexer_service import IndexerClient, TransactionSummary
from bridge_collector.services.log_decoder import BridgeDirection, BridgeEvent, decode_bridge_event
from bridge_collector.services.message_status_service import MessageStatusOracle, OptimismMessageStatusOracle
from bridge_collector.services.reconciliation_service import ReconciliationResult, ReconciliationService
from bridge_collector.services.status_watcher_service import StatusWatcherService, WatchResult
from bridge_collector.services.token_metadata_service import TokenMetadata, TokenMetadataResolver

__all__ = [
    # Chain access
    "ChainClient",
    "ChainRole",
    # Indexer
    "IndexerClient",
    "TransactionSummary",
    # Decoding
    "BridgeDirection",
    "BridgeEvent",
    "decode_bridge_event",
    # Message status
    "MessageStatusOracle",
    "OptimismMessageStatusOracle",
    # Reconciliation
    "ReconciliationResult",
    "ReconciliationService",
    # Status watcher
    "StatusWatcherService",
    "WatchResult",
    # Token metadata
    "TokenMetadata",
    "TokenMetadataResolver",
]
