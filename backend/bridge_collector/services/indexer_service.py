"""Client for the external indexer (Blockscout OP-stack endpoints)."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from bridge_collector.config import Settings
from bridge_collector.core.exceptions import IndexerUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionSummary:
    """Indexer view of one bridge transaction."""
    initiating_tx_hash: str
    counterpart_tx_hash: Optional[str]
    status: Optional[str]


def normalize_hash(tx_hash: Optional[str]) -> Optional[str]:
    """Lower-case a transaction hash and make sure it is 0x-prefixed."""
    if not tx_hash:
        return None
    tx_hash = tx_hash.strip().lower()
    if not tx_hash.startswith("0x"):
        tx_hash = f"0x{tx_hash}"
    return tx_hash


class IndexerClient:
    """Read-only client for deposit and withdrawal summaries."""

    DEPOSITS_PATH = "/v2/optimism/deposits"
    WITHDRAWALS_PATH = "/v2/optimism/withdrawals"

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_pages: int = 1,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_pages = max(1, max_pages)
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "IndexerClient":
        return cls(
            settings.INDEXER_API_URL,
            timeout=settings.INDEXER_TIMEOUT_SECONDS,
            max_pages=settings.INDEXER_MAX_PAGES,
        )

    async def fetch_deposits(self) -> List[TransactionSummary]:
        """Fetch the current deposit snapshot (L1 hash initiates, L2 hash is the counterpart)."""
        items = await self._fetch_items(self.DEPOSITS_PATH)
        summaries = []
        for item in items:
            initiating = normalize_hash(item.get("l1_tx_hash"))
            if not initiating:
                logger.warning(f"Skipping deposit item without l1_tx_hash: {item}")
                continue
            summaries.append(TransactionSummary(
                initiating_tx_hash=initiating,
                counterpart_tx_hash=normalize_hash(item.get("l2_tx_hash")),
                status=item.get("status"),
            ))
        return summaries

    async def fetch_withdrawals(self) -> List[TransactionSummary]:
        """Fetch the current withdrawal snapshot (L2 hash initiates, L1 hash finalizes)."""
        items = await self._fetch_items(self.WITHDRAWALS_PATH)
        summaries = []
        for item in items:
            initiating = normalize_hash(item.get("l2_tx_hash"))
            if not initiating:
                logger.warning(f"Skipping withdrawal item without l2_tx_hash: {item}")
                continue
            summaries.append(TransactionSummary(
                initiating_tx_hash=initiating,
                counterpart_tx_hash=normalize_hash(item.get("l1_tx_hash")),
                status=item.get("status"),
            ))
        return summaries

    async def _fetch_items(self, path: str) -> List[Dict[str, Any]]:
        """
        Collect items from up to ``max_pages`` pages, following ``next_page_params``.

        Raises:
            IndexerUnavailable: On network errors, non-2xx responses or malformed bodies
        """
        items: List[Dict[str, Any]] = []
        params: Optional[Dict[str, Any]] = None

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport
        ) as client:
            for _ in range(self.max_pages):
                try:
                    resp = await client.get(path, params=params)
                    resp.raise_for_status()
                    data = resp.json()
                except (httpx.HTTPError, ValueError) as e:
                    raise IndexerUnavailable(f"Indexer request {path} failed: {e}") from e

                if not isinstance(data, dict) or not isinstance(data.get("items"), list):
                    raise IndexerUnavailable(f"Indexer response for {path} has no items list")

                items.extend(item for item in data["items"] if isinstance(item, dict))

                params = data.get("next_page_params")
                if not params:
                    break

        logger.info(f"Fetched {len(items)} items from indexer {path}")
        return items
