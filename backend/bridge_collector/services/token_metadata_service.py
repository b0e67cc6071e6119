"""Token metadata resolution with a process-lifetime cache."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Tuple

from bridge_collector.services.chain_service import ChainClient, ZERO_ADDRESS

logger = logging.getLogger(__name__)

NATIVE_DECIMALS = 18


@dataclass(frozen=True)
class TokenMetadata:
    decimals: int
    symbol: str


class TokenMetadataResolver:
    """
    Resolves (decimals, symbol) for token contracts.

    Token metadata never changes, so successful lookups are cached per
    (chain, address) for the lifetime of the resolver. Failed lookups are
    not cached and will be retried by the next caller.
    """

    def __init__(self, native_symbol: str = "SYS"):
        self.native = TokenMetadata(decimals=NATIVE_DECIMALS, symbol=native_symbol)
        self._cache: Dict[Tuple[str, str], TokenMetadata] = {}
        self._locks: Dict[Tuple[str, str], asyncio.Lock] = {}

    async def resolve(self, chain: ChainClient, token_address: str) -> TokenMetadata:
        """
        Resolve metadata for a token on the given chain.

        Args:
            chain: Client of the chain the token contract lives on
            token_address: Token contract address; the zero address means the native asset

        Returns:
            TokenMetadata

        Raises:
            MetadataUnavailable: If the contract accessors cannot be read
        """
        if token_address.lower() == ZERO_ADDRESS:
            return self.native

        key = (chain.role.value, token_address.lower())
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        # Concurrent lookups for the same token wait for the first one
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            decimals, symbol = await chain.read_token_metadata(token_address)
            metadata = TokenMetadata(decimals=decimals, symbol=symbol)
            self._cache[key] = metadata
            logger.info(
                f"Resolved token metadata on {chain.role.value}: "
                f"{token_address} -> {symbol} ({decimals} decimals)"
            )
            return metadata
