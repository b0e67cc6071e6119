"""Chain service for reading receipts and token contracts on L1 and L2."""

import logging
from enum import Enum
from typing import Any, Optional, Tuple

from aiohttp import ClientTimeout
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import TransactionNotFound

from bridge_collector.config import Settings
from bridge_collector.core.exceptions import MetadataUnavailable, ReceiptUnavailable

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Reduced ERC20 ABI for metadata accessors
ERC20_METADATA_ABI = [
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function"
    }
]


class ChainRole(str, Enum):
    """Which side of the bridge a client talks to."""
    L1 = "l1"
    L2 = "l2"


class ChainClient:
    """Thin async wrapper around one chain's JSON-RPC endpoint."""

    def __init__(
        self,
        role: ChainRole,
        rpc_url: Optional[str] = None,
        timeout: float = 30.0,
        web3: Optional[AsyncWeb3] = None
    ):
        self.role = role
        if web3 is None:
            if not rpc_url:
                raise ValueError(f"RPC URL required for {role.value} client")
            web3 = AsyncWeb3(
                AsyncHTTPProvider(
                    rpc_url,
                    request_kwargs={"timeout": ClientTimeout(total=timeout)}
                )
            )
        self.web3 = web3

    @classmethod
    def from_settings(cls, role: ChainRole, settings: Settings) -> "ChainClient":
        rpc_url = settings.L1_RPC_URL if role == ChainRole.L1 else settings.L2_RPC_URL
        return cls(role, rpc_url=rpc_url, timeout=settings.RPC_TIMEOUT_SECONDS)

    async def get_receipt(self, tx_hash: str) -> Any:
        """
        Fetch the receipt (status and logs) of a transaction.

        Args:
            tx_hash: Transaction hash

        Returns:
            The receipt as returned by web3 (AttributeDict with ``logs``)

        Raises:
            ReceiptUnavailable: If the node does not know the transaction or the call fails
        """
        try:
            receipt = await self.web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            raise ReceiptUnavailable(self.role.value, tx_hash)
        except Exception as e:
            raise ReceiptUnavailable(self.role.value, tx_hash, str(e)) from e

        if not receipt:
            raise ReceiptUnavailable(self.role.value, tx_hash)
        return receipt

    async def read_token_metadata(self, token_address: str) -> Tuple[int, str]:
        """
        Read ``decimals()`` and ``symbol()`` from an ERC20 contract.

        Raises:
            MetadataUnavailable: If either accessor call fails
        """
        try:
            contract = self.web3.eth.contract(
                address=AsyncWeb3.to_checksum_address(token_address),
                abi=ERC20_METADATA_ABI
            )
            decimals = await contract.functions.decimals().call()
            symbol = await contract.functions.symbol().call()
        except Exception as e:
            raise MetadataUnavailable(self.role.value, token_address, str(e)) from e

        return int(decimals), str(symbol)
