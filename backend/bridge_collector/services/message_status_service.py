"""Cross-chain message status for withdrawals, derived from L1 bridge contracts."""

import logging
from typing import Any, Optional, Protocol, Tuple

from eth_abi.exceptions import DecodingError
from web3 import AsyncWeb3, Web3
from web3.exceptions import Web3Exception

from bridge_collector.config import Settings
from bridge_collector.core.exceptions import MessageStatusUnavailable, ReceiptUnavailable
from bridge_collector.models.withdrawal import MessageStatus
from bridge_collector.services.chain_service import ChainClient

logger = logging.getLogger(__name__)


class MessageStatusOracle(Protocol):
    """Anything that can report the numeric message status of a withdrawal."""

    async def get_message_status(self, tx_hash: str) -> int:
        ...


MESSAGE_PASSED_ABI = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "nonce", "type": "uint256"},
            {"indexed": True, "name": "sender", "type": "address"},
            {"indexed": True, "name": "target", "type": "address"},
            {"indexed": False, "name": "value", "type": "uint256"},
            {"indexed": False, "name": "gasLimit", "type": "uint256"},
            {"indexed": False, "name": "data", "type": "bytes"},
            {"indexed": False, "name": "withdrawalHash", "type": "bytes32"}
        ],
        "name": "MessagePassed",
        "type": "event"
    }
]

OPTIMISM_PORTAL_ABI = [
    {
        "inputs": [{"name": "", "type": "bytes32"}],
        "name": "finalizedWithdrawals",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "", "type": "bytes32"}],
        "name": "provenWithdrawals",
        "outputs": [
            {"name": "outputRoot", "type": "bytes32"},
            {"name": "timestamp", "type": "uint128"},
            {"name": "l2OutputIndex", "type": "uint128"}
        ],
        "stateMutability": "view",
        "type": "function"
    }
]

L2_OUTPUT_ORACLE_ABI = [
    {
        "inputs": [],
        "name": "latestBlockNumber",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "FINALIZATION_PERIOD_SECONDS",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    }
]

_message_passed = Web3().eth.contract(abi=MESSAGE_PASSED_ABI).events.MessagePassed()


def find_message_passed(receipt: Any, message_passer_address: str) -> Optional[Tuple[bytes, int]]:
    """
    Locate the MessagePassed event of a withdrawal transaction.

    Returns:
        (withdrawal hash, L2 block number) or None if the receipt has no such event
    """
    for log in receipt["logs"]:
        if str(log["address"]).lower() != message_passer_address.lower():
            continue
        try:
            event = _message_passed.process_log(log)
        except (Web3Exception, DecodingError):
            continue
        return bytes(event["args"]["withdrawalHash"]), int(log["blockNumber"])
    return None


class OptimismMessageStatusOracle:
    """
    Computes the stage of an L2 -> L1 withdrawal from on-chain state.

    finalized on the portal -> Relayed; unproven -> Ready to prove once an
    output covering the withdrawal block is published, Waiting for state
    root before; proven -> In challenge period until the finalization
    period has elapsed on L1, Ready for relay after.
    """

    def __init__(
        self,
        l1: ChainClient,
        l2: ChainClient,
        portal_address: str,
        output_oracle_address: str,
        message_passer_address: str
    ):
        self.l1 = l1
        self.l2 = l2
        self.message_passer_address = message_passer_address
        self.portal = l1.web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(portal_address),
            abi=OPTIMISM_PORTAL_ABI
        )
        self.output_oracle = l1.web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(output_oracle_address),
            abi=L2_OUTPUT_ORACLE_ABI
        )
        self._finalization_period: Optional[int] = None

    @classmethod
    def from_settings(cls, l1: ChainClient, l2: ChainClient, settings: Settings) -> "OptimismMessageStatusOracle":
        return cls(
            l1,
            l2,
            portal_address=settings.OPTIMISM_PORTAL_ADDRESS,
            output_oracle_address=settings.L2_OUTPUT_ORACLE_ADDRESS,
            message_passer_address=settings.L2_TO_L1_MESSAGE_PASSER_ADDRESS,
        )

    async def get_message_status(self, tx_hash: str) -> int:
        """
        Report the message status code of a withdrawal.

        Args:
            tx_hash: Initiating L2 transaction hash

        Returns:
            Index into the MessageStatus stage table

        Raises:
            MessageStatusUnavailable: If the withdrawal or the L1 contracts cannot be read
        """
        try:
            receipt = await self.l2.get_receipt(tx_hash)
        except ReceiptUnavailable as e:
            raise MessageStatusUnavailable(str(e)) from e

        message = find_message_passed(receipt, self.message_passer_address)
        if message is None:
            raise MessageStatusUnavailable(f"No MessagePassed event in withdrawal {tx_hash}")
        withdrawal_hash, l2_block_number = message

        try:
            return (await self._status_for(withdrawal_hash, l2_block_number)).code
        except Exception as e:
            raise MessageStatusUnavailable(f"Status lookup failed for {tx_hash}: {e}") from e

    async def _status_for(self, withdrawal_hash: bytes, l2_block_number: int) -> MessageStatus:
        if await self.portal.functions.finalizedWithdrawals(withdrawal_hash).call():
            return MessageStatus.RELAYED

        _, proven_timestamp, _ = await self.portal.functions.provenWithdrawals(withdrawal_hash).call()
        if proven_timestamp == 0:
            latest_output_block = await self.output_oracle.functions.latestBlockNumber().call()
            if latest_output_block >= l2_block_number:
                return MessageStatus.READY_TO_PROVE
            return MessageStatus.STATE_ROOT_NOT_PUBLISHED

        if self._finalization_period is None:
            self._finalization_period = int(
                await self.output_oracle.functions.FINALIZATION_PERIOD_SECONDS().call()
            )
        latest_l1_block = await self.l1.web3.eth.get_block("latest")
        if latest_l1_block["timestamp"] < proven_timestamp + self._finalization_period:
            return MessageStatus.IN_CHALLENGE_PERIOD
        return MessageStatus.READY_FOR_RELAY
