"""Log builders and in-memory stand-ins for chain, indexer and oracle clients."""

import asyncio
from typing import Dict, Iterable, List, Optional, Tuple, Union

from eth_abi import encode
from hexbytes import HexBytes
from web3 import Web3

from bridge_collector.core.exceptions import (
    MessageStatusUnavailable,
    MetadataUnavailable,
    ReceiptUnavailable,
)
from bridge_collector.services.chain_service import ChainRole, ZERO_ADDRESS
from bridge_collector.services.indexer_service import TransactionSummary

L1_BRIDGE = Web3.to_checksum_address("0x99c9fc46f92e8a1c0dec1b1747d010903e884be1")
L2_BRIDGE = Web3.to_checksum_address("0x4200000000000000000000000000000000000010")
MESSAGE_PASSER = Web3.to_checksum_address("0x4200000000000000000000000000000000000016")
NATIVE_L2_TOKEN = Web3.to_checksum_address("0xdeaddeaddeaddeaddeaddeaddeaddeaddead0000")

ALICE = Web3.to_checksum_address("0x1111111111111111111111111111111111111111")
BOB = Web3.to_checksum_address("0x2222222222222222222222222222222222222222")
USDC_L1 = Web3.to_checksum_address("0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")
USDC_L2 = Web3.to_checksum_address("0x7f5c764cbc14f9669b88837ca1490cca17c31607")
DAI_L1 = Web3.to_checksum_address("0x6b175474e89094c44da98b954eedeac495271d0f")
DAI_L2 = Web3.to_checksum_address("0xda10009cbd5d07dd0cecc66161fc93d7c9000da1")

ETH_DEPOSIT_TOPIC = HexBytes(Web3.keccak(text="ETHDepositInitiated(address,address,uint256,bytes)"))
ERC20_DEPOSIT_TOPIC = HexBytes(Web3.keccak(text="ERC20DepositInitiated(address,address,address,address,uint256,bytes)"))
WITHDRAWAL_TOPIC = HexBytes(Web3.keccak(text="WithdrawalInitiated(address,address,address,address,uint256,bytes)"))
MESSAGE_PASSED_TOPIC = HexBytes(Web3.keccak(text="MessagePassed(uint256,address,address,uint256,uint256,bytes,bytes32)"))
TRANSFER_TOPIC = HexBytes(Web3.keccak(text="Transfer(address,address,uint256)"))


def tx_hash(n: int) -> str:
    return "0x" + f"{n:064x}"


def address_topic(address: str) -> HexBytes:
    return HexBytes(b"\x00" * 12 + bytes.fromhex(address[2:]))


def uint_topic(value: int) -> HexBytes:
    return HexBytes(value.to_bytes(32, "big"))


def make_log(
    address: str,
    topics: List[HexBytes],
    data: bytes = b"",
    log_index: int = 0,
    block_number: int = 100
) -> dict:
    return {
        "address": address,
        "topics": topics,
        "data": HexBytes(data),
        "logIndex": log_index,
        "transactionIndex": 0,
        "transactionHash": HexBytes(b"\xab" * 32),
        "blockHash": HexBytes(b"\xcd" * 32),
        "blockNumber": block_number,
        "removed": False,
    }


def eth_deposit_log(sender: str, recipient: str, amount: int, log_index: int = 0) -> dict:
    return make_log(
        L1_BRIDGE,
        [ETH_DEPOSIT_TOPIC, address_topic(sender), address_topic(recipient)],
        encode(["uint256", "bytes"], [amount, b""]),
        log_index=log_index,
    )


def erc20_deposit_log(
    l1_token: str,
    l2_token: str,
    sender: str,
    recipient: str,
    amount: int,
    log_index: int = 0
) -> dict:
    return make_log(
        L1_BRIDGE,
        [ERC20_DEPOSIT_TOPIC, address_topic(l1_token), address_topic(l2_token), address_topic(sender)],
        encode(["address", "uint256", "bytes"], [recipient, amount, b""]),
        log_index=log_index,
    )


def withdrawal_log(
    l1_token: str,
    l2_token: str,
    sender: str,
    recipient: str,
    amount: int,
    log_index: int = 0
) -> dict:
    return make_log(
        L2_BRIDGE,
        [WITHDRAWAL_TOPIC, address_topic(l1_token), address_topic(l2_token), address_topic(sender)],
        encode(["address", "uint256", "bytes"], [recipient, amount, b""]),
        log_index=log_index,
    )


def message_passed_log(withdrawal_hash: bytes, block_number: int = 100, nonce: int = 1) -> dict:
    return make_log(
        MESSAGE_PASSER,
        [MESSAGE_PASSED_TOPIC, uint_topic(nonce), address_topic(L2_BRIDGE), address_topic(L1_BRIDGE)],
        encode(
            ["uint256", "uint256", "bytes", "bytes32"],
            [0, 200000, b"\x01\x02", withdrawal_hash]
        ),
        block_number=block_number,
    )


def transfer_log(token: str, sender: str, recipient: str, amount: int, log_index: int = 0) -> dict:
    return make_log(
        token,
        [TRANSFER_TOPIC, address_topic(sender), address_topic(recipient)],
        encode(["uint256"], [amount]),
        log_index=log_index,
    )


def make_receipt(*logs: dict) -> dict:
    return {"status": 1, "logs": list(logs)}


class FakeChainClient:
    """In-memory chain: receipts by hash, token metadata by lower-cased address."""

    def __init__(
        self,
        role: ChainRole,
        receipts: Optional[Dict[str, dict]] = None,
        tokens: Optional[Dict[str, Tuple[int, str]]] = None
    ):
        self.role = role
        self.receipts = dict(receipts or {})
        self.tokens = {k.lower(): v for k, v in (tokens or {}).items()}
        self.receipt_calls: List[str] = []
        self.metadata_calls: List[str] = []
        self.web3 = None

    def add_token(self, address: str, decimals: int, symbol: str) -> None:
        self.tokens[address.lower()] = (decimals, symbol)

    async def get_receipt(self, tx_hash: str) -> dict:
        self.receipt_calls.append(tx_hash)
        await asyncio.sleep(0)
        if tx_hash not in self.receipts:
            raise ReceiptUnavailable(self.role.value, tx_hash)
        return self.receipts[tx_hash]

    async def read_token_metadata(self, token_address: str) -> Tuple[int, str]:
        self.metadata_calls.append(token_address.lower())
        await asyncio.sleep(0)
        if token_address.lower() == ZERO_ADDRESS or token_address.lower() not in self.tokens:
            raise MetadataUnavailable(self.role.value, token_address, "execution reverted")
        return self.tokens[token_address.lower()]


class FakeIndexer:
    """Serves fixed snapshots, or fails every fetch when ``error`` is set."""

    def __init__(
        self,
        deposits: Iterable[TransactionSummary] = (),
        withdrawals: Iterable[TransactionSummary] = (),
        error: Optional[Exception] = None
    ):
        self.deposits = list(deposits)
        self.withdrawals = list(withdrawals)
        self.error = error
        self.calls = 0

    async def fetch_deposits(self) -> List[TransactionSummary]:
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.deposits)

    async def fetch_withdrawals(self) -> List[TransactionSummary]:
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.withdrawals)


class FakeOracle:
    """Reports a fixed code per hash; an exception value is raised instead."""

    def __init__(self, statuses: Optional[Dict[str, Union[int, Exception]]] = None):
        self.statuses = dict(statuses or {})
        self.calls: List[str] = []

    async def get_message_status(self, tx_hash: str) -> int:
        self.calls.append(tx_hash)
        await asyncio.sleep(0)
        status = self.statuses.get(tx_hash)
        if status is None:
            raise MessageStatusUnavailable(f"No status for {tx_hash}")
        if isinstance(status, Exception):
            raise status
        return status


def deposit_summary(n: int) -> TransactionSummary:
    return TransactionSummary(initiating_tx_hash=tx_hash(n), counterpart_tx_hash=tx_hash(1000 + n), status=None)


def withdrawal_summary(n: int, status: str = "Waiting for state root", l1_hash: Optional[str] = None) -> TransactionSummary:
    return TransactionSummary(initiating_tx_hash=tx_hash(n), counterpart_tx_hash=l1_hash, status=status)
