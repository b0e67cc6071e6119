"""Decoding of bridge events from raw transaction receipt logs."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from eth_abi.exceptions import DecodingError
from web3 import Web3
from web3.exceptions import Web3Exception

from bridge_collector.services.chain_service import ZERO_ADDRESS


class BridgeDirection(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


def _address_input(name: str, indexed: bool) -> dict:
    return {"indexed": indexed, "name": name, "type": "address"}


_AMOUNT = {"indexed": False, "name": "amount", "type": "uint256"}
_EXTRA_DATA = {"indexed": False, "name": "extraData", "type": "bytes"}

# L1StandardBridge events
DEPOSIT_EVENTS_ABI = [
    {
        "anonymous": False,
        "inputs": [
            _address_input("from", True),
            _address_input("to", True),
            _AMOUNT,
            _EXTRA_DATA,
        ],
        "name": "ETHDepositInitiated",
        "type": "event"
    },
    {
        "anonymous": False,
        "inputs": [
            _address_input("l1Token", True),
            _address_input("l2Token", True),
            _address_input("from", True),
            _address_input("to", False),
            _AMOUNT,
            _EXTRA_DATA,
        ],
        "name": "ERC20DepositInitiated",
        "type": "event"
    },
]

# L2StandardBridge events
WITHDRAWAL_EVENTS_ABI = [
    {
        "anonymous": False,
        "inputs": [
            _address_input("l1Token", True),
            _address_input("l2Token", True),
            _address_input("from", True),
            _address_input("to", False),
            _AMOUNT,
            _EXTRA_DATA,
        ],
        "name": "WithdrawalInitiated",
        "type": "event"
    },
]

# Decoding only needs the codec, never a provider
_codec_web3 = Web3()
_deposit_contract = _codec_web3.eth.contract(abi=DEPOSIT_EVENTS_ABI)
_withdrawal_contract = _codec_web3.eth.contract(abi=WITHDRAWAL_EVENTS_ABI)

_EVENTS = {
    BridgeDirection.DEPOSIT: [
        _deposit_contract.events.ETHDepositInitiated(),
        _deposit_contract.events.ERC20DepositInitiated(),
    ],
    BridgeDirection.WITHDRAWAL: [
        _withdrawal_contract.events.WithdrawalInitiated(),
    ],
}


@dataclass(frozen=True)
class BridgeEvent:
    """A recognized bridge event, normalized across event kinds."""
    direction: BridgeDirection
    event_name: str
    token_address: str
    sender: str
    recipient: str
    amount: int
    is_native: bool


def _is_zero(address: str) -> bool:
    return address.lower() == ZERO_ADDRESS


def _to_bridge_event(direction: BridgeDirection, event: Any) -> BridgeEvent:
    name = event["event"]
    args = event["args"]

    if name == "ETHDepositInitiated":
        return BridgeEvent(
            direction=direction,
            event_name=name,
            token_address=ZERO_ADDRESS,
            sender=args["from"],
            recipient=args["to"],
            amount=int(args["amount"]),
            is_native=True,
        )

    if name == "ERC20DepositInitiated":
        is_native = _is_zero(args["l1Token"])
        return BridgeEvent(
            direction=direction,
            event_name=name,
            token_address=ZERO_ADDRESS if is_native else args["l1Token"],
            sender=args["from"],
            recipient=args["to"],
            amount=int(args["amount"]),
            is_native=is_native,
        )

    # WithdrawalInitiated: the L1 token decides the kind, the L2 token is what was burned
    return BridgeEvent(
        direction=direction,
        event_name=name,
        token_address=args["l2Token"],
        sender=args["from"],
        recipient=args["to"],
        amount=int(args["amount"]),
        is_native=_is_zero(args["l1Token"]),
    )


def decode_bridge_event(logs: Iterable[Any], direction: BridgeDirection) -> Optional[BridgeEvent]:
    """
    Find the first bridge event of the given direction in a receipt's logs.

    Each log is matched independently against the known event signatures;
    the first log that decodes wins. Receipts with only unrelated logs
    return None.

    Args:
        logs: Receipt logs, in receipt order
        direction: Which set of bridge events to look for

    Returns:
        The decoded event, or None if no log matched
    """
    candidates = _EVENTS[direction]
    for log in logs:
        for event in candidates:
            try:
                decoded = event.process_log(log)
            except (Web3Exception, DecodingError):
                continue
            return _to_bridge_event(direction, decoded)
    return None
