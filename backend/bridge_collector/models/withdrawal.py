"""Withdrawal (L2 -> L1) database model and message stage table."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Integer, SmallInteger, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from bridge_collector.database import Base
from bridge_collector.models.deposit import utcnow


class MessageStatus(str, Enum):
    """Cross-chain message stages, in the order the status oracle numbers them."""
    UNCONFIRMED_L1_TO_L2_MESSAGE = "Unconfirmed L1 to L2 message"
    FAILED_L1_TO_L2_MESSAGE = "Failed L1 to L2 message"
    STATE_ROOT_NOT_PUBLISHED = "Waiting for state root"
    READY_TO_PROVE = "Ready to prove"
    IN_CHALLENGE_PERIOD = "In challenge period"
    READY_FOR_RELAY = "Ready for relay"
    RELAYED = "Relayed"

    @classmethod
    def from_code(cls, code: int) -> "MessageStatus":
        """Map an oracle status code to its stage. Raises ValueError for unknown codes."""
        if isinstance(code, bool) or not 0 <= code < len(MESSAGE_STATUS_ORDER):
            raise ValueError(f"Unknown message status code: {code!r}")
        return MESSAGE_STATUS_ORDER[code]

    @property
    def code(self) -> int:
        return MESSAGE_STATUS_ORDER.index(self)


MESSAGE_STATUS_ORDER = list(MessageStatus)


class Withdrawal(Base):
    """One row per L2 -> L1 bridge transfer, keyed by the L2 transaction hash."""

    __tablename__ = "withdrawals"

    # Primary Key
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    # Transaction Hashes
    hash: Mapped[str] = mapped_column(
        String(66),
        unique=True,
        nullable=False,
        index=True
    )  # Initiating L2 transaction
    l1_hash: Mapped[Optional[str]] = mapped_column(
        String(66),
        nullable=True
    )  # Finalizing L1 transaction, once the indexer knows it

    # Raw token amount, 0x-prefixed hex
    amount: Mapped[str] = mapped_column(
        String(120),
        nullable=False
    )

    # Token
    token_address: Mapped[str] = mapped_column(
        String(42),
        nullable=False
    )
    token_decimals: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False
    )
    token_symbol: Mapped[str] = mapped_column(
        String(32),
        nullable=False
    )

    # Recipient on L1, stored lower-cased
    address: Mapped[str] = mapped_column(
        String(42),
        nullable=False,
        index=True
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False
    )  # Coarse status reported by the indexer
    recent_status: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
        index=True
    )  # Fine-grained stage reported by the status oracle

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        default=utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<Withdrawal(id={self.id}, hash={self.hash}, "
            f"status={self.status}, recent_status={self.recent_status})>"
        )
