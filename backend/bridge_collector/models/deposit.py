"""Deposit (L1 -> L2) database model."""

from datetime import datetime, timezone

from sqlalchemy import Integer, SmallInteger, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from bridge_collector.database import Base


def utcnow() -> datetime:
    """Naive UTC, matching the TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Deposit(Base):
    """One row per L1 -> L2 bridge transfer, keyed by the L1 transaction hash."""

    __tablename__ = "deposits"

    # Primary Key
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    # Initiating L1 transaction
    hash: Mapped[str] = mapped_column(
        String(66),  # 0x + 64 hex chars
        unique=True,
        nullable=False,
        index=True
    )

    # Raw token amount, 0x-prefixed hex so uint256 values survive untouched
    amount: Mapped[str] = mapped_column(
        String(120),
        nullable=False
    )

    # Token
    token_address: Mapped[str] = mapped_column(
        String(42),
        nullable=False
    )  # Zero address for the native asset
    token_decimals: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False
    )
    token_symbol: Mapped[str] = mapped_column(
        String(32),
        nullable=False
    )

    # Recipient on L2, stored lower-cased
    address: Mapped[str] = mapped_column(
        String(42),
        nullable=False,
        index=True
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False
    )  # Always "Relayed": deposits are final once observed

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
        return f"<Deposit(id={self.id}, hash={self.hash}, status={self.status})>"
