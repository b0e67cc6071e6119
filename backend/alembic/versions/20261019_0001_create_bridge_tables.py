"""create deposits and withdrawals tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create deposits and withdrawals tables."""
    op.create_table(
        'deposits',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('hash', sa.String(66), nullable=False, unique=True, index=True),
        sa.Column('amount', sa.String(120), nullable=False),
        sa.Column('token_address', sa.String(42), nullable=False),
        sa.Column('token_decimals', sa.SmallInteger, nullable=False),
        sa.Column('token_symbol', sa.String(32), nullable=False),
        sa.Column('address', sa.String(42), nullable=False, index=True),
        sa.Column('status', sa.String(32), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP, nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'withdrawals',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('hash', sa.String(66), nullable=False, unique=True, index=True),
        sa.Column('l1_hash', sa.String(66), nullable=True),
        sa.Column('amount', sa.String(120), nullable=False),
        sa.Column('token_address', sa.String(42), nullable=False),
        sa.Column('token_decimals', sa.SmallInteger, nullable=False),
        sa.Column('token_symbol', sa.String(32), nullable=False),
        sa.Column('address', sa.String(42), nullable=False, index=True),
        sa.Column('status', sa.String(32), nullable=False),
        sa.Column('recent_status', sa.String(32), nullable=True, index=True),
        sa.Column('created_at', sa.TIMESTAMP, nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP, nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    """Drop deposits and withdrawals tables."""
    op.drop_table('withdrawals')
    op.drop_table('deposits')
