"""create_cache_entries_table

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2026-10-19 10:12:31.418205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c1e9a7d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'cache_entries',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('cache_key', sa.String(255), nullable=False, index=True),
        sa.Column('cache_type', sa.String(32), nullable=False),
        sa.Column('data', sa.JSON, nullable=False),
        sa.Column('expires_at', sa.DateTime, nullable=True, index=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.UniqueConstraint('cache_key', 'cache_type', name='uq_cache_entries_key_type'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('cache_entries')
