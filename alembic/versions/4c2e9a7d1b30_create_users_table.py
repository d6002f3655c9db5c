"""create users table

Revision ID: 4c2e9a7d1b30
Revises:
Create Date: 2026-10-19 09:12:03.417220
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c2e9a7d1b30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('facebook_id', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('picture', sa.Text(), nullable=True),
        sa.Column('role', sa.String(50), nullable=False, server_default='member'),
        sa.Column(
            'created_at', sa.DateTime(timezone=True), nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint('facebook_id', name='uq_users_facebook_id'),
        sa.CheckConstraint(
            "role IN ('admin', 'convenor', 'member')", name='ck_users_role'
        ),
    )
    op.create_index(
        'uq_users_single_admin', 'users', ['role'],
        unique=True, postgresql_where=sa.text("role = 'admin'"),
    )


def downgrade() -> None:
    op.drop_index('uq_users_single_admin', 'users')
    op.drop_table('users')
