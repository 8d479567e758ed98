"""Dining tables and cash audits

Revision ID: 8b4e2d61c5a3
Revises: 3f1c9a2b7d10
Create Date: 2026-10-19 15:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '8b4e2d61c5a3'
down_revision: Union[str, Sequence[str], None] = '3f1c9a2b7d10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'dining_tables',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('branch_id', sa.Integer(), sa.ForeignKey('branches.id'), nullable=False, index=True),
        sa.Column('number', sa.String(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('branch_id', 'number', name='uq_dining_tables_branch_number'),
    )
    op.create_table(
        'cash_audits',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('branch_id', sa.Integer(), sa.ForeignKey('branches.id'), nullable=False, index=True),
        sa.Column('register_id', sa.Integer(), sa.ForeignKey('cash_registers.id'), nullable=False, index=True),
        sa.Column('expected_cash', sa.Float(), nullable=False),
        sa.Column('actual_cash', sa.Float(), nullable=False),
        sa.Column('difference', sa.Float(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('denominations', sa.JSON(), nullable=True),
        sa.Column('adjustment_id', sa.Integer(), sa.ForeignKey('cash_movements.id'), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('performed_by', sa.String(), nullable=True),
        sa.Column('performed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('cash_audits')
    op.drop_table('dining_tables')
