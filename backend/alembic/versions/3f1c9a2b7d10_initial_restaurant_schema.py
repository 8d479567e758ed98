"""Initial restaurant schema

Revision ID: 3f1c9a2b7d10
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _scope_columns():
    return [
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('branch_id', sa.Integer(), sa.ForeignKey('branches.id'), nullable=False, index=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    # Tenancy
    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False, unique=True, index=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'branches',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('messaging_phone', sa.String(), nullable=True),
        sa.Column('tax_rate', sa.Float(), nullable=False),
        sa.Column('delivery_fee', sa.Float(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('service_types', sa.JSON(), nullable=False),
        sa.Column('payment_methods', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_branch_tenant_name'),
    )

    # Menu and orders
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('name', sa.String(), nullable=False, index=True),
        sa.Column('category', sa.String(), nullable=True, index=True),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('price', sa.Float(), sa.CheckConstraint('price >= 0'), nullable=False),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('extras', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'shifts',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('status', sa.String(), nullable=False, index=True),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('opened_by', sa.String(), nullable=True),
        sa.Column('closed_by', sa.String(), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('summary', sa.JSON(), nullable=True),
    )
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('shift_id', sa.Integer(), sa.ForeignKey('shifts.id'), nullable=True, index=True),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(), nullable=False, index=True),
        sa.Column('service_type', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, index=True),
        sa.Column('table_number', sa.String(), nullable=True),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('customer_phone', sa.String(), nullable=True),
        sa.Column('customer_email', sa.String(), nullable=True),
        sa.Column('delivery_address', sa.JSON(), nullable=True),
        sa.Column('payment_method', sa.String(), nullable=False),
        sa.Column('payment_status', sa.String(), nullable=False),
        sa.Column('cash_amount', sa.Float(), nullable=True),
        sa.Column('change_due', sa.Float(), nullable=True),
        sa.Column('subtotal', sa.Float(), nullable=False),
        sa.Column('tax', sa.Float(), nullable=False),
        sa.Column('discount', sa.Float(), nullable=False),
        sa.Column('tip', sa.Float(), nullable=False),
        sa.Column('delivery_fee', sa.Float(), nullable=False),
        sa.Column('total', sa.Float(), nullable=False),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('branch_id', 'sequence', name='uq_order_branch_sequence'),
    )
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False, index=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Float(), nullable=False),
        sa.Column('extras', sa.JSON(), nullable=False),
        sa.Column('subtotal', sa.Float(), nullable=False),
    )

    # Inventory ledger
    op.create_table(
        'inventory_items',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('name', sa.String(), nullable=False, index=True),
        sa.Column('category', sa.String(), nullable=True, index=True),
        sa.Column('unit', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('stock', sa.Float(), sa.CheckConstraint('stock >= 0'), nullable=False),
        sa.Column('unit_cost', sa.Float(), sa.CheckConstraint('unit_cost >= 0'), nullable=False),
        sa.Column('min_stock', sa.Float(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'inventory_movements',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('inventory_items.id'), nullable=False, index=True),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('type', sa.String(), nullable=False, index=True),
        sa.Column('reference_id', sa.String(), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )
    op.create_table(
        'waste_records',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('inventory_items.id'), nullable=False, index=True),
        sa.Column('movement_id', sa.Integer(), sa.ForeignKey('inventory_movements.id'), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('reason', sa.String(), nullable=False),
        sa.Column('cost', sa.Float(), nullable=False),
        sa.Column('reported_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Suppliers and purchases
    op.create_table(
        'suppliers',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('name', sa.String(), nullable=False, index=True),
        sa.Column('contact_name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('payment_terms', sa.String(), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'purchases',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('supplier_id', sa.Integer(), sa.ForeignKey('suppliers.id'), nullable=False, index=True),
        sa.Column('status', sa.String(), nullable=False, index=True),
        sa.Column('payment_status', sa.String(), nullable=False),
        sa.Column('payment_method', sa.String(), nullable=True),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('order_date', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('delivery_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('received_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'purchase_items',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('purchase_id', sa.Integer(), sa.ForeignKey('purchases.id'), nullable=False, index=True),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('inventory_items.id'), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('unit_cost', sa.Float(), nullable=False),
        sa.Column('received', sa.Float(), nullable=False),
    )

    # Recipes
    op.create_table(
        'recipes',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False, unique=True),
        sa.Column('yield_qty', sa.Float(), nullable=False),
        sa.Column('preparation_time', sa.Integer(), nullable=True),
        sa.Column('instructions', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'recipe_ingredients',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('recipe_id', sa.Integer(), sa.ForeignKey('recipes.id'), nullable=False, index=True),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('inventory_items.id'), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
    )

    # Finance and cash
    op.create_table(
        'expense_categories',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('color', sa.String(7), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.UniqueConstraint('branch_id', 'name', name='uq_expense_category_branch_name'),
    )
    op.create_table(
        'expenses',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('category', sa.String(), nullable=False, index=True),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('payment_method', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('inventory_item_id', sa.Integer(), sa.ForeignKey('inventory_items.id'), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'cash_registers',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('is_open', sa.Boolean(), nullable=False),
        sa.Column('initial_amount', sa.Float(), nullable=False),
        sa.Column('expected_amount', sa.Float(), nullable=False),
        sa.Column('counted_amount', sa.Float(), nullable=True),
        sa.Column('difference', sa.Float(), nullable=True),
        sa.Column('opened_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('opened_by', sa.String(), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_by', sa.String(), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'cash_movements',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        *_scope_columns(),
        sa.Column('register_id', sa.Integer(), sa.ForeignKey('cash_registers.id'), nullable=False, index=True),
        sa.Column('type', sa.String(), nullable=False, index=True),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )

    # Audit trail
    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('ts', sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
        sa.Column('tenant_id', sa.Integer(), sa.ForeignKey('tenants.id'), nullable=True),
        sa.Column('user_id', sa.String(), nullable=True, index=True),
        sa.Column('action', sa.String(50), nullable=False, index=True),
        sa.Column('resource', sa.String(50), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='SUCCESS'),
        sa.Column('ip', sa.String(64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
    )
    op.create_index('ix_logs_tenant_ts', 'logs', ['tenant_id', 'ts'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'logs', 'cash_movements', 'cash_registers', 'expenses', 'expense_categories',
        'recipe_ingredients', 'recipes', 'purchase_items', 'purchases', 'suppliers',
        'waste_records', 'inventory_movements', 'inventory_items',
        'order_items', 'orders', 'shifts', 'products', 'branches', 'tenants',
    ):
        op.drop_table(table)
