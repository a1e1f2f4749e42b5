"""initial wholesale schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUSES = ('PENDING', 'CONFIRMED', 'PROCESSING', 'SHIPPED', 'DELIVERED', 'CANCELLED')
PROVIDER_ORDER_STATUSES = ('PENDING', 'SENT', 'CONFIRMED', 'SHIPPED', 'RECEIVED', 'CANCELLED')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'app_config',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('value', sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_app_config_name', 'app_config', ['name'], unique=True)

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'providers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('country', sa.String(), nullable=True),
        sa.Column('iban', sa.String(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True, unique=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'inventory_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('product_code', sa.String(), nullable=True),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.Column('unit', sa.String(), nullable=False),
        sa.Column('quantity', sa.Numeric(12, 3), nullable=False),
        sa.Column('price_per_unit', sa.Numeric(12, 3), nullable=True),
        sa.Column('low_stock_alert', sa.Numeric(12, 3), nullable=True),
        sa.Column('maximum_capacity', sa.Numeric(12, 3), nullable=True),
        sa.Column('production_date', sa.Date(), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('provider_id', sa.Integer(), sa.ForeignKey('providers.id'), nullable=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'inventory_item_audit',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('inventory_item_id', sa.Integer(), sa.ForeignKey('inventory_items.id'), nullable=False),
        sa.Column('change_type', sa.String(), nullable=False),
        sa.Column('change_amount', sa.Numeric(12, 3), nullable=False),
        sa.Column('old_quantity', sa.Numeric(12, 3), nullable=False),
        sa.Column('new_quantity', sa.Numeric(12, 3), nullable=False),
        sa.Column('changed_by', sa.String(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.Column('note', sa.String(), nullable=True),
    )

    op.create_table(
        'customer_inventories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        'customer_inventory_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_inventory_id', sa.Integer(), sa.ForeignKey('customer_inventories.id'), nullable=False),
        sa.Column('admin_item_id', sa.Integer(), sa.ForeignKey('inventory_items.id'), nullable=False),
        sa.UniqueConstraint('customer_inventory_id', 'admin_item_id', name='_customer_inventory_item_uc'),
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('status', sa.Enum(*ORDER_STATUSES, name='orderstatus'), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 3), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('payment_deadline', sa.Date(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('admin_item_id', sa.Integer(), sa.ForeignKey('inventory_items.id'), nullable=False),
        sa.Column('item_name', sa.String(), nullable=False),
        sa.Column('unit', sa.String(), nullable=False),
        sa.Column('quantity', sa.Numeric(12, 3), nullable=False),
        sa.Column('price_per_unit', sa.Numeric(12, 3), nullable=True),
        sa.Column('total_price', sa.Numeric(12, 3), nullable=False),
    )

    op.create_table(
        'provider_orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('provider_id', sa.Integer(), sa.ForeignKey('providers.id'), nullable=False),
        sa.Column('status', sa.Enum(*PROVIDER_ORDER_STATUSES, name='providerorderstatus'), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 3), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('email_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('email_sent_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'provider_order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('provider_order_id', sa.Integer(), sa.ForeignKey('provider_orders.id'), nullable=False),
        sa.Column('admin_item_id', sa.Integer(), sa.ForeignKey('inventory_items.id'), nullable=False),
        sa.Column('item_name', sa.String(), nullable=False),
        sa.Column('product_code', sa.String(), nullable=True),
        sa.Column('unit', sa.String(), nullable=False),
        sa.Column('quantity', sa.Numeric(12, 3), nullable=False),
        sa.Column('price_per_unit', sa.Numeric(12, 3), nullable=True),
        sa.Column('total_price', sa.Numeric(12, 3), nullable=False),
    )


def downgrade() -> None:
    for table in (
        'provider_order_items',
        'provider_orders',
        'order_items',
        'orders',
        'customer_inventory_items',
        'customer_inventories',
        'inventory_item_audit',
        'inventory_items',
        'customers',
        'providers',
        'categories',
        'audit_log',
    ):
        op.drop_table(table)
    op.drop_index('ix_app_config_name', table_name='app_config')
    op.drop_table('app_config')
    sa.Enum(name='providerorderstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='orderstatus').drop(op.get_bind(), checkfirst=True)
