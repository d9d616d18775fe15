"""create_store_tables

Revision ID: 3f9c2a7d41b0
Revises:
Create Date: 2026-10-16 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d41b0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


PRODUCT_TYPES = ('ups', 'solar-pcu', 'solar-pv', 'solar-street-light', 'inverter', 'battery')

product_type_enum = postgresql.ENUM(*PRODUCT_TYPES, name='store_product_type_enum', create_type=False)
battery_type_enum = postgresql.ENUM('li ion', 'lead acid', 'smf', name='store_battery_type_enum', create_type=False)
payment_method_enum = postgresql.ENUM('cod', 'razorpay', name='store_payment_method_enum', create_type=False)
payment_status_enum = postgresql.ENUM('Pending', 'Paid', 'Failed', name='store_payment_status_enum', create_type=False)
order_status_enum = postgresql.ENUM(
    'pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled',
    name='store_order_status_enum',
    create_type=False,
)

ENUMS = (product_type_enum, battery_type_enum, payment_method_enum, payment_status_enum, order_status_enum)


def _product_columns():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('brand', sa.String(length=100), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('image', sa.String(length=512), nullable=True),
        sa.Column('images', sa.JSON(), nullable=True),
        sa.Column('model_name', sa.String(length=100), nullable=True),
        sa.Column('warranty', sa.String(length=100), nullable=True),
        sa.Column('dimension', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema - catalog, cities, carts and orders."""
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    # Catalog
    op.create_table(
        'store_ups',
        *_product_columns(),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('output_power_wattage', sa.Integer(), nullable=True),
        sa.Column('input_voltage', sa.Integer(), nullable=True),
        sa.Column('output_voltage', sa.Integer(), nullable=True),
        sa.Column('mrp', sa.Numeric(12, 2), nullable=True),
        sa.Column('selling_price', sa.Numeric(12, 2), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'store_inverters',
        *_product_columns(),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('is_featured', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('mrp', sa.Numeric(12, 2), nullable=True),
        sa.Column('selling_price', sa.Numeric(12, 2), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'store_batteries',
        *_product_columns(),
        sa.Column('battery_type', battery_type_enum, nullable=True),
        sa.Column('ah', sa.Integer(), nullable=True),
        sa.Column('nominal_filled_weight', sa.String(length=50), nullable=True),
        sa.Column('mrp', sa.Numeric(12, 2), nullable=True),
        sa.Column('price_without_old_battery', sa.Numeric(12, 2), nullable=True),
        sa.Column('price_with_old_battery', sa.Numeric(12, 2), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'store_solar_pv_modules',
        *_product_columns(),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('sku', sa.String(length=100), nullable=True),
        sa.Column('weight', sa.Numeric(10, 2), nullable=True),
        sa.Column('manufacturer', sa.String(length=255), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'store_solar_pcus',
        *_product_columns(),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('wattage', sa.Integer(), nullable=True),
        sa.Column('weight', sa.Numeric(10, 2), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'store_solar_street_lights',
        *_product_columns(),
        sa.Column('power', sa.Integer(), nullable=True),
        sa.Column('replacement_policy', sa.String(length=255), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    # Reference data
    op.create_table(
        'store_cities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('state', sa.String(length=50), nullable=False),
        sa.Column('delivery_charge', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('estimated_delivery_days', sa.String(length=50), server_default='3-5 days', nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('delivery_charge >= 0', name='city_delivery_charge_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    # Carts
    op.create_table(
        'store_carts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_store_carts_user_id', 'store_carts', ['user_id'])

    op.create_table(
        'store_cart_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('cart_id', sa.Uuid(), nullable=False),
        sa.Column('product_type', product_type_enum, nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('with_old_battery', sa.Boolean(), server_default='false', nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('quantity > 0', name='cart_item_positive_quantity'),
        sa.ForeignKeyConstraint(['cart_id'], ['store_carts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cart_id', 'product_type', 'product_id', name='unique_cart_product'),
    )
    op.create_index('ix_store_cart_items_product', 'store_cart_items', ['product_type', 'product_id'])

    # Orders
    op.create_table(
        'store_orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_number', sa.String(length=20), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('shipping_details', sa.JSON(), nullable=False),
        sa.Column('payment_method', payment_method_enum, nullable=False),
        sa.Column('payment_status', payment_status_enum, server_default='Pending', nullable=True),
        sa.Column('gateway_order_id', sa.String(length=100), nullable=True),
        sa.Column('gateway_payment_id', sa.String(length=100), nullable=True),
        sa.Column('gateway_signature', sa.String(length=255), nullable=True),
        sa.Column('amount_paid', sa.Numeric(12, 2), nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('delivery_charge', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('tax', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('total', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', order_status_enum, server_default='pending', nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('delivery_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('gateway_payment_id'),
    )
    op.create_index('ix_store_orders_order_number', 'store_orders', ['order_number'], unique=True)
    op.create_index('ix_store_orders_user_id', 'store_orders', ['user_id'])
    op.create_index('ix_store_orders_gateway_order_id', 'store_orders', ['gateway_order_id'])
    op.create_index('ix_store_orders_created_at', 'store_orders', ['created_at'])

    op.create_table(
        'store_order_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('product_type', product_type_enum, nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('with_old_battery', sa.Boolean(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.CheckConstraint('quantity > 0', name='order_item_positive_quantity'),
        sa.ForeignKeyConstraint(['order_id'], ['store_orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('store_order_items')
    op.drop_index('ix_store_orders_created_at', table_name='store_orders')
    op.drop_index('ix_store_orders_gateway_order_id', table_name='store_orders')
    op.drop_index('ix_store_orders_user_id', table_name='store_orders')
    op.drop_index('ix_store_orders_order_number', table_name='store_orders')
    op.drop_table('store_orders')
    op.drop_index('ix_store_cart_items_product', table_name='store_cart_items')
    op.drop_table('store_cart_items')
    op.drop_index('ix_store_carts_user_id', table_name='store_carts')
    op.drop_table('store_carts')
    op.drop_table('store_cities')
    for table in (
        'store_solar_street_lights',
        'store_solar_pcus',
        'store_solar_pv_modules',
        'store_batteries',
        'store_inverters',
        'store_ups',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
