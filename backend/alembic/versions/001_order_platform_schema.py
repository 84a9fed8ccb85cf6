"""Order platform schema: orders plus the catalog and identity mirrors.

Revision ID: 001_order_platform
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001_order_platform'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ### Users table (mirror of the auth service) ###
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # ### Categories table ###
    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_categories_slug', 'categories', ['slug'], unique=True)

    # ### Products table ###
    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('external_id', sa.String(255), nullable=True),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('image', sa.Text(), nullable=True),
        sa.Column('category', sa.String(255), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('discount', sa.Numeric(precision=5, scale=2), server_default='0'),
        sa.Column('stock', sa.Integer(), server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('discount >= 0 AND discount < 100', name='ck_products_discount_range'),
    )
    op.create_index('ix_products_external_id', 'products', ['external_id'], unique=True)
    op.create_index('ix_products_category', 'products', ['category'])

    # ### Orders table ###
    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('items', postgresql.JSONB(), nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='Pending'),
        sa.Column('payment_method', sa.String(10), nullable=False, server_default='COD'),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='Pending'),
        sa.Column('shipping_address', postgresql.JSONB(), nullable=False),
        sa.Column('order_number', sa.String(40), nullable=False),
        sa.Column('has_reviewed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('order_number', name='uq_orders_order_number'),
        sa.CheckConstraint('total_amount > 0', name='ck_orders_total_positive'),
        sa.CheckConstraint(
            "status IN ('Pending', 'Confirmed', 'Shipped', 'Delivered', 'Cancelled')",
            name='ck_orders_status',
        ),
        sa.CheckConstraint("payment_method IN ('COD', 'CARD', 'UPI')", name='ck_orders_payment_method'),
        sa.CheckConstraint(
            "payment_status IN ('Pending', 'Paid', 'Failed')",
            name='ck_orders_payment_status',
        ),
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_orders_created_at', 'orders')
    op.drop_index('ix_orders_status', 'orders')
    op.drop_index('ix_orders_user_id', 'orders')
    op.drop_table('orders')
    op.drop_index('ix_products_category', 'products')
    op.drop_index('ix_products_external_id', 'products')
    op.drop_table('products')
    op.drop_index('ix_categories_slug', 'categories')
    op.drop_table('categories')
    op.drop_index('ix_users_email', 'users')
    op.drop_table('users')
