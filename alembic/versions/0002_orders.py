"""order header and snapshot lines

Revision ID: 0002_orders
Revises: 0001_init

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0002_orders'
down_revision = '0001_init'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'order_customers',
        sa.Column('order_number', sa.String(10), primary_key=True),
        sa.Column('check_time', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('consignee', sa.String(100), nullable=False),
        sa.Column('tel', sa.String(30), nullable=False),
        sa.Column('address', sa.String(255), nullable=False),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('idempotency_key', sa.String(64), nullable=True),
        sa.UniqueConstraint('user_id', 'idempotency_key', name='uq_order_idempotency')
    )
    op.create_index('ix_order_customers_user_id', 'order_customers', ['user_id'])

    # Product data is copied, not referenced: later price changes must not alter history
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('order_number', sa.String(10),
                  sa.ForeignKey('order_customers.order_number', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer, nullable=False),
        sa.Column('product_name', sa.String(200), nullable=False),
        sa.Column('sale_price', sa.Numeric(10,2), nullable=False),
        sa.Column('qty', sa.Integer, nullable=False),
        sa.Column('img_urls', sa.String(500), nullable=True)
    )
    op.create_index('ix_order_items_order_number', 'order_items', ['order_number'])


def downgrade() -> None:
    op.drop_index('ix_order_items_order_number', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_order_customers_user_id', table_name='order_customers')
    op.drop_table('order_customers')
