from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('admin', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('user_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('tel', sa.String(30), nullable=True),
        sa.Column('password', sa.String(100), nullable=False),
        sa.Column('edit_time', sa.DateTime, nullable=False, server_default=sa.func.now())
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_table(
        'products',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('item_group', sa.String(50), nullable=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('content', sa.Text, nullable=True),
        sa.Column('price', sa.Numeric(10,2), nullable=False),
        sa.Column('sale_price', sa.Numeric(10,2), nullable=True),
        sa.Column('img_urls', sa.String(500), nullable=True),
        sa.Column('sell', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('edit_time', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now())
    )
    op.create_table(
        'cart',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer, sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('qty', sa.Integer, nullable=False),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_cart_user_product')
    )
    op.create_index('ix_cart_user_id', 'cart', ['user_id'])

def downgrade():
    op.drop_index('ix_cart_user_id', table_name='cart')
    op.drop_table('cart')
    op.drop_table('products')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
