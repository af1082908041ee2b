"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


USER_ROLES = ('student', 'staff', 'manager')
ORDER_STATUSES = ('pending', 'preparing', 'ready', 'picked', 'cancelled')


def upgrade() -> None:
    user_role = postgresql.ENUM(*USER_ROLES, name='user_role', create_type=False)
    order_status = postgresql.ENUM(*ORDER_STATUSES, name='order_status', create_type=False)
    user_role.create(op.get_bind(), checkfirst=True)
    order_status.create(op.get_bind(), checkfirst=True)

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('username', sa.String(100), unique=True, nullable=False),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100)),
        sa.Column('last_name', sa.String(100)),
        sa.Column('role', user_role, nullable=False, server_default='student'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('refresh_token', sa.String(500)),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create menu_items table
    op.create_table(
        'menu_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), unique=True, nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('image', sa.String(500), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint('price >= 0', name='ck_menu_items_price_non_negative'),
    )

    # Create orders table; user_id has no foreign key since owners may be deleted
    op.create_table(
        'orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', sa.String(40), unique=True, nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('pickup_time', sa.String(50), nullable=False),
        sa.Column('special_instructions', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', order_status, nullable=False, server_default='pending'),
        sa.Column('cancelled_at', sa.DateTime()),
        sa.Column('canceled_by', user_role),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint(
            "(status = 'cancelled' AND cancelled_at IS NOT NULL AND canceled_by IS NOT NULL)"
            " OR (status != 'cancelled' AND cancelled_at IS NULL AND canceled_by IS NULL)",
            name='ck_orders_cancellation_fields',
        ),
    )
    op.create_index('ix_orders_user_id_status', 'orders', ['user_id', 'status'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_at_status', 'orders', ['created_at', 'status'])

    # Create archived_orders table
    op.create_table(
        'archived_orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', sa.String(40), unique=True, nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('pickup_time', sa.String(50), nullable=False),
        sa.Column('special_instructions', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', order_status, nullable=False, server_default='picked'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('cancelled_at', sa.DateTime()),
        sa.Column('canceled_by', user_role),
        sa.Column('archived_at', sa.DateTime(), default=sa.func.now()),
    )
    op.create_index('ix_archived_orders_created_at', 'archived_orders', ['created_at'])
    op.create_index('ix_archived_orders_archived_at', 'archived_orders', ['archived_at'])


def downgrade() -> None:
    op.drop_index('ix_archived_orders_archived_at', table_name='archived_orders')
    op.drop_index('ix_archived_orders_created_at', table_name='archived_orders')
    op.drop_table('archived_orders')

    op.drop_index('ix_orders_created_at_status', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_index('ix_orders_user_id_status', table_name='orders')
    op.drop_table('orders')

    op.drop_table('menu_items')
    op.drop_table('users')

    postgresql.ENUM(name='order_status').drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name='user_role').drop(op.get_bind(), checkfirst=True)
