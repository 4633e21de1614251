"""users and inventory

Revision ID: 0001_users_inventory
Revises:
Create Date: 2026-10-18 00:00:00.000000

Creates the two tables the tracker needs:
- users: credential holders with a single role flag
- inventory: delivery, counting and refill fields per item batch
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_users_inventory'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username', name='uq_users_username'),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_username', 'users', ['username'])
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'inventory',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('delivery_date', sa.Date(), nullable=True),
        sa.Column('delivery_no', sa.String(length=100), nullable=True),
        sa.Column('supplier_name', sa.String(length=255), nullable=True),
        sa.Column('delivery_details', sa.Text(), nullable=True),
        sa.Column('stockman', sa.String(length=255), nullable=True),
        sa.Column('item_description', sa.Text(), nullable=False),
        sa.Column('item_code', sa.String(length=100), nullable=True),
        sa.Column('color', sa.String(length=100), nullable=True),
        sa.Column('qty', sa.Integer(), nullable=True),
        sa.Column('storage', sa.String(length=255), nullable=True),
        sa.Column('counted_by', sa.String(length=255), nullable=True),
        sa.Column('date_counted', sa.Date(), nullable=True),
        sa.Column('recorded_by', sa.Integer(), nullable=True),
        sa.Column('edited_by', sa.Integer(), nullable=True),
        sa.Column('refill_status', sa.String(length=16), nullable=True, server_default=''),
        sa.Column('date_of_refill', sa.Date(), nullable=True),
        sa.Column('refill_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['recorded_by'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['edited_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_inventory_item_code', 'inventory', ['item_code'])
    op.create_index('ix_inventory_delivery_no', 'inventory', ['delivery_no'])
    op.create_index('ix_inventory_created_at', 'inventory', ['created_at'])


def downgrade():
    op.drop_index('ix_inventory_created_at', table_name='inventory')
    op.drop_index('ix_inventory_delivery_no', table_name='inventory')
    op.drop_index('ix_inventory_item_code', table_name='inventory')
    op.drop_table('inventory')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
