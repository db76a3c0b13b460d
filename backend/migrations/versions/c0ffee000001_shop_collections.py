"""shop collections

Revision ID: c0ffee000001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the shop schema from scratch:
- products, clients, sales, store_debts: one table per collection, rows
  ordered by `position` (collections are rewritten in full on every save)
- stored_collections: one marker row per collection that has been saved;
  a missing marker means "never saved, seed on first load"
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c0ffee000001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'products',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('cost_cents', sa.Integer(), nullable=False),
        sa.Column('stock', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=8), nullable=False),
        sa.Column('barcode', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_position', 'products', ['position'])
    op.create_index('ix_products_barcode', 'products', ['barcode'])

    op.create_table(
        'clients',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('balance_cents', sa.Integer(), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('cpf', sa.String(length=32), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_position', 'clients', ['position'])

    op.create_table(
        'sales',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('client_id', sa.String(length=64), nullable=False),
        sa.Column('client_name', sa.String(length=255), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('amount_paid_cents', sa.Integer(), nullable=False),
        sa.Column('change_cents', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sales_position', 'sales', ['position'])
    op.create_index('ix_sales_occurred_at', 'sales', ['occurred_at'])

    op.create_table(
        'store_debts',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_paid', sa.Boolean(), nullable=False),
        sa.Column('is_recurring', sa.Boolean(), nullable=False),
        sa.Column('proof_image', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_store_debts_position', 'store_debts', ['position'])

    op.create_table(
        'stored_collections',
        sa.Column('name', sa.String(length=32), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('record_count', sa.Integer(), nullable=False),
        sa.Column('saved_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('name'),
    )


def downgrade():
    op.drop_table('stored_collections')
    op.drop_index('ix_store_debts_position', table_name='store_debts')
    op.drop_table('store_debts')
    op.drop_index('ix_sales_occurred_at', table_name='sales')
    op.drop_index('ix_sales_position', table_name='sales')
    op.drop_table('sales')
    op.drop_index('ix_clients_position', table_name='clients')
    op.drop_table('clients')
    op.drop_index('ix_products_barcode', table_name='products')
    op.drop_index('ix_products_position', table_name='products')
    op.drop_table('products')
