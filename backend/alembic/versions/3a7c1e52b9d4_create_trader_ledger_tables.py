"""create trader ledger tables

Revision ID: 3a7c1e52b9d4
Revises:
Create Date: 2025-11-02 10:12:41.508113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3a7c1e52b9d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create admins, products and the four ledger tables."""
    op.create_table(
        'admins',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('role', sa.String(length=50), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_admins_id', 'admins', ['id'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
    )
    op.create_index('ix_products_id', 'products', ['id'])

    op.create_table(
        'traders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('contact_person', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('tax_number', sa.String(length=100), nullable=True),
        sa.Column('payment_terms', sa.Integer(), nullable=False),
        sa.Column('credit_limit', sa.Numeric(12, 2), nullable=False),
        sa.Column('current_balance', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_traders_id', 'traders', ['id'])
    op.create_index('ix_traders_company_name', 'traders', ['company_name'])
    op.create_index('ix_traders_status', 'traders', ['status'])

    op.create_table(
        'trader_bills',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trader_id', sa.Integer(), sa.ForeignKey('traders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('bill_number', sa.String(length=50), nullable=False),
        sa.Column('bill_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('amount_due', sa.Numeric(12, 2), sa.Computed('total_amount - amount_paid', persisted=True)),
        sa.Column('payment_status', sa.String(length=20), server_default='unpaid', nullable=False),
        sa.Column('bill_image', sa.String(length=500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('admins.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_trader_bills_id', 'trader_bills', ['id'])
    op.create_index('ix_trader_bills_trader_id', 'trader_bills', ['trader_id'])
    op.create_index('ix_trader_bills_bill_number', 'trader_bills', ['bill_number'], unique=True)

    op.create_table(
        'trader_bill_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('bill_id', sa.Integer(), sa.ForeignKey('trader_bills.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('quantity', sa.Numeric(10, 3), nullable=False),
        sa.Column('unit_cost', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_cost', sa.Numeric(14, 2), nullable=False),
    )
    op.create_index('ix_trader_bill_items_id', 'trader_bill_items', ['id'])
    op.create_index('ix_trader_bill_items_bill_id', 'trader_bill_items', ['bill_id'])

    op.create_table(
        'trader_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('trader_id', sa.Integer(), sa.ForeignKey('traders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('bill_id', sa.Integer(), sa.ForeignKey('trader_bills.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.String(length=50), nullable=False),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reference_number', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('admins.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_trader_payments_id', 'trader_payments', ['id'])
    op.create_index('ix_trader_payments_trader_id', 'trader_payments', ['trader_id'])
    op.create_index('ix_trader_payments_bill_id', 'trader_payments', ['bill_id'])


def downgrade() -> None:
    """Drop the ledger tables, children first."""
    op.drop_table('trader_payments')
    op.drop_table('trader_bill_items')
    op.drop_table('trader_bills')
    op.drop_table('traders')
    op.drop_table('products')
    op.drop_table('admins')
