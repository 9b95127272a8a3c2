"""create ledger tables

Revision ID: 3f2a7c1d9e04
Revises:
Create Date: 2026-10-19 17:40:12.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a7c1d9e04'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'groups',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=False, server_default=''),
        sa.Column('category', sa.String(), nullable=False, server_default='Other'),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('total_expenses', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_groups_created_by', 'groups', ['created_by'])

    op.create_table(
        'group_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('balance', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now()),

        sa.ForeignKeyConstraint(
            ['group_id'],
            ['groups.id'],
            ondelete='CASCADE',
        ),

        sa.UniqueConstraint('group_id', 'user_id', name='uq_group_member_user'),
    )
    op.create_index('ix_group_members_user_id', 'group_members', ['user_id'])

    op.create_table(
        'expenses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('paid_by', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('category', sa.String(), nullable=False, server_default='Other'),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), server_default=sa.func.now()),

        sa.ForeignKeyConstraint(
            ['group_id'],
            ['groups.id'],
            ondelete='CASCADE',
        ),
    )
    op.create_index('ix_expenses_group_id', 'expenses', ['group_id'])
    op.create_index('ix_expenses_paid_by', 'expenses', ['paid_by'])

    op.create_table(
        'expense_splits',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('expense_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('share', sa.Numeric(12, 2), nullable=False),
        sa.Column('share_type', sa.String(), nullable=False, server_default='equal'),

        sa.ForeignKeyConstraint(
            ['expense_id'],
            ['expenses.id'],
            ondelete='CASCADE',
        ),
    )
    op.create_index('ix_expense_splits_expense_id', 'expense_splits', ['expense_id'])
    op.create_index('ix_expense_splits_user_id', 'expense_splits', ['user_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('paid_by', sa.Integer(), nullable=False),
        sa.Column('paid_to', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('description', sa.String(), nullable=False, server_default='Balance settlement'),
        sa.Column('date', sa.DateTime(timezone=True), server_default=sa.func.now()),

        sa.ForeignKeyConstraint(
            ['group_id'],
            ['groups.id'],
            ondelete='CASCADE',
        ),
    )
    op.create_index('ix_payments_group_id', 'payments', ['group_id'])
    op.create_index('ix_payments_paid_by', 'payments', ['paid_by'])
    op.create_index('ix_payments_paid_to', 'payments', ['paid_to'])

    op.create_table(
        'activities',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('actor', sa.Integer(), nullable=False),
        sa.Column('target', sa.Integer(), nullable=True),
        sa.Column('group_id', sa.Integer(), nullable=True),
        sa.Column('expense_id', sa.Integer(), nullable=True),
        sa.Column('payment_id', sa.Integer(), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_activities_actor', 'activities', ['actor'])
    op.create_index('ix_activities_target', 'activities', ['target'])
    op.create_index('ix_activities_group_id', 'activities', ['group_id'])
    op.create_index('ix_activities_created_at', 'activities', ['created_at'])

def downgrade() -> None:
    op.drop_table('activities')
    op.drop_table('payments')
    op.drop_table('expense_splits')
    op.drop_table('expenses')
    op.drop_table('group_members')
    op.drop_table('groups')
