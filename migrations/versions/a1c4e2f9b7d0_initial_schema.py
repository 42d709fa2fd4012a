"""Initial schema: users, admins, units, bookings, inquiries, otp_codes

Revision ID: a1c4e2f9b7d0
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e2f9b7d0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _supports_partial_indexes() -> bool:
    return op.get_bind().dialect.name in ('sqlite', 'postgresql')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('contact_number', sa.String(30), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'admins',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('contact_number', sa.String(30), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admins_id', 'admins', ['id'])
    op.create_index('ix_admins_username', 'admins', ['username'], unique=True)
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)
    op.create_index('ix_admins_created_at', 'admins', ['created_at'])

    op.create_table(
        'units',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('building_name', sa.String(255), nullable=False),
        sa.Column('unit_number', sa.String(50), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('specifications', sa.Text(), nullable=False),
        sa.Column('special_features', sa.Text(), nullable=True),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('contact_person', sa.String(255), nullable=True),
        sa.Column('phone_number', sa.String(30), nullable=True),
        sa.Column('images', sa.Text(), nullable=True),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_units_id', 'units', ['id'])
    op.create_index('ix_units_user_id', 'units', ['user_id'])
    op.create_index('ix_units_is_available', 'units', ['is_available'])
    op.create_index('ix_units_created_at', 'units', ['created_at'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('contact_number', sa.String(30), nullable=False),
        sa.Column('number_of_people', sa.Integer(), nullable=False),
        sa.Column('transaction_type', sa.String(20), nullable=False, server_default='online'),
        sa.Column('date_of_visiting', sa.Date(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_bookings_id', 'bookings', ['id'])
    op.create_index('ix_bookings_unit_id', 'bookings', ['unit_id'])
    op.create_index('ix_bookings_user_id', 'bookings', ['user_id'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])
    op.create_index('ix_bookings_created_at', 'bookings', ['created_at'])
    if _supports_partial_indexes():
        op.create_index(
            'uq_bookings_one_confirmed_per_unit', 'bookings', ['unit_id'], unique=True,
            sqlite_where=sa.text("status = 'confirmed'"),
            postgresql_where=sa.text("status = 'confirmed'"),
        )
        op.create_index(
            'uq_bookings_one_active_per_renter', 'bookings', ['unit_id', 'user_id'], unique=True,
            sqlite_where=sa.text("status IN ('pending', 'confirmed')"),
            postgresql_where=sa.text("status IN ('pending', 'confirmed')"),
        )

    op.create_table(
        'inquiries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('unit_id', sa.Integer(), nullable=False),
        sa.Column('sender_user_id', sa.Integer(), nullable=False),
        sa.Column('recipient_user_id', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('parent_inquiry_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['unit_id'], ['units.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sender_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recipient_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['parent_inquiry_id'], ['inquiries.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_inquiries_id', 'inquiries', ['id'])
    op.create_index('ix_inquiries_unit_id', 'inquiries', ['unit_id'])
    op.create_index('ix_inquiries_sender_user_id', 'inquiries', ['sender_user_id'])
    op.create_index('ix_inquiries_recipient_user_id', 'inquiries', ['recipient_user_id'])
    op.create_index('ix_inquiries_parent_inquiry_id', 'inquiries', ['parent_inquiry_id'])
    op.create_index('ix_inquiries_created_at', 'inquiries', ['created_at'])

    op.create_table(
        'otp_codes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(6), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_otp_codes_id', 'otp_codes', ['id'])
    op.create_index('ix_otp_codes_user_id', 'otp_codes', ['user_id'])
    op.create_index('ix_otp_codes_created_at', 'otp_codes', ['created_at'])


def downgrade() -> None:
    op.drop_table('otp_codes')
    op.drop_table('inquiries')
    op.drop_table('bookings')
    op.drop_table('units')
    op.drop_table('admins')
    op.drop_table('users')
