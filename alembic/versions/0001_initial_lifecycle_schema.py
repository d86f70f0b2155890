"""initial lifecycle schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_is_active', 'users', ['is_active'])

    op.create_table(
        'roles',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_roles_name', 'roles', ['name'], unique=True)

    op.create_table(
        'user_roles',
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('role_id', sa.String(), sa.ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'properties',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('address', sa.String(), nullable=False),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('zip', sa.String(), nullable=True),
        sa.Column('country', sa.String(), nullable=True),
        sa.Column('type', sa.String(), nullable=True),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Numeric(4, 1), nullable=True),
        sa.Column('square_feet', sa.Integer(), nullable=True),
        sa.Column('lot_size', sa.Numeric(12, 2), nullable=True),
        sa.Column('year_built', sa.Integer(), nullable=True),
        sa.Column('listing_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('sale_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='Available'),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_properties_city', 'properties', ['city'])
    op.create_index('ix_properties_type', 'properties', ['type'])
    op.create_index('ix_properties_status', 'properties', ['status'])
    op.create_index('idx_properties_status_type', 'properties', ['status', 'type'])

    op.create_table(
        'listings',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('property_id', sa.String(), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('agent_id', sa.String(), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('list_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='Active'),
        *_timestamps(),
    )
    op.create_index('ix_listings_property_id', 'listings', ['property_id'])
    op.create_index('ix_listings_agent_id', 'listings', ['agent_id'])
    op.create_index('ix_listings_status', 'listings', ['status'])
    op.create_index('ix_listings_created_at', 'listings', ['created_at'])
    op.create_index('idx_listings_agent_status', 'listings', ['agent_id', 'status'])
    # At most one Active listing per property
    op.create_index(
        'uq_listings_one_active_per_property',
        'listings',
        ['property_id'],
        unique=True,
        postgresql_where=sa.text("status = 'Active'"),
        sqlite_where=sa.text("status = 'Active'"),
    )

    op.create_table(
        'clients',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('zip', sa.String(), nullable=True),
        sa.Column('country', sa.String(), nullable=True),
        sa.Column('agent_id', sa.String(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_clients_email', 'clients', ['email'], unique=True)
    op.create_index('ix_clients_phone', 'clients', ['phone'])
    op.create_index('ix_clients_agent_id', 'clients', ['agent_id'])
    op.create_index('idx_clients_name', 'clients', ['last_name', 'first_name'])

    op.create_table(
        'showings',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('listing_id', sa.String(), sa.ForeignKey('listings.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('client_id', sa.String(), sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='Scheduled'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_showings_listing_id', 'showings', ['listing_id'])
    op.create_index('ix_showings_client_id', 'showings', ['client_id'])
    op.create_index('ix_showings_status', 'showings', ['status'])
    op.create_index('idx_showings_listing_start', 'showings', ['listing_id', 'start_time'])

    op.create_table(
        'offers',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('listing_id', sa.String(), sa.ForeignKey('listings.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('client_id', sa.String(), sa.ForeignKey('clients.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('offer_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('offer_date', sa.Date(), nullable=False),
        sa.Column('expiration_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='Pending'),
        sa.Column('contingencies', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_offers_listing_id', 'offers', ['listing_id'])
    op.create_index('ix_offers_client_id', 'offers', ['client_id'])
    op.create_index('ix_offers_status', 'offers', ['status'])
    op.create_index('idx_offers_listing_status', 'offers', ['listing_id', 'status'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('offer_id', sa.String(), sa.ForeignKey('offers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('closing_date', sa.Date(), nullable=False),
        sa.Column('commission_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('closing_costs', sa.Numeric(12, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    # At most one transaction per offer
    op.create_index('ix_transactions_offer_id', 'transactions', ['offer_id'], unique=True)

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(), nullable=False, server_default='info'),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('module', sa.String(), nullable=True),
        sa.Column('entity_type', sa.String(), nullable=True),
        sa.Column('entity_id', sa.String(), nullable=True),
        sa.Column('action_url', sa.String(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])
    op.create_index('idx_notifications_user_unread', 'notifications', ['user_id', 'is_read'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('transactions')
    op.drop_table('offers')
    op.drop_table('showings')
    op.drop_table('clients')
    op.drop_index('uq_listings_one_active_per_property', table_name='listings')
    op.drop_table('listings')
    op.drop_table('properties')
    op.drop_table('user_roles')
    op.drop_table('roles')
    op.drop_table('users')
