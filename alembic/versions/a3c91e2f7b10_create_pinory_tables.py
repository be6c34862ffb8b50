"""create users, places, friendships and pinory shares

Revision ID: a3c91e2f7b10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a3c91e2f7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
	return [
		sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
		sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
	]


def _audit():
	return _timestamps() + [
		sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
		sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
	]


def upgrade() -> None:
	"""Upgrade schema."""
	op.create_table(
		'users',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('email', sa.String(), nullable=False),
		sa.Column('name', sa.String(), nullable=True),
		sa.Column('avatar_url', sa.String(), nullable=True),
		sa.Column('is_active', sa.Boolean(), nullable=True),
		*_audit(),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
	op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

	op.create_table(
		'places',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('name', sa.String(length=200), nullable=False),
		sa.Column('address', sa.String(), nullable=True),
		sa.Column('lat', sa.Float(), nullable=True),
		sa.Column('lng', sa.Float(), nullable=True),
		sa.Column('note', sa.Text(), nullable=True),
		sa.Column('visibility', sa.String(length=32), nullable=False),
		sa.Column('created_by', sa.Integer(), nullable=False),
		*_audit(),
		sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='CASCADE'),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_places_id'), 'places', ['id'], unique=False)
	op.create_index(op.f('ix_places_created_by'), 'places', ['created_by'], unique=False)

	op.create_table(
		'friendships',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('requester_id', sa.Integer(), nullable=False),
		sa.Column('addressee_id', sa.Integer(), nullable=False),
		sa.Column('status', sa.String(length=16), nullable=False),
		*_timestamps(),
		sa.CheckConstraint('requester_id <> addressee_id', name='ck_friendships_not_self'),
		sa.ForeignKeyConstraint(['requester_id'], ['users.id'], ondelete='CASCADE'),
		sa.ForeignKeyConstraint(['addressee_id'], ['users.id'], ondelete='CASCADE'),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_friendships_id'), 'friendships', ['id'], unique=False)
	op.create_index(op.f('ix_friendships_requester_id'), 'friendships', ['requester_id'], unique=False)
	op.create_index(op.f('ix_friendships_addressee_id'), 'friendships', ['addressee_id'], unique=False)
	op.create_index(op.f('ix_friendships_status'), 'friendships', ['status'], unique=False)
	op.create_index(
		'uq_friendships_unordered_pair',
		'friendships',
		[
			sa.text('(CASE WHEN requester_id < addressee_id THEN requester_id ELSE addressee_id END)'),
			sa.text('(CASE WHEN requester_id < addressee_id THEN addressee_id ELSE requester_id END)'),
		],
		unique=True
	)

	op.create_table(
		'pinory_shares',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('place_id', sa.Integer(), nullable=False),
		sa.Column('share_slug', sa.String(length=32), nullable=False),
		sa.Column('visibility', sa.String(length=32), nullable=False),
		sa.Column('is_active', sa.Boolean(), nullable=False),
		sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
		sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
		sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
		sa.Column('created_by', sa.Integer(), nullable=False),
		*_timestamps(),
		sa.ForeignKeyConstraint(['place_id'], ['places.id'], ondelete='CASCADE'),
		sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='CASCADE'),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_pinory_shares_id'), 'pinory_shares', ['id'], unique=False)
	op.create_index(op.f('ix_pinory_shares_place_id'), 'pinory_shares', ['place_id'], unique=False)
	op.create_index(op.f('ix_pinory_shares_created_by'), 'pinory_shares', ['created_by'], unique=False)
	op.create_index(op.f('ix_pinory_shares_share_slug'), 'pinory_shares', ['share_slug'], unique=True)
	op.create_index(
		'uq_pinory_shares_active_place_owner',
		'pinory_shares',
		['place_id', 'created_by'],
		unique=True,
		postgresql_where=sa.text('is_active'),
		sqlite_where=sa.text('is_active = 1')
	)


def downgrade() -> None:
	"""Downgrade schema."""
	op.drop_index('uq_pinory_shares_active_place_owner', table_name='pinory_shares')
	op.drop_index(op.f('ix_pinory_shares_share_slug'), table_name='pinory_shares')
	op.drop_index(op.f('ix_pinory_shares_created_by'), table_name='pinory_shares')
	op.drop_index(op.f('ix_pinory_shares_place_id'), table_name='pinory_shares')
	op.drop_index(op.f('ix_pinory_shares_id'), table_name='pinory_shares')
	op.drop_table('pinory_shares')
	op.drop_index('uq_friendships_unordered_pair', table_name='friendships')
	op.drop_index(op.f('ix_friendships_status'), table_name='friendships')
	op.drop_index(op.f('ix_friendships_addressee_id'), table_name='friendships')
	op.drop_index(op.f('ix_friendships_requester_id'), table_name='friendships')
	op.drop_index(op.f('ix_friendships_id'), table_name='friendships')
	op.drop_table('friendships')
	op.drop_index(op.f('ix_places_created_by'), table_name='places')
	op.drop_index(op.f('ix_places_id'), table_name='places')
	op.drop_table('places')
	op.drop_index(op.f('ix_users_email'), table_name='users')
	op.drop_index(op.f('ix_users_id'), table_name='users')
	op.drop_table('users')
