"""create friend invitations and acceptances

Revision ID: c5e8d1a94b27
Revises: a3c91e2f7b10
Create Date: 2026-10-19 15:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c5e8d1a94b27'
down_revision: Union[str, Sequence[str], None] = 'a3c91e2f7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
	return [
		sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
		sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
	]


def upgrade() -> None:
	"""Upgrade schema."""
	op.create_table(
		'friend_invitations',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('user_id', sa.Integer(), nullable=False),
		sa.Column('invite_code', sa.String(length=16), nullable=False),
		sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
		sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
		sa.Column('max_usage', sa.Integer(), nullable=True),
		sa.Column('usage_count', sa.Integer(), nullable=False, server_default='0'),
		*_timestamps(),
		sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_friend_invitations_id'), 'friend_invitations', ['id'], unique=False)
	op.create_index(op.f('ix_friend_invitations_user_id'), 'friend_invitations', ['user_id'], unique=False)
	op.create_index(op.f('ix_friend_invitations_invite_code'), 'friend_invitations', ['invite_code'], unique=True)
	op.create_index(
		'uq_friend_invitations_active_user',
		'friend_invitations',
		['user_id'],
		unique=True,
		postgresql_where=sa.text('is_active'),
		sqlite_where=sa.text('is_active = 1')
	)

	op.create_table(
		'friend_invitation_acceptances',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('invitation_id', sa.Integer(), nullable=False),
		sa.Column('accepted_by_id', sa.Integer(), nullable=False),
		sa.Column('friendship_id', sa.Integer(), nullable=True),
		*_timestamps(),
		sa.ForeignKeyConstraint(['invitation_id'], ['friend_invitations.id'], ondelete='CASCADE'),
		sa.ForeignKeyConstraint(['accepted_by_id'], ['users.id'], ondelete='CASCADE'),
		sa.ForeignKeyConstraint(['friendship_id'], ['friendships.id'], ondelete='SET NULL'),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_friend_invitation_acceptances_id'), 'friend_invitation_acceptances', ['id'], unique=False)
	op.create_index(op.f('ix_friend_invitation_acceptances_invitation_id'), 'friend_invitation_acceptances', ['invitation_id'], unique=False)
	op.create_index(op.f('ix_friend_invitation_acceptances_accepted_by_id'), 'friend_invitation_acceptances', ['accepted_by_id'], unique=False)


def downgrade() -> None:
	"""Downgrade schema."""
	op.drop_index(op.f('ix_friend_invitation_acceptances_accepted_by_id'), table_name='friend_invitation_acceptances')
	op.drop_index(op.f('ix_friend_invitation_acceptances_invitation_id'), table_name='friend_invitation_acceptances')
	op.drop_index(op.f('ix_friend_invitation_acceptances_id'), table_name='friend_invitation_acceptances')
	op.drop_table('friend_invitation_acceptances')
	op.drop_index('uq_friend_invitations_active_user', table_name='friend_invitations')
	op.drop_index(op.f('ix_friend_invitations_invite_code'), table_name='friend_invitations')
	op.drop_index(op.f('ix_friend_invitations_user_id'), table_name='friend_invitations')
	op.drop_index(op.f('ix_friend_invitations_id'), table_name='friend_invitations')
	op.drop_table('friend_invitations')
