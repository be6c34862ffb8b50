from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from app.db.base_class import TimestampMixin, Base


class FriendInvitation(Base, TimestampMixin):
	"""A reusable invite code; accepting it befriends the inviter directly."""
	__tablename__ = "friend_invitations"

	id = Column(Integer, primary_key=True, index=True)
	user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	invite_code = Column(String(16), unique=True, index=True, nullable=False)
	is_active = Column(Boolean, nullable=False, default=True)
	expires_at = Column(DateTime(timezone=True), nullable=True)
	# None means unlimited
	max_usage = Column(Integer, nullable=True)
	usage_count = Column(Integer, nullable=False, default=0)

	user = relationship("User")
	acceptances = relationship("FriendInvitationAcceptance", back_populates="invitation", cascade="all, delete-orphan")

	__table_args__ = (
		# At most one active invitation per user
		Index(
			"uq_friend_invitations_active_user",
			"user_id",
			unique=True,
			postgresql_where=text("is_active"),
			sqlite_where=text("is_active = 1"),
		),
	)


class FriendInvitationAcceptance(Base, TimestampMixin):
	__tablename__ = "friend_invitation_acceptances"

	id = Column(Integer, primary_key=True, index=True)
	invitation_id = Column(Integer, ForeignKey("friend_invitations.id", ondelete="CASCADE"), nullable=False, index=True)
	accepted_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	friendship_id = Column(Integer, ForeignKey("friendships.id", ondelete="SET NULL"), nullable=True)

	invitation = relationship("FriendInvitation", back_populates="acceptances")
