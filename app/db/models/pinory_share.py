from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from app.db.base_class import TimestampMixin, Base


class PinoryShare(Base, TimestampMixin):
	__tablename__ = "pinory_shares"

	id = Column(Integer, primary_key=True, index=True)
	place_id = Column(Integer, ForeignKey("places.id", ondelete="CASCADE"), nullable=False, index=True)
	share_slug = Column(String(32), unique=True, index=True, nullable=False)
	visibility = Column(String(32), nullable=False, default="friends")  # private, friends, selected_friends, public
	is_active = Column(Boolean, nullable=False, default=True)
	expires_at = Column(DateTime(timezone=True), nullable=True)
	revoked_at = Column(DateTime(timezone=True), nullable=True)
	view_count = Column(Integer, nullable=False, default=0)
	created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

	place = relationship("Place", back_populates="shares")

	__table_args__ = (
		# At most one active share per (place, owner)
		Index(
			"uq_pinory_shares_active_place_owner",
			"place_id",
			"created_by",
			unique=True,
			postgresql_where=text("is_active"),
			sqlite_where=text("is_active = 1"),
		),
	)
