from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint, Index, case
from sqlalchemy.orm import relationship
from app.db.base_class import TimestampMixin, Base


class Friendship(Base, TimestampMixin):
	__tablename__ = "friendships"

	id = Column(Integer, primary_key=True, index=True)
	requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	addressee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	status = Column(String(16), nullable=False, default="pending", index=True)  # pending, accepted, blocked

	requester = relationship("User", foreign_keys=[requester_id])
	addressee = relationship("User", foreign_keys=[addressee_id])

	__table_args__ = (
		# One row per unordered pair: (A, B) and (B, A) collide
		Index(
			"uq_friendships_unordered_pair",
			case((requester_id < addressee_id, requester_id), else_=addressee_id),
			case((requester_id < addressee_id, addressee_id), else_=requester_id),
			unique=True,
		),
		CheckConstraint("requester_id <> addressee_id", name="ck_friendships_not_self"),
	)

	def involves(self, user_id: int) -> bool:
		return user_id in (self.requester_id, self.addressee_id)

	def other_party_of(self, user_id: int) -> int:
		return self.addressee_id if self.requester_id == user_id else self.requester_id
