from sqlalchemy import Column, Integer, String, Float, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.db.base_class import AuditMixin, Base


class Place(Base, AuditMixin):
	"""A saved place ("pinory"). Only ``id`` and ``created_by`` matter to sharing."""
	__tablename__ = "places"

	id = Column(Integer, primary_key=True, index=True)
	name = Column(String(200), nullable=False)
	address = Column(String, nullable=True)
	lat = Column(Float, nullable=True)
	lng = Column(Float, nullable=True)
	note = Column(Text, nullable=True)
	visibility = Column(String(32), nullable=False, default="private")
	created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

	creator = relationship("User", back_populates="places")
	shares = relationship("PinoryShare", back_populates="place", cascade="all, delete-orphan")
