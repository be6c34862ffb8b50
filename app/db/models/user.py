from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from app.db.base_class import AuditMixin, Base

class User(Base, AuditMixin):
	__tablename__ = "users"

	id = Column(Integer, primary_key=True, index=True)
	email = Column(String, unique=True, index=True, nullable=False)
	name = Column(String, nullable=True)
	avatar_url = Column(String, nullable=True)
	is_active = Column(Boolean, default=True)

	places = relationship("Place", back_populates="creator", cascade="all, delete-orphan")
