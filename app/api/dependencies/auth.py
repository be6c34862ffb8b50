"""Caller identity dependencies.

Identity comes from an external provider as a bearer JWT whose ``sub`` is the
user id. Anonymous callers are allowed through ``get_optional_user``; routes
that always need a user use ``get_current_user``.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.api.dependencies.database import get_db
from app.core.security import decode_user_id
from app.db.models.user import User
from app.repositories.user import UserRepository

bearer_scheme = HTTPBearer(auto_error=False)


def get_optional_user(
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
	db: Session = Depends(get_db),
) -> Optional[User]:
	"""Return the signed-in user, or None for anonymous or unusable tokens."""
	if credentials is None:
		return None
	user_id = decode_user_id(credentials.credentials)
	if user_id is None:
		return None
	return UserRepository(db).get_active(user_id)


def get_current_user(current_user: Optional[User] = Depends(get_optional_user)) -> User:
	if current_user is None:
		raise HTTPException(
			status_code=status.HTTP_401_UNAUTHORIZED,
			detail="Unauthorized. Please sign in.",
			headers={"WWW-Authenticate": "Bearer"},
		)
	return current_user


def user_id_of(user: Optional[User]) -> Optional[int]:
	return user.id if user is not None else None
