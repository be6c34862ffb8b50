"""User repository for user-related database operations."""

from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.repositories.base import BaseRepository
from app.db.models.user import User


class UserRepository(BaseRepository[User]):
    """Repository for User entity operations."""
    
    def __init__(self, db: Session, correlation_id: Optional[str] = None):
        super().__init__(db, User, correlation_id)
    
    def get_active(self, user_id: int) -> Optional[User]:
        """Get a user that exists, is not deleted and is active.
        
        Args:
            user_id: User ID
            
        Returns:
            User instance or None if not found or inactive
        """
        result = self.db.query(self.model).filter(
            self.model.id == user_id,
            self.model.is_deleted == False,
            self.model.is_active == True
        ).first()
        
        self._log_operation("get_active", user_id=user_id, found=result is not None)
        return result
    
    def exists_active(self, user_id: int) -> bool:
        """Check whether an active user with this id exists."""
        result = self.db.query(self.model.id).filter(
            self.model.id == user_id,
            self.model.is_deleted == False,
            self.model.is_active == True
        ).first() is not None
        
        self._log_operation("exists_active", user_id=user_id, exists=result)
        return result

    def search_active(self, term: str, exclude_id: int, limit: int) -> List[User]:
        """Active users whose name or email contains ``term``, case-insensitively.

        Args:
            term: Search text; ``%`` and ``_`` match literally
            exclude_id: User left out of the results (the searcher)
            limit: Maximum number of users returned
        """
        pattern = contains_pattern(term)
        results = self.db.query(self.model).filter(
            self.model.id != exclude_id,
            self.model.is_deleted == False,
            self.model.is_active == True,
            or_(
                self.model.name.ilike(pattern, escape="\\"),
                self.model.email.ilike(pattern, escape="\\")
            )
        ).order_by(self.model.name, self.model.id).limit(limit).all()

        self._log_operation("search_active", exclude_id=exclude_id, limit=limit, count=len(results))
        return results


def contains_pattern(term: str) -> str:
    """LIKE pattern matching ``term`` anywhere, with wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
