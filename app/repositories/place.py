"""Place repository. Places are owned elsewhere; sharing only reads them."""

from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.repositories.base import BaseRepository
from app.db.models.place import Place


class PlaceRepository(BaseRepository[Place]):
    """Read access to places for the sharing flow."""

    def __init__(self, db: Session, correlation_id: Optional[str] = None):
        super().__init__(db, Place, correlation_id)

    def count_by_owners(self, owner_ids: List[int], visibilities: List[str]) -> Dict[int, int]:
        """Number of places per owner with one of ``visibilities``; owners with none are left out."""
        if not owner_ids:
            return {}
        rows = self.db.query(self.model.created_by, func.count(self.model.id)).filter(
            self.model.created_by.in_(owner_ids),
            self.model.visibility.in_(visibilities),
            self.model.is_deleted == False
        ).group_by(self.model.created_by).all()

        self._log_operation("count_by_owners", owners=len(owner_ids), visibilities=visibilities)
        return {owner_id: total for owner_id, total in rows}
