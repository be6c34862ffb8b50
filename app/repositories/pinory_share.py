"""Share link repository for pinory shares."""

from typing import Optional, List
from sqlalchemy.orm import Session, joinedload

from app.repositories.base import BaseRepository
from app.db.models.pinory_share import PinoryShare


class PinoryShareRepository(BaseRepository[PinoryShare]):
    """Repository for PinoryShare entity operations."""

    def __init__(self, db: Session, correlation_id: Optional[str] = None):
        super().__init__(db, PinoryShare, correlation_id)

    def get_by_slug(self, share_slug: str) -> Optional[PinoryShare]:
        """Get a share by slug with its place loaded, whether active or not.

        Args:
            share_slug: Public share token

        Returns:
            PinoryShare instance or None if no row holds the slug
        """
        result = self.db.query(self.model).options(
            joinedload(self.model.place)
        ).filter(self.model.share_slug == share_slug).first()

        self._log_operation("get_by_slug", share_slug=share_slug, found=result is not None)
        return result

    def slug_exists(self, share_slug: str) -> bool:
        """Check whether any row, revoked ones included, holds the slug."""
        result = self.db.query(self.model.id).filter(
            self.model.share_slug == share_slug
        ).first() is not None

        self._log_operation("slug_exists", share_slug=share_slug, exists=result)
        return result

    def get_active_for_place(self, place_id: int, owner_id: int) -> Optional[PinoryShare]:
        """Get the active share of a place created by its owner."""
        result = self.db.query(self.model).filter(
            self.model.place_id == place_id,
            self.model.created_by == owner_id,
            self.model.is_active == True
        ).first()

        self._log_operation("get_active_for_place", place_id=place_id, owner_id=owner_id, found=result is not None)
        return result

    def list_active_by_owner(self, owner_id: int) -> List[PinoryShare]:
        """Active shares created by the user, newest first, with places loaded."""
        results = self.db.query(self.model).options(
            joinedload(self.model.place)
        ).filter(
            self.model.created_by == owner_id,
            self.model.is_active == True
        ).order_by(self.model.created_at.desc(), self.model.id.desc()).all()

        self._log_operation("list_active_by_owner", owner_id=owner_id, count=len(results))
        return results

    def increment_view_count(self, share: PinoryShare) -> PinoryShare:
        """Add one view with a single UPDATE so concurrent views are not lost."""
        self.db.query(self.model).filter(self.model.id == share.id).update(
            {self.model.view_count: self.model.view_count + 1},
            synchronize_session=False
        )
        self.db.flush()
        self.db.refresh(share)

        self._log_operation("increment_view_count", share_id=share.id, view_count=share.view_count)
        return share
