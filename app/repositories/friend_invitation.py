"""Friend invitation repository."""

from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.repositories.base import BaseRepository
from app.db.models.friend_invitation import FriendInvitation, FriendInvitationAcceptance


class FriendInvitationRepository(BaseRepository[FriendInvitation]):
    """Repository for FriendInvitation and its acceptance records."""

    def __init__(self, db: Session, correlation_id: Optional[str] = None):
        super().__init__(db, FriendInvitation, correlation_id)

    def get_active_for_user(self, user_id: int) -> Optional[FriendInvitation]:
        result = self.db.query(self.model).filter(
            self.model.user_id == user_id,
            self.model.is_active == True
        ).first()

        self._log_operation("get_active_for_user", user_id=user_id, found=result is not None)
        return result

    def get_by_code(self, invite_code: str) -> Optional[FriendInvitation]:
        """Get an invitation by code with its inviter loaded, active or not."""
        result = self.db.query(self.model).options(
            joinedload(self.model.user)
        ).filter(self.model.invite_code == invite_code).first()

        self._log_operation("get_by_code", invite_code=invite_code, found=result is not None)
        return result

    def code_exists(self, invite_code: str) -> bool:
        result = self.db.query(self.model.id).filter(
            self.model.invite_code == invite_code
        ).first() is not None

        self._log_operation("code_exists", invite_code=invite_code, exists=result)
        return result

    def deactivate_for_user(self, user_id: int) -> int:
        """Deactivate every active invitation of the user; returns how many changed."""
        updated = self.db.query(self.model).filter(
            self.model.user_id == user_id,
            self.model.is_active == True
        ).update({self.model.is_active: False}, synchronize_session=False)
        self.db.flush()

        self._log_operation("deactivate_for_user", user_id=user_id, updated=updated)
        return updated

    def claim_use(self, invitation: FriendInvitation) -> bool:
        """Add one use unless the usage limit is already reached.

        The check and the increment are a single UPDATE, so two concurrent
        accepts cannot both take the last use.

        Returns:
            False when the invitation had no uses left
        """
        updated = self.db.query(self.model).filter(
            self.model.id == invitation.id,
            or_(self.model.max_usage.is_(None), self.model.usage_count < self.model.max_usage)
        ).update({self.model.usage_count: self.model.usage_count + 1}, synchronize_session=False)
        self.db.flush()
        self.db.refresh(invitation)

        self._log_operation("claim_use", invitation_id=invitation.id, claimed=bool(updated))
        return bool(updated)

    def add_acceptance(self, invitation_id: int, accepted_by_id: int, friendship_id: int) -> FriendInvitationAcceptance:
        acceptance = FriendInvitationAcceptance(
            invitation_id=invitation_id,
            accepted_by_id=accepted_by_id,
            friendship_id=friendship_id
        )
        self.db.add(acceptance)
        self.db.flush()

        self._log_operation("add_acceptance", invitation_id=invitation_id, accepted_by_id=accepted_by_id)
        return acceptance

    def count_acceptances(self, invitation_id: int) -> int:
        result = self.db.query(FriendInvitationAcceptance).filter(
            FriendInvitationAcceptance.invitation_id == invitation_id
        ).count()

        self._log_operation("count_acceptances", invitation_id=invitation_id, count=result)
        return result
