"""Friendship repository.

A friendship has no owning direction: the pair (A, B) is stored once, either
as requester=A/addressee=B or the other way round, so every pair lookup
matches both orderings.
"""

from typing import Dict, Optional, List
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, aliased, joinedload

from app.repositories.base import BaseRepository
from app.repositories.user import contains_pattern
from app.db.models.friendship import Friendship
from app.db.models.user import User
from app.schemas.friendship import FriendshipStatus


class FriendshipRepository(BaseRepository[Friendship]):
    """Repository for Friendship entity operations."""

    def __init__(self, db: Session, correlation_id: Optional[str] = None):
        super().__init__(db, Friendship, correlation_id)

    def _pair_filter(self, user_a: int, user_b: int):
        return or_(
            and_(self.model.requester_id == user_a, self.model.addressee_id == user_b),
            and_(self.model.requester_id == user_b, self.model.addressee_id == user_a)
        )

    def get_between(self, user_a: int, user_b: int) -> Optional[Friendship]:
        """Get the friendship for the unordered pair {user_a, user_b}.

        Args:
            user_a: One user ID
            user_b: The other user ID

        Returns:
            Friendship instance or None if the pair has no record
        """
        result = self.db.query(self.model).filter(self._pair_filter(user_a, user_b)).first()

        self._log_operation(
            "get_between",
            user_a=user_a,
            user_b=user_b,
            found=result is not None,
            status=result.status if result else None
        )
        return result

    def get_status_between(self, user_a: int, user_b: int) -> Optional[FriendshipStatus]:
        """Get only the status for the pair, or None when no record exists."""
        row = self.db.query(self.model.status).filter(self._pair_filter(user_a, user_b)).first()
        status = FriendshipStatus(row[0]) if row else None

        self._log_operation("get_status_between", user_a=user_a, user_b=user_b, status=status.value if status else None)
        return status

    def create_request(self, requester_id: int, addressee_id: int) -> Friendship:
        """Create a pending friend request."""
        return self.create({
            "requester_id": requester_id,
            "addressee_id": addressee_id,
            "status": FriendshipStatus.PENDING.value
        })

    def create_accepted(self, requester_id: int, addressee_id: int) -> Friendship:
        """Create a friendship that skips the pending step (invitation links)."""
        return self.create({
            "requester_id": requester_id,
            "addressee_id": addressee_id,
            "status": FriendshipStatus.ACCEPTED.value
        })

    def create_block(self, blocker_id: int, blocked_id: int) -> Friendship:
        """Create a blocked record with the blocker as requester."""
        return self.create({
            "requester_id": blocker_id,
            "addressee_id": blocked_id,
            "status": FriendshipStatus.BLOCKED.value
        })

    def set_status(self, friendship: Friendship, status: FriendshipStatus) -> Friendship:
        return self.update(friendship, {"status": status.value})

    def list_with_status(self, user_id: int, status: FriendshipStatus, search: Optional[str] = None) -> List[Friendship]:
        """Friendships of the user in ``status``, newest first, with both parties loaded.

        Blocked rows are only listed for the user who created the block.
        ``search`` keeps rows whose other party's name or email contains it.
        """
        query = self.db.query(self.model).options(
            joinedload(self.model.requester),
            joinedload(self.model.addressee)
        ).filter(self.model.status == status.value)

        if status == FriendshipStatus.BLOCKED:
            query = query.filter(self.model.requester_id == user_id)
        else:
            query = query.filter(or_(self.model.requester_id == user_id, self.model.addressee_id == user_id))

        if search:
            pattern = contains_pattern(search)
            requester = aliased(User)
            addressee = aliased(User)

            def _matches(user):
                return or_(user.name.ilike(pattern, escape="\\"), user.email.ilike(pattern, escape="\\"))

            query = query.join(requester, self.model.requester_id == requester.id).join(
                addressee, self.model.addressee_id == addressee.id
            ).filter(or_(
                and_(self.model.requester_id == user_id, _matches(addressee)),
                and_(self.model.addressee_id == user_id, _matches(requester))
            ))

        results = query.order_by(self.model.created_at.desc(), self.model.id.desc()).all()

        self._log_operation("list_with_status", user_id=user_id, status=status.value, count=len(results))
        return results

    def list_for_pairs(self, user_id: int, other_ids: List[int]) -> Dict[int, Friendship]:
        """The user's friendship with each of ``other_ids``, keyed by the other user's id."""
        if not other_ids:
            return {}
        rows = self.db.query(self.model).filter(or_(
            and_(self.model.requester_id == user_id, self.model.addressee_id.in_(other_ids)),
            and_(self.model.addressee_id == user_id, self.model.requester_id.in_(other_ids))
        )).all()

        self._log_operation("list_for_pairs", user_id=user_id, others=len(other_ids), found=len(rows))
        return {row.other_party_of(user_id): row for row in rows}

    def list_pending(self, user_id: int, received: bool) -> List[Friendship]:
        """Pending requests addressed to (``received``) or sent by the user, newest first."""
        column = self.model.addressee_id if received else self.model.requester_id
        results = self.db.query(self.model).filter(
            column == user_id,
            self.model.status == FriendshipStatus.PENDING.value
        ).order_by(self.model.created_at.desc(), self.model.id.desc()).all()

        self._log_operation("list_pending", user_id=user_id, received=received, count=len(results))
        return results
