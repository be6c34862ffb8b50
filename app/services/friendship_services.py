"""Friendship service implementing the friend-request state machine.

    none ──request──▶ pending ──accept──▶ accepted
                        │                    │
                        └──reject/remove──▶ (deleted) ◀──remove──┘

    any ──block──▶ blocked   (no new request can be created for the pair)

Every operation takes the acting user's id explicitly. Domain failures are
returned as result objects carrying an ``error_code``; unexpected exceptions
are logged and re-raised after the transaction is rolled back.
"""

from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.services.base import BaseService
from app.services.exceptions import (
    ServiceError,
    ValidationError,
    UserNotFoundError,
    FriendshipNotFoundError,
    ForbiddenError,
    SelfRequestError,
    AlreadyFriendsError,
    RequestAlreadySentError,
    RequestForbiddenError,
    RequestNotPendingError,
)
from app.db.models.friendship import Friendship
from app.schemas.friendship import (
    FriendshipStatus,
    FriendshipRead,
    FriendRead,
    RequestDirection,
    FriendshipResult,
    DeleteFriendshipResult,
    GetFriendsResult,
    GetRequestsResult,
    SearchUsersResult,
    UserSearchItem,
)


def ensure_can_request(existing: Friendship, correlation_id: Optional[str] = None) -> None:
    """Raise the conflict that an existing row for the pair means for a new friendship."""
    if existing.status == FriendshipStatus.ACCEPTED.value:
        raise AlreadyFriendsError(existing.id, correlation_id)
    if existing.status == FriendshipStatus.PENDING.value:
        raise RequestAlreadySentError(existing.id, correlation_id)
    if existing.status == FriendshipStatus.BLOCKED.value:
        raise RequestForbiddenError(existing.id, correlation_id)


class FriendshipService(BaseService):
    """Service class for friendship operations between two users."""

    def __init__(self, correlation_id: Optional[str] = None, **repositories):
        """Initialize friendship service.

        Args:
            correlation_id: Optional request correlation ID for logging
            **repositories: ``friendship_repo``, ``user_repo`` and ``place_repo``
        """
        super().__init__(correlation_id)
        if repositories:
            self._set_repositories(**repositories)

        for required in ("friendship_repo", "user_repo", "place_repo"):
            if not hasattr(self, required):
                raise ValidationError(
                    field=required,
                    message=f"{required} is required for FriendshipService",
                    correlation_id=correlation_id
                )

    def request_friendship(self, requester_id: Optional[int], addressee_id: int, db: Session) -> FriendshipResult:
        """Send a friend request from ``requester_id`` to ``addressee_id``.

        Fails with SELF_REQUEST, USER_NOT_FOUND, ALREADY_FRIENDS,
        REQUEST_ALREADY_SENT or REQUEST_FORBIDDEN (blocked pair).

        Args:
            requester_id: Acting user; None for anonymous callers
            addressee_id: User receiving the request
            db: Database session for transaction management

        Returns:
            FriendshipResult with the new pending friendship or error info
        """
        self.log_operation("request_friendship_attempt", requester_id=requester_id, addressee_id=addressee_id)

        try:
            requester_id = self.require_user(requester_id)

            def _request() -> Friendship:
                if requester_id == addressee_id:
                    raise SelfRequestError(requester_id, self.correlation_id)

                if not self.user_repo.exists_active(addressee_id):
                    raise UserNotFoundError(addressee_id, self.correlation_id)

                existing = self.friendship_repo.get_between(requester_id, addressee_id)
                if existing:
                    ensure_can_request(existing, self.correlation_id)

                return self.friendship_repo.create_request(requester_id, addressee_id)

            try:
                friendship = self.run_in_transaction(db, _request)
            except IntegrityError:
                # A concurrent request for the same pair won the insert
                existing = self.friendship_repo.get_between(requester_id, addressee_id)
                if not existing:
                    raise
                ensure_can_request(existing, self.correlation_id)
                raise

            self.log_operation(
                "request_friendship_success",
                friendship_id=friendship.id,
                requester_id=requester_id,
                addressee_id=addressee_id
            )
            return FriendshipResult(
                success=True,
                data=FriendshipRead.model_validate(friendship),
                message="Friend request sent"
            )

        except ServiceError as e:
            self.log_failure(
                "request_friendship_failed",
                e,
                requester_id=requester_id,
                addressee_id=addressee_id
            )
            return FriendshipResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "request_friendship_error",
                error_type=type(e).__name__,
                error_message=str(e),
                requester_id=requester_id,
                addressee_id=addressee_id
            )
            raise

    def lookup_status(self, user_a: int, user_b: int) -> Optional[FriendshipStatus]:
        """Status of the pair's friendship regardless of who asked first.

        Returns:
            The FriendshipStatus, or None when the pair has no record
        """
        if user_a == user_b:
            return None
        return self.friendship_repo.get_status_between(user_a, user_b)

    def remove_friendship(self, friendship_id: int, acting_user_id: Optional[int], db: Session) -> DeleteFriendshipResult:
        """Hard delete a friendship in any state.

        Either party may remove a pending or accepted friendship. A blocked
        record can only be removed by the user who created the block.

        Args:
            friendship_id: Friendship to remove
            acting_user_id: Acting user; None for anonymous callers
            db: Database session

        Returns:
            DeleteFriendshipResult with success status or error info
        """
        self.log_operation("remove_friendship_attempt", friendship_id=friendship_id, user_id=acting_user_id)

        try:
            acting_user_id = self.require_user(acting_user_id)

            def _remove() -> dict:
                friendship = self.friendship_repo.get_by_id(friendship_id)
                if not friendship:
                    raise FriendshipNotFoundError(friendship_id, self.correlation_id)

                if not friendship.involves(acting_user_id):
                    raise ForbiddenError("friendship", friendship_id, acting_user_id, correlation_id=self.correlation_id)

                if friendship.status == FriendshipStatus.BLOCKED.value and friendship.requester_id != acting_user_id:
                    raise ForbiddenError(
                        "friendship",
                        friendship_id,
                        acting_user_id,
                        user_message="Only the user who blocked can remove a block",
                        correlation_id=self.correlation_id
                    )

                previous_status = friendship.status
                self.friendship_repo.delete(friendship)
                return {"deleted": True, "friendship_id": friendship_id, "previous_status": previous_status}

            result = self.run_in_transaction(db, _remove)
            self.log_operation("remove_friendship_success", friendship_id=friendship_id, user_id=acting_user_id)
            return DeleteFriendshipResult(success=True, data=result, message="Friendship removed")

        except ServiceError as e:
            self.log_failure(
                "remove_friendship_failed",
                e,
                friendship_id=friendship_id,
                user_id=acting_user_id
            )
            return DeleteFriendshipResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "remove_friendship_error",
                error_type=type(e).__name__,
                error_message=str(e),
                friendship_id=friendship_id
            )
            raise

    def _load_pending_for_addressee(self, friendship_id: int, acting_user_id: int, verb: str) -> Friendship:
        friendship = self.friendship_repo.get_by_id(friendship_id)
        if not friendship:
            raise FriendshipNotFoundError(friendship_id, self.correlation_id)

        if friendship.addressee_id != acting_user_id:
            raise ForbiddenError(
                "friendship",
                friendship_id,
                acting_user_id,
                user_message=f"You can only {verb} requests sent to you",
                correlation_id=self.correlation_id
            )

        if friendship.status != FriendshipStatus.PENDING.value:
            raise RequestNotPendingError(friendship_id, friendship.status, self.correlation_id)

        return friendship

    def accept_request(self, friendship_id: int, acting_user_id: Optional[int], db: Session) -> FriendshipResult:
        """Move a pending request to accepted. Only the addressee may accept."""
        self.log_operation("accept_request_attempt", friendship_id=friendship_id, user_id=acting_user_id)

        try:
            acting_user_id = self.require_user(acting_user_id)

            def _accept() -> Friendship:
                friendship = self._load_pending_for_addressee(friendship_id, acting_user_id, "accept")
                return self.friendship_repo.set_status(friendship, FriendshipStatus.ACCEPTED)

            friendship = self.run_in_transaction(db, _accept)
            self.log_operation("accept_request_success", friendship_id=friendship_id, user_id=acting_user_id)
            return FriendshipResult(
                success=True,
                data=FriendshipRead.model_validate(friendship),
                message="Friend request accepted"
            )

        except ServiceError as e:
            self.log_failure("accept_request_failed", e, friendship_id=friendship_id)
            return FriendshipResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "accept_request_error",
                error_type=type(e).__name__,
                error_message=str(e),
                friendship_id=friendship_id
            )
            raise

    def reject_request(self, friendship_id: int, acting_user_id: Optional[int], db: Session) -> DeleteFriendshipResult:
        """Delete a pending request. Only the addressee may reject."""
        self.log_operation("reject_request_attempt", friendship_id=friendship_id, user_id=acting_user_id)

        try:
            acting_user_id = self.require_user(acting_user_id)

            def _reject() -> dict:
                friendship = self._load_pending_for_addressee(friendship_id, acting_user_id, "reject")
                self.friendship_repo.delete(friendship)
                return {"deleted": True, "friendship_id": friendship_id}

            result = self.run_in_transaction(db, _reject)
            self.log_operation("reject_request_success", friendship_id=friendship_id, user_id=acting_user_id)
            return DeleteFriendshipResult(success=True, data=result, message="Friend request rejected")

        except ServiceError as e:
            self.log_failure("reject_request_failed", e, friendship_id=friendship_id)
            return DeleteFriendshipResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "reject_request_error",
                error_type=type(e).__name__,
                error_message=str(e),
                friendship_id=friendship_id
            )
            raise

    def block_user(self, blocker_id: Optional[int], target_id: int, db: Session) -> FriendshipResult:
        """Replace whatever links the pair with a block owned by ``blocker_id``.

        Blocking an already-blocked pair again is a no-op for the blocker.
        """
        self.log_operation("block_user_attempt", blocker_id=blocker_id, target_id=target_id)

        try:
            blocker_id = self.require_user(blocker_id)

            def _block() -> Friendship:
                if blocker_id == target_id:
                    raise SelfRequestError(blocker_id, self.correlation_id)

                if not self.user_repo.exists_active(target_id):
                    raise UserNotFoundError(target_id, self.correlation_id)

                existing = self.friendship_repo.get_between(blocker_id, target_id)
                if existing:
                    if existing.status == FriendshipStatus.BLOCKED.value:
                        if existing.requester_id == blocker_id:
                            return existing
                        raise RequestForbiddenError(existing.id, self.correlation_id)
                    self.friendship_repo.delete(existing)

                return self.friendship_repo.create_block(blocker_id, target_id)

            friendship = self.run_in_transaction(db, _block)
            self.log_operation("block_user_success", friendship_id=friendship.id, blocker_id=blocker_id)
            return FriendshipResult(
                success=True,
                data=FriendshipRead.model_validate(friendship),
                message="User blocked"
            )

        except ServiceError as e:
            self.log_failure("block_user_failed", e, blocker_id=blocker_id, target_id=target_id)
            return FriendshipResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "block_user_error",
                error_type=type(e).__name__,
                error_message=str(e),
                blocker_id=blocker_id,
                target_id=target_id
            )
            raise

    def get_friends(
        self,
        user_id: Optional[int],
        status: FriendshipStatus = FriendshipStatus.ACCEPTED,
        search: Optional[str] = None
    ) -> GetFriendsResult:
        """List the other party of the user's friendships in ``status``.

        Args:
            user_id: Acting user; None for anonymous callers
            status: Friendship status to list; accepted by default
            search: Keep only parties whose name or email contains this text

        Returns:
            GetFriendsResult with the other parties, newest friendship first
        """
        try:
            user_id = self.require_user(user_id)
        except ServiceError as e:
            return GetFriendsResult(success=False, error_code=e.error_code, message=e.user_message)

        search = (search or "").strip() or None
        friendships = self.friendship_repo.list_with_status(user_id, status, search)
        friends = []
        for friendship in friendships:
            other = friendship.addressee if friendship.requester_id == user_id else friendship.requester
            friends.append(FriendRead(
                id=other.id,
                name=other.name,
                avatar_url=other.avatar_url,
                friendship_id=friendship.id,
                friendship_status=FriendshipStatus(friendship.status),
                friends_since=friendship.updated_at
            ))

        self.log_operation("get_friends_success", user_id=user_id, status=status.value, count=len(friends))
        return GetFriendsResult(success=True, data=friends, message="Friends retrieved successfully")

    def search_users(self, user_id: Optional[int], query: Optional[str]) -> SearchUsersResult:
        """Find users by name or email to befriend.

        Queries shorter than the minimum length return an empty list. Each
        user carries the searcher's friendship with them, if any, and their
        number of public places.
        """
        try:
            user_id = self.require_user(user_id)
        except ServiceError as e:
            return SearchUsersResult(success=False, error_code=e.error_code, message=e.user_message)

        query = (query or "").strip()
        if len(query) < settings.USER_SEARCH_MIN_LENGTH:
            return SearchUsersResult(success=True, data=[], message="Query too short")

        users = self.user_repo.search_active(query, exclude_id=user_id, limit=settings.USER_SEARCH_LIMIT)
        other_ids = [u.id for u in users]
        friendships = self.friendship_repo.list_for_pairs(user_id, other_ids)
        public_counts = self.place_repo.count_by_owners(other_ids, ["public"])

        items = []
        for user in users:
            friendship = friendships.get(user.id)
            items.append(UserSearchItem(
                id=user.id,
                name=user.name,
                avatar_url=user.avatar_url,
                friendship_status=FriendshipStatus(friendship.status) if friendship else None,
                friendship_id=friendship.id if friendship else None,
                is_sent_by_me=bool(friendship and friendship.requester_id == user_id),
                pinories_count=public_counts.get(user.id, 0)
            ))

        self.log_operation("search_users_success", user_id=user_id, count=len(items))
        return SearchUsersResult(success=True, data=items, message="Users retrieved successfully")

    def get_requests(self, user_id: Optional[int], direction: RequestDirection) -> GetRequestsResult:
        """List pending requests the user received or sent."""
        try:
            user_id = self.require_user(user_id)
        except ServiceError as e:
            return GetRequestsResult(success=False, error_code=e.error_code, message=e.user_message)

        requests = self.friendship_repo.list_pending(user_id, received=direction == RequestDirection.RECEIVED)
        self.log_operation("get_requests_success", user_id=user_id, direction=direction.value, count=len(requests))
        return GetRequestsResult(
            success=True,
            data=[FriendshipRead.model_validate(r) for r in requests],
            message="Requests retrieved successfully"
        )
