"""Friend invitation links.

Each user has at most one active invitation. Anyone holding its code can
look up who is inviting, and a signed-in user who accepts it becomes the
inviter's friend immediately, with no pending step. Every accept is recorded
and counts against the invitation's optional usage limit.
"""

from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.slug import UniqueSlugError, generate_invite_code, generate_unique_slug
from app.core.time import as_utc, utcnow
from app.services.base import BaseService
from app.services.friendship_services import ensure_can_request
from app.services.exceptions import (
    ServiceError,
    ValidationError,
    UserNotFoundError,
    SelfRequestError,
    AlreadyFriendsError,
    RequestForbiddenError,
    InvitationNotFoundError,
    InvitationUnavailableError,
    InviteCodeExhaustedError,
)
from app.db.models.friend_invitation import FriendInvitation
from app.db.models.friendship import Friendship
from app.schemas.friendship import FriendshipStatus, FriendshipRead
from app.schemas.user import UserSummary
from app.schemas.invitation import (
    InvitationRead,
    InvitationInfo,
    AcceptedInvitationRead,
    InvitationResult,
    DeactivateInvitationResult,
    InvitationInfoResult,
    AcceptInvitationResult,
)


def format_invite_url(invite_code: str, base_url: Optional[str] = None) -> str:
    base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    return f"{base}{settings.INVITE_PATH_PREFIX}/{invite_code}"


class InvitationService(BaseService):
    """Service class for creating, inspecting and accepting invitation links."""

    def __init__(self, correlation_id: Optional[str] = None, **repositories):
        """Initialize invitation service.

        Args:
            correlation_id: Optional request correlation ID for logging
            **repositories: ``invitation_repo``, ``friendship_repo`` and ``user_repo``
        """
        super().__init__(correlation_id)
        if repositories:
            self._set_repositories(**repositories)

        for required in ("invitation_repo", "friendship_repo", "user_repo"):
            if not hasattr(self, required):
                raise ValidationError(
                    field=required,
                    message=f"{required} is required for InvitationService",
                    correlation_id=correlation_id
                )

    def _to_read(self, invitation: FriendInvitation, base_url: Optional[str]) -> InvitationRead:
        return InvitationRead(
            invite_code=invitation.invite_code,
            invite_url=format_invite_url(invitation.invite_code, base_url),
            usage_count=invitation.usage_count,
            accepted_count=self.invitation_repo.count_acceptances(invitation.id),
            max_usage=invitation.max_usage,
            expires_at=invitation.expires_at,
            created_at=invitation.created_at
        )

    def _load_usable(self, invite_code: Optional[str]) -> FriendInvitation:
        invite_code = (invite_code or "").strip()
        if not invite_code:
            raise ValidationError(field="invite_code", message="is required", correlation_id=self.correlation_id)

        invitation = self.invitation_repo.get_by_code(invite_code)
        if not invitation:
            raise InvitationNotFoundError(invite_code, self.correlation_id)

        if not invitation.is_active:
            raise InvitationUnavailableError(invite_code, "deactivated", self.correlation_id)
        if invitation.expires_at is not None and as_utc(invitation.expires_at) < utcnow():
            raise InvitationUnavailableError(invite_code, "expired", self.correlation_id)
        if invitation.max_usage is not None and invitation.usage_count >= invitation.max_usage:
            raise InvitationUnavailableError(invite_code, "usage-limit", self.correlation_id)
        return invitation

    def get_or_create_invitation(self, user_id: Optional[int], db: Session, base_url: Optional[str] = None) -> InvitationResult:
        """Return the user's active invitation, creating one when there is none.

        Args:
            user_id: Acting user; None for anonymous callers
            db: Database session for transaction management
            base_url: Origin the invite URL is built on

        Returns:
            InvitationResult; ``created`` is False when the active one was reused
        """
        self.log_operation("get_invitation_attempt", user_id=user_id)

        try:
            user_id = self.require_user(user_id)
            if not self.user_repo.exists_active(user_id):
                raise UserNotFoundError(user_id, self.correlation_id)

            existing = self.invitation_repo.get_active_for_user(user_id)
            if existing:
                return InvitationResult(success=True, created=False, data=self._to_read(existing, base_url))

            def _create() -> FriendInvitation:
                try:
                    invite_code = generate_unique_slug(
                        self.invitation_repo.code_exists,
                        max_attempts=settings.INVITE_CODE_MAX_ATTEMPTS,
                        generator=generate_invite_code
                    )
                except UniqueSlugError as e:
                    raise InviteCodeExhaustedError(e.attempts, self.correlation_id)

                return self.invitation_repo.create({
                    "user_id": user_id,
                    "invite_code": invite_code,
                    "is_active": True,
                    "usage_count": 0
                })

            try:
                invitation = self.run_in_transaction(db, _create)
            except IntegrityError:
                # Another request created the user's invitation, or took the code, first
                existing = self.invitation_repo.get_active_for_user(user_id)
                if existing:
                    return InvitationResult(success=True, created=False, data=self._to_read(existing, base_url))
                raise InviteCodeExhaustedError(1, self.correlation_id)

            self.log_operation("get_invitation_created", invitation_id=invitation.id, user_id=user_id)
            return InvitationResult(
                success=True,
                created=True,
                data=self._to_read(invitation, base_url),
                message="Invitation created"
            )

        except ServiceError as e:
            self.log_failure("get_invitation_failed", e, user_id=user_id)
            return InvitationResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "get_invitation_error",
                error_type=type(e).__name__,
                error_message=str(e),
                user_id=user_id
            )
            raise

    def deactivate_invitation(self, user_id: Optional[int], db: Session) -> DeactivateInvitationResult:
        """Deactivate the user's invitation. Succeeds when there is none."""
        try:
            user_id = self.require_user(user_id)
            count = self.run_in_transaction(db, lambda: self.invitation_repo.deactivate_for_user(user_id))
            self.log_operation("deactivate_invitation_success", user_id=user_id, deactivated=count)
            return DeactivateInvitationResult(
                success=True,
                data={"deactivated": count},
                message="Invitation deactivated"
            )
        except ServiceError as e:
            self.log_failure("deactivate_invitation_failed", e, user_id=user_id)
            return DeactivateInvitationResult(success=False, error_code=e.error_code, message=e.user_message)

    def get_invitation_info(self, invite_code: Optional[str]) -> InvitationInfoResult:
        """Who is behind a usable invite code. Callers need not be signed in."""
        try:
            invitation = self._load_usable(invite_code)
            inviter = invitation.user
            return InvitationInfoResult(
                success=True,
                data=InvitationInfo(
                    invite_code=invitation.invite_code,
                    inviter_id=inviter.id,
                    inviter_name=inviter.name or "User",
                    inviter_avatar_url=inviter.avatar_url
                )
            )
        except ServiceError as e:
            self.log_failure("get_invitation_info_failed", e, invite_code=invite_code)
            return InvitationInfoResult(success=False, error_code=e.error_code, message=e.user_message)

    def accept_invitation(self, user_id: Optional[int], invite_code: Optional[str], db: Session) -> AcceptInvitationResult:
        """Befriend the inviter through their invite code.

        A pending request between the two, in either direction, is accepted.
        Otherwise a new accepted friendship is created with the inviter as
        requester. Fails with SELF_REQUEST, ALREADY_FRIENDS or REQUEST_FORBIDDEN
        (blocked pair), or when the invitation is missing or unusable.

        Args:
            user_id: Acting user; None for anonymous callers
            invite_code: Code from the invitation link
            db: Database session for transaction management

        Returns:
            AcceptInvitationResult with the friendship and the new friend
        """
        self.log_operation("accept_invitation_attempt", user_id=user_id, invite_code=invite_code)

        try:
            user_id = self.require_user(user_id)

            def _accept() -> Friendship:
                invitation = self._load_usable(invite_code)
                inviter_id = invitation.user_id
                if inviter_id == user_id:
                    raise SelfRequestError(user_id, self.correlation_id)
                if not self.user_repo.exists_active(inviter_id):
                    raise UserNotFoundError(inviter_id, self.correlation_id)

                existing = self.friendship_repo.get_between(inviter_id, user_id)
                if existing is None:
                    friendship = self.friendship_repo.create_accepted(inviter_id, user_id)
                elif existing.status == FriendshipStatus.PENDING.value:
                    friendship = self.friendship_repo.set_status(existing, FriendshipStatus.ACCEPTED)
                elif existing.status == FriendshipStatus.ACCEPTED.value:
                    raise AlreadyFriendsError(existing.id, self.correlation_id)
                else:
                    raise RequestForbiddenError(existing.id, self.correlation_id)

                if not self.invitation_repo.claim_use(invitation):
                    raise InvitationUnavailableError(invitation.invite_code, "usage-limit", self.correlation_id)
                self.invitation_repo.add_acceptance(invitation.id, user_id, friendship.id)
                return friendship

            try:
                friendship = self.run_in_transaction(db, _accept)
            except IntegrityError:
                # A concurrent request or accept created the pair's row first
                invitation = self.invitation_repo.get_by_code((invite_code or "").strip())
                existing = self.friendship_repo.get_between(invitation.user_id, user_id) if invitation else None
                if not existing:
                    raise
                ensure_can_request(existing, self.correlation_id)
                raise

            friend = self.user_repo.get_by_id(friendship.other_party_of(user_id))
            self.log_operation("accept_invitation_success", friendship_id=friendship.id, user_id=user_id)
            return AcceptInvitationResult(
                success=True,
                data=AcceptedInvitationRead(
                    friendship=FriendshipRead.model_validate(friendship),
                    friend=UserSummary.model_validate(friend)
                ),
                message="Invitation accepted"
            )

        except ServiceError as e:
            self.log_failure("accept_invitation_failed", e, user_id=user_id, invite_code=invite_code)
            return AcceptInvitationResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "accept_invitation_error",
                error_type=type(e).__name__,
                error_message=str(e),
                user_id=user_id
            )
            raise
