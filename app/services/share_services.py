"""Share lifecycle service for pinory share links.

A share link is created by the owner of a place, resolved by anyone holding
its slug, and ends either by revocation (row kept, ``is_active`` false,
never viewable again) or by hard deletion (row removed, slug free again).

Resolution order for a slug:
    format check -> lookup -> revoked? -> expiry/visibility/friendship policy
    -> view accounting (non-owners only)
"""

from datetime import datetime, timedelta
from typing import Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.slug import UniqueSlugError, generate_unique_slug, is_valid_slug
from app.core.time import as_utc, utcnow
from app.services.base import BaseService
from app.services.access_policy import AccessDecision, decide, requires_friendship, revoked_decision
from app.services.view_services import ViewService
from app.services.exceptions import (
    ServiceError,
    ValidationError,
    PlaceNotFoundError,
    NotOwnerError,
    ForbiddenError,
    ShareNotFoundError,
    ShareAccessDeniedError,
    SlugExhaustedError,
)
from app.db.models.pinory_share import PinoryShare
from app.schemas.place import PlaceSnapshot, PlaceSummary
from app.schemas.share import (
    ShareVisibility,
    CreateShareInput,
    ShareRead,
    ShareListItem,
    ShareInfo,
    RevokedShareRead,
    ShareResult,
    ListSharesResult,
    RevokeShareResult,
    DeleteShareResult,
    ResolveShareResult,
    ViewType,
)

DEFAULT_VISIBILITY = ShareVisibility.FRIENDS

_datetime_adapter = TypeAdapter(datetime)


def format_share_url(share_slug: str, base_url: Optional[str] = None) -> str:
    """Build the public URL for a slug; falls back to the configured origin."""
    base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    return f"{base}{settings.SHARE_PATH_PREFIX}/{share_slug}"


def default_expiry(now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) + timedelta(days=settings.SHARE_DEFAULT_EXPIRY_DAYS)


def is_share_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if expires_at is None:
        return False
    return (now or utcnow()) > as_utc(expires_at)


class ShareService(BaseService):
    """Service class for creating, resolving, revoking and deleting share links."""

    def __init__(self, correlation_id: Optional[str] = None, **repositories):
        """Initialize share service.

        Args:
            correlation_id: Optional request correlation ID for logging
            **repositories: ``share_repo``, ``place_repo``, ``friendship_repo``
                and optionally ``view_service``
        """
        super().__init__(correlation_id)
        if repositories:
            self._set_repositories(**repositories)

        for required in ("share_repo", "place_repo", "friendship_repo"):
            if not hasattr(self, required):
                raise ValidationError(
                    field=required,
                    message=f"{required} is required for ShareService",
                    correlation_id=correlation_id
                )

        if not hasattr(self, "view_service"):
            self.view_service = ViewService(self.share_repo, correlation_id)

    def _to_read(self, share: PinoryShare, base_url: Optional[str]) -> ShareRead:
        return ShareRead(
            id=share.id,
            share_slug=share.share_slug,
            share_url=format_share_url(share.share_slug, base_url),
            visibility=ShareVisibility(share.visibility),
            expires_at=share.expires_at,
            view_count=share.view_count,
            is_active=share.is_active,
            created_at=share.created_at
        )

    def _parse_expiry(self, raw: Optional[str]) -> datetime:
        if raw is None or not str(raw).strip():
            return default_expiry()

        try:
            expires_at = as_utc(_datetime_adapter.validate_python(raw))
        except PydanticValidationError:
            raise ValidationError(
                field="expires_at",
                message="must be an ISO-8601 datetime",
                correlation_id=self.correlation_id
            )

        if expires_at <= utcnow():
            raise ValidationError(
                field="expires_at",
                message="must be in the future",
                correlation_id=self.correlation_id
            )
        return expires_at

    def fetch_by_slug(self, share_slug: str) -> PinoryShare:
        """Load a share and its place, active or not. Visibility is not checked here.

        Raises:
            ShareNotFoundError: if no row holds the slug
        """
        share = self.share_repo.get_by_slug(share_slug)
        if not share:
            raise ShareNotFoundError(share_slug, self.correlation_id)
        return share

    def create_share(
        self,
        owner_id: Optional[int],
        share_in: CreateShareInput,
        db: Session,
        base_url: Optional[str] = None
    ) -> ShareResult:
        """Create a share link for a place, or return the one already active.

        Args:
            owner_id: Acting user; None for anonymous callers
            share_in: Requested place, visibility and expiry
            db: Database session for transaction management
            base_url: Origin the share URL is built on

        Returns:
            ShareResult; ``created`` is False when an active share was reused
        """
        place_id = share_in.place_id
        self.log_operation("create_share_attempt", place_id=place_id, user_id=owner_id)

        try:
            owner_id = self.require_user(owner_id)

            place = self.place_repo.get_by_id(place_id)
            if not place:
                raise PlaceNotFoundError(place_id, self.correlation_id)
            if place.created_by != owner_id:
                raise NotOwnerError(place_id, owner_id, self.correlation_id)

            existing = self.share_repo.get_active_for_place(place_id, owner_id)
            if existing:
                self.log_operation("create_share_existing", share_id=existing.id, place_id=place_id)
                return ShareResult(
                    success=True,
                    created=False,
                    data=self._to_read(existing, base_url),
                    message="Active share already exists"
                )

            visibility = ShareVisibility.parse(share_in.visibility, DEFAULT_VISIBILITY)
            expires_at = self._parse_expiry(share_in.expires_at)

            def _create() -> PinoryShare:
                try:
                    share_slug = generate_unique_slug(self.share_repo.slug_exists)
                except UniqueSlugError as e:
                    raise SlugExhaustedError(e.attempts, self.correlation_id)

                return self.share_repo.create({
                    "place_id": place_id,
                    "share_slug": share_slug,
                    "visibility": visibility.value,
                    "is_active": True,
                    "expires_at": expires_at,
                    "view_count": 0,
                    "created_by": owner_id
                })

            try:
                share = self.run_in_transaction(db, _create)
            except IntegrityError:
                # Lost a race: either another active share or the same slug was inserted first
                existing = self.share_repo.get_active_for_place(place_id, owner_id)
                if existing:
                    return ShareResult(
                        success=True,
                        created=False,
                        data=self._to_read(existing, base_url),
                        message="Active share already exists"
                    )
                raise SlugExhaustedError(1, self.correlation_id)

            self.log_operation(
                "create_share_success",
                share_id=share.id,
                place_id=place_id,
                visibility=visibility.value
            )
            return ShareResult(
                success=True,
                created=True,
                data=self._to_read(share, base_url),
                message="Share created successfully"
            )

        except ServiceError as e:
            self.log_failure("create_share_failed", e, place_id=place_id, user_id=owner_id)
            return ShareResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "create_share_error",
                error_type=type(e).__name__,
                error_message=str(e),
                place_id=place_id
            )
            raise

    def list_shares(self, owner_id: Optional[int]) -> ListSharesResult:
        """Active shares created by the caller."""
        try:
            owner_id = self.require_user(owner_id)
        except ServiceError as e:
            return ListSharesResult(success=False, error_code=e.error_code, message=e.user_message)

        shares = self.share_repo.list_active_by_owner(owner_id)
        items = [
            ShareListItem(
                id=s.id,
                share_slug=s.share_slug,
                visibility=ShareVisibility(s.visibility),
                expires_at=s.expires_at,
                view_count=s.view_count,
                created_at=s.created_at,
                place=PlaceSummary.model_validate(s.place)
            )
            for s in shares
        ]
        return ListSharesResult(success=True, data=items, message="Shares retrieved successfully")

    def _load_owned(self, share_slug: str, acting_user_id: int) -> PinoryShare:
        share = self.fetch_by_slug(share_slug)
        if share.place.created_by != acting_user_id:
            raise ForbiddenError(
                "share",
                share_slug,
                acting_user_id,
                user_message="Only the owner can manage this share link",
                correlation_id=self.correlation_id
            )
        return share

    def revoke(self, share_slug: str, acting_user_id: Optional[int], db: Session) -> RevokeShareResult:
        """Soft delete: the row and slug stay, but the link never resolves again.

        Revoking an already revoked link succeeds and moves ``revoked_at``.
        """
        self.log_operation("revoke_share_attempt", share_slug=share_slug, user_id=acting_user_id)

        try:
            acting_user_id = self.require_user(acting_user_id)

            def _revoke() -> PinoryShare:
                share = self._load_owned(share_slug, acting_user_id)
                return self.share_repo.update(share, {"is_active": False, "revoked_at": utcnow()})

            share = self.run_in_transaction(db, _revoke)
            self.log_operation("revoke_share_success", share_id=share.id, user_id=acting_user_id)
            return RevokeShareResult(
                success=True,
                data=RevokedShareRead(
                    share_slug=share.share_slug,
                    is_active=share.is_active,
                    revoked_at=share.revoked_at
                ),
                message="Share link revoked"
            )

        except ServiceError as e:
            self.log_failure("revoke_share_failed", e, share_slug=share_slug)
            return RevokeShareResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "revoke_share_error",
                error_type=type(e).__name__,
                error_message=str(e),
                share_slug=share_slug
            )
            raise

    def hard_delete(self, share_slug: str, acting_user_id: Optional[int], db: Session) -> DeleteShareResult:
        """Remove the share row entirely; its slug may be issued again."""
        self.log_operation("delete_share_attempt", share_slug=share_slug, user_id=acting_user_id)

        try:
            acting_user_id = self.require_user(acting_user_id)

            def _delete() -> dict:
                share = self._load_owned(share_slug, acting_user_id)
                self.share_repo.delete(share)
                return {"deleted": True, "share_slug": share_slug}

            result = self.run_in_transaction(db, _delete)
            self.log_operation("delete_share_success", share_slug=share_slug, user_id=acting_user_id)
            return DeleteShareResult(success=True, data=result, message="Share link deleted")

        except ServiceError as e:
            self.log_failure("delete_share_failed", e, share_slug=share_slug)
            return DeleteShareResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "delete_share_error",
                error_type=type(e).__name__,
                error_message=str(e),
                share_slug=share_slug
            )
            raise

    def _evaluate(self, share: PinoryShare, viewer_id: Optional[int]) -> AccessDecision:
        if not share.is_active:
            return revoked_decision()

        visibility = ShareVisibility(share.visibility)
        owner_id = share.place.created_by

        friendship_status = None
        if requires_friendship(visibility) and viewer_id is not None and viewer_id != owner_id:
            friendship_status = self.friendship_repo.get_status_between(viewer_id, owner_id)

        return decide(
            visibility=visibility,
            viewer_id=viewer_id,
            owner_id=owner_id,
            friendship_status=friendship_status,
            is_expired=is_share_expired(share.expires_at)
        )

    def resolve(self, share_slug: str, viewer_id: Optional[int], db: Session) -> ResolveShareResult:
        """Decide whether ``viewer_id`` (None for anonymous) may see a shared place.

        Returns:
            ResolveShareResult with the place snapshot and share info when
            viewable, otherwise the denial reason and error code
        """
        self.log_operation("resolve_share_attempt", share_slug=share_slug, viewer_id=viewer_id)

        try:
            if not is_valid_slug(share_slug):
                raise ValidationError(
                    field="share_slug",
                    message="Invalid share link format",
                    correlation_id=self.correlation_id
                )

            def _resolve():
                share = self.fetch_by_slug(share_slug)
                decision = self._evaluate(share, viewer_id)
                if not decision.can_view:
                    raise ShareAccessDeniedError(
                        share_slug,
                        decision.reason.value,
                        decision.message,
                        self.correlation_id
                    )
                self.view_service.record_view(share, viewer_id)
                return share, decision

            share, decision = self.run_in_transaction(db, _resolve)

            self.log_operation(
                "resolve_share_success",
                share_id=share.id,
                viewer_id=viewer_id,
                view_type=decision.view_type.value
            )
            return ResolveShareResult(
                success=True,
                can_view=True,
                view_type=decision.view_type,
                content=PlaceSnapshot.model_validate(share.place),
                share_info=ShareInfo(
                    share_slug=share.share_slug,
                    visibility=ShareVisibility(share.visibility),
                    view_count=share.view_count,
                    created_at=share.created_at,
                    expires_at=share.expires_at
                )
            )

        except ShareAccessDeniedError as e:
            self.log_failure("resolve_share_denied", e, reason=e.reason, share_slug=share_slug)
            return ResolveShareResult(
                success=False,
                can_view=False,
                view_type=ViewType.RESTRICTED,
                reason=e.reason,
                error_code=e.error_code,
                message=e.user_message
            )
        except ServiceError as e:
            self.log_failure("resolve_share_failed", e, share_slug=share_slug)
            return ResolveShareResult(success=False, error_code=e.error_code, message=e.user_message)
        except Exception as e:
            self.log_operation(
                "resolve_share_error",
                error_type=type(e).__name__,
                error_message=str(e),
                share_slug=share_slug
            )
            raise
