"""Service dependency providers for FastAPI dependency injection."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from typing import Optional

from app.api.dependencies.database import get_db
from app.services.friendship_services import FriendshipService
from app.services.invitation_services import InvitationService
from app.services.share_services import ShareService
from app.services.view_services import ViewService
from app.repositories.user import UserRepository
from app.repositories.place import PlaceRepository
from app.repositories.friendship import FriendshipRepository
from app.repositories.pinory_share import PinoryShareRepository
from app.repositories.friend_invitation import FriendInvitationRepository


def get_correlation_id(request: Request) -> Optional[str]:
	"""Extract or generate correlation ID for logging and tracing."""
	from app.core.observability import generate_correlation_id
	cid = getattr(request.state, "correlation_id", None)
	if not cid:
		cid = generate_correlation_id(request.headers.get("X-Correlation-ID"))
		setattr(request.state, "correlation_id", cid)
	return cid


# Repository Dependencies
def get_user_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> UserRepository:
    """Provide UserRepository instance."""
    return UserRepository(db=db, correlation_id=correlation_id)


def get_place_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> PlaceRepository:
    """Provide PlaceRepository instance."""
    return PlaceRepository(db=db, correlation_id=correlation_id)


def get_friendship_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> FriendshipRepository:
    """Provide FriendshipRepository instance."""
    return FriendshipRepository(db=db, correlation_id=correlation_id)


def get_share_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> PinoryShareRepository:
    """Provide PinoryShareRepository instance."""
    return PinoryShareRepository(db=db, correlation_id=correlation_id)


def get_invitation_repository(
    db: Session = Depends(get_db),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> FriendInvitationRepository:
    """Provide FriendInvitationRepository instance."""
    return FriendInvitationRepository(db=db, correlation_id=correlation_id)


# Service Dependencies
def get_friendship_service(
    friendship_repo: FriendshipRepository = Depends(get_friendship_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    place_repo: PlaceRepository = Depends(get_place_repository),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> FriendshipService:
    """Provide FriendshipService instance with required repositories.

    Args:
        friendship_repo: Friendship repository from dependency injection
        user_repo: User repository from dependency injection
        place_repo: Place repository used for search counts
        correlation_id: Optional correlation ID from request headers

    Returns:
        Configured FriendshipService instance
    """
    return FriendshipService(
        correlation_id=correlation_id,
        friendship_repo=friendship_repo,
        user_repo=user_repo,
        place_repo=place_repo
    )


def get_view_service(
    share_repo: PinoryShareRepository = Depends(get_share_repository),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> ViewService:
    """Provide ViewService instance."""
    return ViewService(share_repo=share_repo, correlation_id=correlation_id)


def get_share_service(
    share_repo: PinoryShareRepository = Depends(get_share_repository),
    place_repo: PlaceRepository = Depends(get_place_repository),
    friendship_repo: FriendshipRepository = Depends(get_friendship_repository),
    view_service: ViewService = Depends(get_view_service),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> ShareService:
    """Provide ShareService instance with required repositories.

    Args:
        share_repo: Share repository from dependency injection
        place_repo: Place repository from dependency injection
        friendship_repo: Friendship repository used for friends-only links
        view_service: View accounting service
        correlation_id: Optional correlation ID from request headers

    Returns:
        Configured ShareService instance
    """
    return ShareService(
        correlation_id=correlation_id,
        share_repo=share_repo,
        place_repo=place_repo,
        friendship_repo=friendship_repo,
        view_service=view_service
    )


def get_invitation_service(
    invitation_repo: FriendInvitationRepository = Depends(get_invitation_repository),
    friendship_repo: FriendshipRepository = Depends(get_friendship_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    correlation_id: Optional[str] = Depends(get_correlation_id)
) -> InvitationService:
    """Provide InvitationService instance with required repositories."""
    return InvitationService(
        correlation_id=correlation_id,
        invitation_repo=invitation_repo,
        friendship_repo=friendship_repo,
        user_repo=user_repo
    )
