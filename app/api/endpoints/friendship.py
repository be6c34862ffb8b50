from typing import Optional

from fastapi import Depends, Query
from app.api.router import create_router
from sqlalchemy.orm import Session
from app.api.dependencies.database import get_db
from app.api.dependencies.auth import get_current_user, get_optional_user, user_id_of
from app.api.dependencies.services import get_friendship_service
from app.api.errors import raise_for_result
from app.db.models.user import User
from app.services.friendship_services import FriendshipService
from app.schemas.friendship import (
	FriendRequestInput,
	FriendshipRead,
	FriendRead,
	FriendshipStatusRead,
	FriendshipStatus,
	UserSearchItem,
	RequestDirection,
)

router = create_router(name="friendship")

@router.post("", status_code=201, response_model=FriendshipRead)
def send_friend_request(
	request_in: FriendRequestInput,
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	friendship_service: FriendshipService = Depends(get_friendship_service)
):
	"""
	Send a friend request to another user.
	"""
	result = friendship_service.request_friendship(user_id_of(current_user), request_in.target_user_id, db)
	raise_for_result(result)
	return result.data

@router.get("", response_model=list[FriendRead])
def get_friends(
	status: FriendshipStatus = Query(FriendshipStatus.ACCEPTED),
	search: Optional[str] = Query(None, max_length=100),
	current_user: Optional[User] = Depends(get_optional_user),
	friendship_service: FriendshipService = Depends(get_friendship_service)
):
	"""
	Get the current user's friends, or their friendships in another status.
	"""
	result = friendship_service.get_friends(user_id_of(current_user), status, search)
	raise_for_result(result)
	return result.data

@router.get("/search", response_model=list[UserSearchItem])
def search_users(
	q: str = Query("", max_length=100),
	current_user: Optional[User] = Depends(get_optional_user),
	friendship_service: FriendshipService = Depends(get_friendship_service)
):
	"""
	Find users by name or email, with the caller's friendship status for each.
	"""
	result = friendship_service.search_users(user_id_of(current_user), q)
	raise_for_result(result)
	return result.data

@router.get("/requests", response_model=list[FriendshipRead])
def get_friend_requests(
	direction: RequestDirection = Query(RequestDirection.RECEIVED, alias="type"),
	current_user: Optional[User] = Depends(get_optional_user),
	friendship_service: FriendshipService = Depends(get_friendship_service)
):
	"""
	Get pending friend requests the current user received or sent.
	"""
	result = friendship_service.get_requests(user_id_of(current_user), direction)
	raise_for_result(result)
	return result.data

@router.get("/status/{user_id}", response_model=FriendshipStatusRead)
def get_friendship_status(
	user_id: int,
	current_user: User = Depends(get_current_user),
	friendship_service: FriendshipService = Depends(get_friendship_service)
):
	"""
	Get the friendship status between the current user and another user.
	"""
	found = friendship_service.lookup_status(current_user.id, user_id)
	return FriendshipStatusRead(user_id=user_id, status=found.value if found else "none")

@router.post("/block", response_model=FriendshipRead)
def block_user(
	request_in: FriendRequestInput,
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	friendship_service: FriendshipService = Depends(get_friendship_service)
):
	"""
	Block another user; any existing friendship or request is replaced.
	"""
	result = friendship_service.block_user(user_id_of(current_user), request_in.target_user_id, db)
	raise_for_result(result)
	return result.data

@router.post("/{friendship_id}/accept", response_model=FriendshipRead)
def accept_friend_request(
	friendship_id: int,
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	friendship_service: FriendshipService = Depends(get_friendship_service)
):
	result = friendship_service.accept_request(friendship_id, user_id_of(current_user), db)
	raise_for_result(result)
	return result.data

@router.post("/{friendship_id}/reject")
def reject_friend_request(
	friendship_id: int,
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	friendship_service: FriendshipService = Depends(get_friendship_service)
):
	result = friendship_service.reject_request(friendship_id, user_id_of(current_user), db)
	raise_for_result(result)
	return result.data

@router.delete("/{friendship_id}")
def remove_friendship(
	friendship_id: int,
	db: Session = Depends(get_db),
	current_user: Optional[User] = Depends(get_optional_user),
	friendship_service: FriendshipService = Depends(get_friendship_service)
):
	"""
	Remove a friendship or pending request. Either party may do this.
	"""
	result = friendship_service.remove_friendship(friendship_id, user_id_of(current_user), db)
	raise_for_result(result)
	return result.data
