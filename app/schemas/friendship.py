from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from .mixin import TimestampModel
from .user import UserSummary


class FriendshipStatus(str, Enum):
	PENDING = "pending"
	ACCEPTED = "accepted"
	BLOCKED = "blocked"


class RequestDirection(str, Enum):
	RECEIVED = "received"
	SENT = "sent"


class FriendRequestInput(BaseModel):
	"""Body for sending a friend request or blocking a user."""
	target_user_id: int = Field(..., gt=0, description="Id of the other user")


class FriendshipRead(TimestampModel):
	id: int
	requester_id: int
	addressee_id: int
	status: FriendshipStatus

	model_config = ConfigDict(from_attributes=True)


class FriendRead(UserSummary):
	"""The other party of a friendship, accepted unless a status filter was used."""
	friendship_id: int
	friendship_status: FriendshipStatus = FriendshipStatus.ACCEPTED
	friends_since: Optional[datetime] = None


class UserSearchItem(UserSummary):
	"""A user found by search, with how they relate to the searcher."""
	# None when the pair has no record
	friendship_status: Optional[FriendshipStatus] = None
	friendship_id: Optional[int] = None
	is_sent_by_me: bool = False
	# Public places only
	pinories_count: int = 0


class FriendshipStatusRead(BaseModel):
	user_id: int
	# "none" when no record exists for the pair
	status: str


class FriendshipResult(BaseModel):
	"""Result object for single-friendship operations."""
	success: bool
	data: Optional[FriendshipRead] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class DeleteFriendshipResult(BaseModel):
	"""Result object for friendship removal and request rejection."""
	success: bool
	data: Optional[dict] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class GetFriendsResult(BaseModel):
	"""Result object for the accepted-friends list."""
	success: bool
	data: Optional[list[FriendRead]] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class GetRequestsResult(BaseModel):
	"""Result object for pending request listings."""
	success: bool
	data: Optional[list[FriendshipRead]] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class SearchUsersResult(BaseModel):
	"""Result object for user search."""
	success: bool
	data: Optional[list[UserSearchItem]] = None
	error_code: Optional[str] = None
	message: Optional[str] = None
