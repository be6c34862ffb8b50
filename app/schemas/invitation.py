from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from .friendship import FriendshipRead
from .user import UserSummary


class InvitationRead(BaseModel):
	invite_code: str
	invite_url: str
	usage_count: int
	accepted_count: int
	max_usage: Optional[int] = None
	expires_at: Optional[datetime] = None
	created_at: datetime


class InvitationInfo(BaseModel):
	"""Public view of an invitation: who is inviting."""
	invite_code: str
	inviter_id: int
	inviter_name: str
	inviter_avatar_url: Optional[str] = None


class AcceptInvitationInput(BaseModel):
	invite_code: str = Field(..., min_length=1, max_length=64)


class AcceptedInvitationRead(BaseModel):
	friendship: FriendshipRead
	friend: UserSummary


class InvitationResult(BaseModel):
	"""Result object for get-or-create invitation; ``created`` is False when reused."""
	success: bool
	created: bool = False
	data: Optional[InvitationRead] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class DeactivateInvitationResult(BaseModel):
	success: bool
	data: Optional[dict] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class InvitationInfoResult(BaseModel):
	success: bool
	data: Optional[InvitationInfo] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class AcceptInvitationResult(BaseModel):
	success: bool
	data: Optional[AcceptedInvitationRead] = None
	error_code: Optional[str] = None
	message: Optional[str] = None
