from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from .place import PlaceSnapshot, PlaceSummary


class ShareVisibility(str, Enum):
	PRIVATE = "private"
	FRIENDS = "friends"
	SELECTED_FRIENDS = "selected_friends"
	PUBLIC = "public"

	@classmethod
	def parse(cls, value: Optional[str], default: "ShareVisibility") -> "ShareVisibility":
		"""Return the matching member, or ``default`` for missing/unknown values."""
		try:
			return cls(value)
		except (ValueError, TypeError):
			return default


class ViewType(str, Enum):
	OWNER = "owner"
	FRIEND = "friend"
	PUBLIC = "public"
	RESTRICTED = "restricted"


class AccessReason(str, Enum):
	EXPIRED = "expired"
	REVOKED = "revoked"
	PRIVATE = "private"
	SIGN_IN_REQUIRED = "sign-in-required"
	NOT_FRIENDS = "not-friends"


class CreateShareInput(BaseModel):
	"""Raw create-share body; visibility and expiry are validated by the service."""
	place_id: int = Field(..., gt=0)
	# Any JSON value; anything that is not a known tier falls back to the default
	visibility: Any = None
	expires_at: Optional[str] = Field(default=None, description="ISO-8601 datetime")


class ShareActionInput(BaseModel):
	action: str


class ShareRead(BaseModel):
	id: int
	share_slug: str
	share_url: str
	visibility: ShareVisibility
	expires_at: Optional[datetime] = None
	view_count: int
	is_active: bool
	created_at: datetime


class ShareListItem(BaseModel):
	id: int
	share_slug: str
	visibility: ShareVisibility
	expires_at: Optional[datetime] = None
	view_count: int
	created_at: datetime
	place: PlaceSummary

	model_config = ConfigDict(from_attributes=True)


class ShareInfo(BaseModel):
	share_slug: str
	visibility: ShareVisibility
	view_count: int
	created_at: datetime
	expires_at: Optional[datetime] = None


class RevokedShareRead(BaseModel):
	share_slug: str
	is_active: bool
	revoked_at: datetime


class ShareResult(BaseModel):
	"""Result object for share creation."""
	success: bool
	# False when an already active share was returned instead of a new one
	created: bool = False
	data: Optional[ShareRead] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class ListSharesResult(BaseModel):
	success: bool
	data: Optional[list[ShareListItem]] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class RevokeShareResult(BaseModel):
	success: bool
	data: Optional[RevokedShareRead] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class DeleteShareResult(BaseModel):
	success: bool
	data: Optional[dict] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class ResolveShareResult(BaseModel):
	"""Outcome of resolving a slug for a (possibly anonymous) viewer.

	``content`` and ``share_info`` are only populated when ``can_view`` is true.
	"""
	success: bool
	can_view: bool = False
	view_type: Optional[ViewType] = None
	reason: Optional[AccessReason] = None
	content: Optional[PlaceSnapshot] = None
	share_info: Optional[ShareInfo] = None
	error_code: Optional[str] = None
	message: Optional[str] = None


class ShareView(BaseModel):
	"""Response body for resolving a share link."""
	can_view: bool
	view_type: ViewType
	reason: Optional[AccessReason] = None
	message: Optional[str] = None
	content: Optional[PlaceSnapshot] = None
	share_info: Optional[ShareInfo] = None
