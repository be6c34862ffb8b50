"""Access decision for share links.

``decide`` is a pure function: it performs no I/O and only looks at the
values handed to it. Rules are evaluated in order and the first match wins:

1. expired links are refused for everyone
2. the owner always sees their own content
3. ``public`` links are open to anyone, signed in or not
4. ``private`` links are refused
5. ``friends`` / ``selected_friends`` links require a signed-in viewer with an
   accepted friendship to the owner

Revocation is not part of this table. Callers check ``is_active`` before
calling ``decide`` (see ``revoked_decision``).
"""

from dataclasses import dataclass
from typing import Optional

from app.schemas.friendship import FriendshipStatus
from app.schemas.share import AccessReason, ShareVisibility, ViewType


REASON_MESSAGES = {
	AccessReason.EXPIRED: "This share link has expired",
	AccessReason.REVOKED: "This share link has been revoked",
	AccessReason.PRIVATE: "This location is private",
	AccessReason.SIGN_IN_REQUIRED: "Sign in to view this shared location",
	AccessReason.NOT_FRIENDS: "This location is only shared with friends",
}


@dataclass(frozen=True)
class AccessDecision:
	can_view: bool
	view_type: ViewType
	reason: Optional[AccessReason] = None

	@property
	def message(self) -> Optional[str]:
		return REASON_MESSAGES.get(self.reason) if self.reason else None

	@classmethod
	def allow(cls, view_type: ViewType) -> "AccessDecision":
		return cls(can_view=True, view_type=view_type)

	@classmethod
	def deny(cls, reason: AccessReason) -> "AccessDecision":
		return cls(can_view=False, view_type=ViewType.RESTRICTED, reason=reason)


def revoked_decision() -> AccessDecision:
	return AccessDecision.deny(AccessReason.REVOKED)


def requires_friendship(visibility: ShareVisibility) -> bool:
	"""Whether ``decide`` will look at the friendship status for this tier."""
	return visibility in (ShareVisibility.FRIENDS, ShareVisibility.SELECTED_FRIENDS)


def decide(
	visibility: ShareVisibility,
	viewer_id: Optional[int],
	owner_id: int,
	friendship_status: Optional[FriendshipStatus],
	is_expired: bool,
) -> AccessDecision:
	if is_expired:
		return AccessDecision.deny(AccessReason.EXPIRED)

	if viewer_id is not None and viewer_id == owner_id:
		return AccessDecision.allow(ViewType.OWNER)

	if visibility == ShareVisibility.PUBLIC:
		return AccessDecision.allow(ViewType.PUBLIC)

	if visibility == ShareVisibility.PRIVATE:
		return AccessDecision.deny(AccessReason.PRIVATE)

	if visibility == ShareVisibility.FRIENDS:
		return _friends_rule(viewer_id, friendship_status)

	if visibility == ShareVisibility.SELECTED_FRIENDS:
		# No per-friend audience is stored yet, so every accepted friend qualifies
		return _friends_rule(viewer_id, friendship_status)

	raise ValueError(f"Unknown share visibility: {visibility!r}")


def _friends_rule(viewer_id: Optional[int], friendship_status: Optional[FriendshipStatus]) -> AccessDecision:
	if viewer_id is None:
		return AccessDecision.deny(AccessReason.SIGN_IN_REQUIRED)
	if friendship_status == FriendshipStatus.ACCEPTED:
		return AccessDecision.allow(ViewType.FRIEND)
	return AccessDecision.deny(AccessReason.NOT_FRIENDS)
