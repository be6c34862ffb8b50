import pytest

from app.schemas.friendship import FriendshipStatus
from app.schemas.share import AccessReason, ShareVisibility, ViewType
from app.services.access_policy import AccessDecision, decide, requires_friendship, revoked_decision

OWNER = 1
VIEWER = 2

# (visibility, viewer kind) -> expected (can_view, view_type, reason) for a link that has not expired
EXPECTED = {
    (ShareVisibility.PUBLIC, "owner"): (True, ViewType.OWNER, None),
    (ShareVisibility.PUBLIC, "friend"): (True, ViewType.PUBLIC, None),
    (ShareVisibility.PUBLIC, "stranger"): (True, ViewType.PUBLIC, None),
    (ShareVisibility.PUBLIC, "anonymous"): (True, ViewType.PUBLIC, None),
    (ShareVisibility.PRIVATE, "owner"): (True, ViewType.OWNER, None),
    (ShareVisibility.PRIVATE, "friend"): (False, ViewType.RESTRICTED, AccessReason.PRIVATE),
    (ShareVisibility.PRIVATE, "stranger"): (False, ViewType.RESTRICTED, AccessReason.PRIVATE),
    (ShareVisibility.PRIVATE, "anonymous"): (False, ViewType.RESTRICTED, AccessReason.PRIVATE),
    (ShareVisibility.FRIENDS, "owner"): (True, ViewType.OWNER, None),
    (ShareVisibility.FRIENDS, "friend"): (True, ViewType.FRIEND, None),
    (ShareVisibility.FRIENDS, "stranger"): (False, ViewType.RESTRICTED, AccessReason.NOT_FRIENDS),
    (ShareVisibility.FRIENDS, "anonymous"): (False, ViewType.RESTRICTED, AccessReason.SIGN_IN_REQUIRED),
    (ShareVisibility.SELECTED_FRIENDS, "owner"): (True, ViewType.OWNER, None),
    (ShareVisibility.SELECTED_FRIENDS, "friend"): (True, ViewType.FRIEND, None),
    (ShareVisibility.SELECTED_FRIENDS, "stranger"): (False, ViewType.RESTRICTED, AccessReason.NOT_FRIENDS),
    (ShareVisibility.SELECTED_FRIENDS, "anonymous"): (False, ViewType.RESTRICTED, AccessReason.SIGN_IN_REQUIRED),
}


def _viewer(kind):
    if kind == "owner":
        return OWNER, None
    if kind == "friend":
        return VIEWER, FriendshipStatus.ACCEPTED
    if kind == "stranger":
        return VIEWER, None
    return None, None


@pytest.mark.parametrize("visibility,kind", sorted(EXPECTED, key=lambda k: (k[0].value, k[1])))
def test_decision_for_live_link(visibility, kind):
    viewer_id, status = _viewer(kind)
    decision = decide(visibility, viewer_id, OWNER, status, is_expired=False)
    assert (decision.can_view, decision.view_type, decision.reason) == EXPECTED[(visibility, kind)]


@pytest.mark.parametrize("visibility", list(ShareVisibility))
@pytest.mark.parametrize("kind", ["owner", "friend", "stranger", "anonymous"])
def test_expired_link_is_refused_for_everyone(visibility, kind):
    viewer_id, status = _viewer(kind)
    decision = decide(visibility, viewer_id, OWNER, status, is_expired=True)
    assert decision.can_view is False
    assert decision.reason == AccessReason.EXPIRED


@pytest.mark.parametrize("status", [FriendshipStatus.PENDING, FriendshipStatus.BLOCKED])
def test_non_accepted_friendship_does_not_grant_friends_access(status):
    decision = decide(ShareVisibility.FRIENDS, VIEWER, OWNER, status, is_expired=False)
    assert decision == AccessDecision.deny(AccessReason.NOT_FRIENDS)


def test_denial_carries_user_message():
    assert revoked_decision().reason == AccessReason.REVOKED
    assert revoked_decision().message == "This share link has been revoked"
    assert AccessDecision.allow(ViewType.PUBLIC).message is None


def test_requires_friendship_only_for_friend_tiers():
    assert requires_friendship(ShareVisibility.FRIENDS)
    assert requires_friendship(ShareVisibility.SELECTED_FRIENDS)
    assert not requires_friendship(ShareVisibility.PUBLIC)
    assert not requires_friendship(ShareVisibility.PRIVATE)


def test_unknown_visibility_is_rejected():
    with pytest.raises(ValueError):
        decide("everyone", VIEWER, OWNER, None, is_expired=False)


def test_visibility_parse_falls_back_to_default():
    assert ShareVisibility.parse("public", ShareVisibility.FRIENDS) == ShareVisibility.PUBLIC
    assert ShareVisibility.parse("everyone", ShareVisibility.FRIENDS) == ShareVisibility.FRIENDS
    assert ShareVisibility.parse(None, ShareVisibility.FRIENDS) == ShareVisibility.FRIENDS
