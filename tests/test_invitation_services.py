from datetime import timedelta

import pytest

from app.core.slug import INVITE_CODE_ALPHABET
from app.core.time import utcnow
from app.db.models.friend_invitation import FriendInvitation, FriendInvitationAcceptance
from app.db.models.friendship import Friendship
from app.repositories.friend_invitation import FriendInvitationRepository
from app.repositories.friendship import FriendshipRepository
from app.repositories.user import UserRepository
from app.schemas.friendship import FriendshipStatus
from app.services.exceptions import ValidationError
from app.services.invitation_services import InvitationService, format_invite_url


@pytest.fixture
def service(db):
    return InvitationService(
        correlation_id="test-cid",
        invitation_repo=FriendInvitationRepository(db),
        friendship_repo=FriendshipRepository(db),
        user_repo=UserRepository(db)
    )


def _invite_code(service, db, user_id):
    result = service.get_or_create_invitation(user_id, db, base_url="https://pinory.app")
    assert result.success, result.message
    return result.data.invite_code


def test_service_requires_repositories():
    with pytest.raises(ValidationError):
        InvitationService(invitation_repo=object())


def test_invite_url_format():
    assert format_invite_url("ABCD2345", "https://pinory.app/") == "https://pinory.app/invite/ABCD2345"


def test_invitation_is_created_once_per_user(service, db, make_user):
    inviter = make_user()

    first = service.get_or_create_invitation(inviter, db, base_url="https://pinory.app")
    second = service.get_or_create_invitation(inviter, db, base_url="https://pinory.app")

    assert first.created is True
    assert second.created is False
    assert second.data.invite_code == first.data.invite_code
    assert first.data.invite_url == f"https://pinory.app/invite/{first.data.invite_code}"
    assert len(first.data.invite_code) == 8
    assert set(first.data.invite_code) <= set(INVITE_CODE_ALPHABET)
    assert first.data.usage_count == 0
    assert db.query(FriendInvitation).count() == 1


def test_invitation_requires_known_caller(service, db):
    assert service.get_or_create_invitation(None, db).error_code == "UNAUTHENTICATED"
    assert service.get_or_create_invitation(4242, db).error_code == "USER_NOT_FOUND"


def test_deactivate_then_new_code(service, db, make_user):
    inviter = make_user()
    old_code = _invite_code(service, db, inviter)

    deactivated = service.deactivate_invitation(inviter, db)
    new_code = _invite_code(service, db, inviter)

    assert deactivated.data == {"deactivated": 1}
    assert new_code != old_code
    assert service.get_invitation_info(old_code).error_code == "INVITATION_UNAVAILABLE"
    assert service.deactivate_invitation(None, db).error_code == "UNAUTHENTICATED"


def test_invitation_info(service, db, make_user):
    inviter = make_user("Ann")
    code = _invite_code(service, db, inviter)

    info = service.get_invitation_info(code)

    assert info.data.inviter_id == inviter
    assert info.data.inviter_name == "Ann"
    assert service.get_invitation_info("ZZZZZZZZ").error_code == "INVITATION_NOT_FOUND"
    assert service.get_invitation_info("").error_code == "INVALID_INPUT"


def test_accept_creates_accepted_friendship(service, db, make_user):
    inviter, guest = make_user("Ann"), make_user("Ben")
    code = _invite_code(service, db, inviter)

    result = service.accept_invitation(guest, code, db)

    assert result.success
    assert result.data.friendship.status == FriendshipStatus.ACCEPTED
    assert result.data.friendship.requester_id == inviter
    assert result.data.friend.id == inviter
    assert db.query(FriendInvitationAcceptance).count() == 1
    again = service.get_or_create_invitation(inviter, db)
    assert again.data.usage_count == 1
    assert again.data.accepted_count == 1


def test_accept_turns_pending_request_into_friendship(service, db, make_user):
    inviter, guest = make_user(), make_user()
    service.friendship_repo.create_request(guest, inviter)
    db.commit()
    code = _invite_code(service, db, inviter)

    result = service.accept_invitation(guest, code, db)

    assert result.data.friendship.status == FriendshipStatus.ACCEPTED
    assert result.data.friendship.requester_id == guest
    assert db.query(Friendship).count() == 1


def test_accept_conflicts(service, db, make_user):
    inviter, friend, blocked = make_user(), make_user(), make_user()
    code = _invite_code(service, db, inviter)
    assert service.accept_invitation(friend, code, db).success
    service.friendship_repo.create_block(inviter, blocked)
    db.commit()

    assert service.accept_invitation(inviter, code, db).error_code == "SELF_REQUEST"
    assert service.accept_invitation(friend, code, db).error_code == "ALREADY_FRIENDS"
    assert service.accept_invitation(blocked, code, db).error_code == "REQUEST_FORBIDDEN"
    assert service.accept_invitation(None, code, db).error_code == "UNAUTHENTICATED"
    assert service.accept_invitation(friend, "ZZZZZZZZ", db).error_code == "INVITATION_NOT_FOUND"


@pytest.mark.parametrize("change", [
    {"is_active": False},
    {"expires_at": utcnow() - timedelta(days=1)},
    {"max_usage": 1, "usage_count": 1},
])
def test_unusable_invitations_are_refused(service, db, make_user, change):
    inviter, guest = make_user(), make_user()
    code = _invite_code(service, db, inviter)
    db.query(FriendInvitation).filter(FriendInvitation.invite_code == code).update(change)
    db.commit()

    assert service.get_invitation_info(code).error_code == "INVITATION_UNAVAILABLE"
    assert service.accept_invitation(guest, code, db).error_code == "INVITATION_UNAVAILABLE"
    assert db.query(Friendship).count() == 0


def test_usage_limit_counts_accepts(service, db, make_user):
    inviter, first, second = make_user(), make_user(), make_user()
    code = _invite_code(service, db, inviter)
    db.query(FriendInvitation).filter(FriendInvitation.invite_code == code).update({"max_usage": 1})
    db.commit()

    assert service.accept_invitation(first, code, db).success
    assert service.accept_invitation(second, code, db).error_code == "INVITATION_UNAVAILABLE"


def test_invite_code_exhaustion_is_reported(db, make_user, monkeypatch):
    inviter = make_user()
    invitation_repo = FriendInvitationRepository(db)
    monkeypatch.setattr(invitation_repo, "code_exists", lambda code: True)
    service = InvitationService(
        invitation_repo=invitation_repo,
        friendship_repo=FriendshipRepository(db),
        user_repo=UserRepository(db)
    )

    assert service.get_or_create_invitation(inviter, db).error_code == "INVITE_CODE_EXHAUSTED"


def test_concurrent_create_returns_winning_invitation(service, db, make_user, monkeypatch):
    inviter = make_user()
    code = _invite_code(service, db, inviter)

    real_lookup = service.invitation_repo.get_active_for_user
    calls = {"n": 0}

    def _lookup(user_id):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_lookup(user_id)

    monkeypatch.setattr(service.invitation_repo, "get_active_for_user", _lookup)

    result = service.get_or_create_invitation(inviter, db)

    assert result.created is False
    assert result.data.invite_code == code
    assert db.query(FriendInvitation).count() == 1
