import pytest

from app.db.models.friendship import Friendship
from app.db.models.place import Place
from app.db.models.user import User
from app.repositories.friendship import FriendshipRepository
from app.repositories.place import PlaceRepository
from app.repositories.user import UserRepository
from app.schemas.friendship import FriendshipStatus, RequestDirection
from app.services.exceptions import ValidationError
from app.services.friendship_services import FriendshipService


@pytest.fixture
def service(db):
    return FriendshipService(
        correlation_id="test-cid",
        friendship_repo=FriendshipRepository(db),
        user_repo=UserRepository(db),
        place_repo=PlaceRepository(db)
    )


def test_service_requires_repositories():
    with pytest.raises(ValidationError):
        FriendshipService(friendship_repo=object())


def test_request_creates_pending_friendship(service, db, make_user):
    a, b = make_user(), make_user()

    result = service.request_friendship(a, b, db)

    assert result.success
    assert result.data.requester_id == a
    assert result.data.addressee_id == b
    assert result.data.status == FriendshipStatus.PENDING


def test_status_lookup_is_symmetric(service, db, make_user):
    a, b = make_user(), make_user()
    service.request_friendship(a, b, db)

    assert service.lookup_status(a, b) == FriendshipStatus.PENDING
    assert service.lookup_status(b, a) == FriendshipStatus.PENDING


def test_no_record_means_no_status(service, make_user):
    a, b = make_user(), make_user()
    assert service.lookup_status(a, b) is None


def test_self_request_is_refused(service, db, make_user):
    a = make_user()
    result = service.request_friendship(a, a, db)
    assert not result.success
    assert result.error_code == "SELF_REQUEST"


def test_request_to_missing_user(service, db, make_user):
    a = make_user()
    result = service.request_friendship(a, 9999, db)
    assert result.error_code == "USER_NOT_FOUND"


def test_anonymous_request_is_refused(service, db, make_user):
    b = make_user()
    result = service.request_friendship(None, b, db)
    assert result.error_code == "UNAUTHENTICATED"


def test_second_request_before_response_is_already_sent(service, db, make_user):
    a, b = make_user(), make_user()
    assert service.request_friendship(a, b, db).success

    again = service.request_friendship(a, b, db)
    reverse = service.request_friendship(b, a, db)

    assert again.error_code == "REQUEST_ALREADY_SENT"
    assert reverse.error_code == "REQUEST_ALREADY_SENT"
    assert db.query(Friendship).count() == 1


def test_request_between_friends_in_either_direction(service, db, make_user):
    a, b = make_user(), make_user()
    pending = service.request_friendship(a, b, db).data
    service.accept_request(pending.id, b, db)

    assert service.request_friendship(a, b, db).error_code == "ALREADY_FRIENDS"
    assert service.request_friendship(b, a, db).error_code == "ALREADY_FRIENDS"


def test_accept_is_addressee_only(service, db, make_user):
    a, b = make_user(), make_user()
    pending = service.request_friendship(a, b, db).data

    by_requester = service.accept_request(pending.id, a, db)
    by_addressee = service.accept_request(pending.id, b, db)

    assert by_requester.error_code == "FORBIDDEN"
    assert by_addressee.success
    assert by_addressee.data.status == FriendshipStatus.ACCEPTED
    assert service.lookup_status(a, b) == FriendshipStatus.ACCEPTED


def test_accept_requires_pending(service, db, make_user):
    a, b = make_user(), make_user()
    pending = service.request_friendship(a, b, db).data
    service.accept_request(pending.id, b, db)

    result = service.accept_request(pending.id, b, db)

    assert result.error_code == "REQUEST_NOT_PENDING"


def test_reject_deletes_request(service, db, make_user):
    a, b = make_user(), make_user()
    pending = service.request_friendship(a, b, db).data

    result = service.reject_request(pending.id, b, db)

    assert result.success
    assert service.lookup_status(a, b) is None
    # The pair can start over
    assert service.request_friendship(a, b, db).success


def test_remove_by_either_party(service, db, make_user):
    a, b, c = make_user(), make_user(), make_user()
    first = service.request_friendship(a, b, db).data
    service.accept_request(first.id, b, db)
    second = service.request_friendship(c, a, db).data

    assert service.remove_friendship(first.id, b, db).success
    assert service.remove_friendship(second.id, c, db).success
    assert service.lookup_status(a, b) is None
    assert service.lookup_status(a, c) is None


def test_remove_by_outsider_is_forbidden(service, db, make_user):
    a, b, c = make_user(), make_user(), make_user()
    pending = service.request_friendship(a, b, db).data

    result = service.remove_friendship(pending.id, c, db)

    assert result.error_code == "FORBIDDEN"
    assert service.lookup_status(a, b) == FriendshipStatus.PENDING


def test_remove_missing_friendship(service, db, make_user):
    a = make_user()
    assert service.remove_friendship(12345, a, db).error_code == "FRIENDSHIP_NOT_FOUND"


def test_block_replaces_friendship_and_stops_requests(service, db, make_user):
    a, b = make_user(), make_user()
    pending = service.request_friendship(a, b, db).data
    service.accept_request(pending.id, b, db)

    blocked = service.block_user(b, a, db)

    assert blocked.success
    assert blocked.data.requester_id == b
    assert service.lookup_status(a, b) == FriendshipStatus.BLOCKED
    assert service.request_friendship(a, b, db).error_code == "REQUEST_FORBIDDEN"
    assert service.request_friendship(b, a, db).error_code == "REQUEST_FORBIDDEN"


def test_block_is_idempotent_for_blocker(service, db, make_user):
    a, b = make_user(), make_user()
    first = service.block_user(a, b, db)
    second = service.block_user(a, b, db)

    assert second.success
    assert second.data.id == first.data.id
    assert service.block_user(b, a, db).error_code == "REQUEST_FORBIDDEN"


def test_only_blocker_can_remove_block(service, db, make_user):
    a, b = make_user(), make_user()
    block = service.block_user(a, b, db).data

    assert service.remove_friendship(block.id, b, db).error_code == "FORBIDDEN"
    assert service.remove_friendship(block.id, a, db).success
    assert service.lookup_status(a, b) is None


def test_friend_list_and_request_listings(service, db, make_user):
    a, b, c = make_user("Ann"), make_user("Ben"), make_user("Cat")
    ab = service.request_friendship(a, b, db).data
    service.accept_request(ab.id, b, db)
    service.request_friendship(c, a, db)

    friends = service.get_friends(a)
    received = service.get_requests(a, RequestDirection.RECEIVED)
    sent = service.get_requests(c, RequestDirection.SENT)

    assert [(f.id, f.name) for f in friends.data] == [(b, "Ben")]
    assert friends.data[0].friendship_id == ab.id
    assert [r.requester_id for r in received.data] == [c]
    assert [r.addressee_id for r in sent.data] == [a]
    assert service.get_friends(None).error_code == "UNAUTHENTICATED"


def _miss_first_lookup(monkeypatch, repo):
    """Make the next pair lookup miss, as if another request had not committed yet."""
    real_get_between = repo.get_between
    calls = {"n": 0}

    def _get_between(user_a, user_b):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_get_between(user_a, user_b)

    monkeypatch.setattr(repo, "get_between", _get_between)


def test_concurrent_opposite_requests_keep_one_row(service, db, make_user, monkeypatch):
    a, b = make_user(), make_user()
    assert service.request_friendship(b, a, db).success
    _miss_first_lookup(monkeypatch, service.friendship_repo)

    result = service.request_friendship(a, b, db)

    assert result.error_code == "REQUEST_ALREADY_SENT"
    assert db.query(Friendship).count() == 1


def test_concurrent_same_direction_requests_keep_one_row(service, db, make_user, monkeypatch):
    a, b = make_user(), make_user()
    assert service.request_friendship(a, b, db).success
    _miss_first_lookup(monkeypatch, service.friendship_repo)

    result = service.request_friendship(a, b, db)

    assert result.error_code == "REQUEST_ALREADY_SENT"
    assert db.query(Friendship).count() == 1


def test_unordered_pair_index_rejects_reverse_row(db, make_user):
    from sqlalchemy.exc import IntegrityError

    a, b = make_user(), make_user()
    db.add(Friendship(requester_id=a, addressee_id=b, status="pending"))
    db.commit()

    db.add(Friendship(requester_id=b, addressee_id=a, status="pending"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_friend_list_filters_by_status_and_search(service, db, make_user):
    a, b, c, d = make_user("Ann"), make_user("Ben Stone"), make_user("Cat"), make_user("Dan")
    ab = service.request_friendship(a, b, db).data
    service.accept_request(ab.id, b, db)
    ac = service.request_friendship(c, a, db).data
    service.accept_request(ac.id, a, db)
    service.request_friendship(a, d, db)

    by_name = service.get_friends(a, search="stone")
    by_email = service.get_friends(a, search=db.get(User, c).email.upper())
    pending = service.get_friends(a, status=FriendshipStatus.PENDING)

    assert [f.id for f in by_name.data] == [b]
    assert [f.id for f in by_email.data] == [c]
    assert [(f.id, f.friendship_status) for f in pending.data] == [(d, FriendshipStatus.PENDING)]


def test_friend_search_does_not_match_own_name(service, db, make_user):
    a, b = make_user("Stone Ann"), make_user("Ben")
    ab = service.request_friendship(a, b, db).data
    service.accept_request(ab.id, b, db)

    assert service.get_friends(a, search="stone").data == []


def test_blocked_list_only_shows_own_blocks(service, db, make_user):
    a, b = make_user(), make_user()
    service.block_user(a, b, db)

    assert [f.id for f in service.get_friends(a, status=FriendshipStatus.BLOCKED).data] == [b]
    assert service.get_friends(b, status=FriendshipStatus.BLOCKED).data == []


def test_search_users_reports_relationship(service, db, make_user, make_place):
    me, sent, received, stranger = make_user("Me"), make_user("Kim Sent"), make_user("Kim Received"), make_user("Kim Other")
    service.request_friendship(me, sent, db)
    incoming = service.request_friendship(received, me, db).data
    public_place = db.get(Place, make_place(stranger))
    public_place.visibility = "public"
    make_place(stranger)
    db.commit()

    results = {u.id: u for u in service.search_users(me, "kim").data}

    assert set(results) == {sent, received, stranger}
    assert results[sent].friendship_status == FriendshipStatus.PENDING
    assert results[sent].is_sent_by_me is True
    assert results[received].friendship_id == incoming.id
    assert results[received].is_sent_by_me is False
    assert results[stranger].friendship_status is None
    assert results[stranger].friendship_id is None
    assert results[stranger].pinories_count == 1
    assert results[sent].pinories_count == 0


def test_search_users_short_query_and_self(service, db, make_user):
    me = make_user("Kim")

    assert service.search_users(me, "k").data == []
    assert service.search_users(me, "kim").data == []
    assert service.search_users(None, "kim").error_code == "UNAUTHENTICATED"


def test_search_users_treats_wildcards_literally(service, db, make_user):
    me = make_user("Me")
    make_user("Ann")

    assert service.search_users(me, "%%").data == []
    assert service.search_users(me, "__").data == []
