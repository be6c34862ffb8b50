from datetime import timedelta

from app.core.time import utcnow
from app.db.models.friendship import Friendship
from app.db.models.pinory_share import PinoryShare


def _create_share(client, act_as, owner, place, **body):
    act_as(owner)
    resp = client.post("/pinory/share", json={"place_id": place, **body})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_public_share_scenario(client, act_as, make_user, make_place):
    owner = make_user()
    share = _create_share(client, act_as, owner, make_place(owner), visibility="public")
    assert share["share_url"] == f"http://testserver/p/{share['share_slug']}"

    act_as(None)
    resp = client.get(f"/pinory/share/{share['share_slug']}")

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["can_view"] is True
    assert data["view_type"] == "public"
    assert data["share_info"]["view_count"] == 1
    assert data["content"]["name"] == "Corner Cafe"


def test_forwarded_proto_used_for_share_url(client, act_as, make_user, make_place):
    owner = make_user()
    act_as(owner)
    resp = client.post(
        "/pinory/share",
        json={"place_id": make_place(owner)},
        headers={"x-forwarded-proto": "https", "host": "pinory.app"}
    )
    assert resp.json()["share_url"].startswith("https://pinory.app/p/")


def test_friends_share_scenarios(client, act_as, make_user, make_place, session_factory):
    owner, viewer = make_user(), make_user()
    share = _create_share(client, act_as, owner, make_place(owner), visibility="friends")
    url = f"/pinory/share/{share['share_slug']}"

    act_as(None)
    anonymous = client.get(url)
    assert anonymous.status_code == 403
    assert anonymous.json()["reason"] == "sign-in-required"

    act_as(viewer)
    stranger = client.get(url)
    assert stranger.status_code == 403
    assert stranger.json() == {
        "can_view": False,
        "view_type": "restricted",
        "reason": "not-friends",
        "message": "This location is only shared with friends",
        "content": None,
        "share_info": None,
    }

    with session_factory() as db:
        db.add(Friendship(requester_id=owner, addressee_id=viewer, status="accepted"))
        db.commit()

    friend = client.get(url)
    assert friend.status_code == 200
    assert friend.json()["view_type"] == "friend"


def test_revoked_share_scenario(client, act_as, make_user, make_place):
    owner = make_user()
    share = _create_share(client, act_as, owner, make_place(owner), visibility="public")
    url = f"/pinory/share/{share['share_slug']}"

    revoked = client.patch(url, json={"action": "revoke"})
    owner_view = client.get(url)

    assert revoked.status_code == 200
    assert revoked.json()["is_active"] is False
    assert owner_view.status_code == 410
    assert owner_view.json()["reason"] == "revoked"


def test_expired_share_is_gone(client, act_as, make_user, make_place, session_factory):
    owner = make_user()
    share = _create_share(client, act_as, owner, make_place(owner), visibility="public")
    with session_factory() as db:
        row = db.query(PinoryShare).filter(PinoryShare.share_slug == share["share_slug"]).one()
        row.expires_at = utcnow() - timedelta(days=1)
        db.commit()

    act_as(None)
    resp = client.get(f"/pinory/share/{share['share_slug']}")

    assert resp.status_code == 410
    assert resp.json()["reason"] == "expired"


def test_second_create_returns_existing_share(client, act_as, make_user, make_place):
    owner = make_user()
    place = make_place(owner)
    first = _create_share(client, act_as, owner, place)

    again = client.post("/pinory/share", json={"place_id": place})

    assert again.status_code == 200
    assert again.json()["share_slug"] == first["share_slug"]


def test_create_errors(client, act_as, make_user, make_place):
    owner, other = make_user(), make_user()
    place = make_place(owner)

    act_as(None)
    assert client.post("/pinory/share", json={"place_id": place}).status_code == 401
    act_as(other)
    not_owner = client.post("/pinory/share", json={"place_id": place})
    assert not_owner.status_code == 403
    assert not_owner.json()["detail"]["error_code"] == "NOT_OWNER"
    act_as(owner)
    assert client.post("/pinory/share", json={"place_id": 777}).status_code == 404
    assert client.post("/pinory/share", json={"place_id": place, "expires_at": "yesterday"}).status_code == 400


def test_list_shares_shows_only_active(client, act_as, make_user, make_place):
    owner = make_user()
    kept = _create_share(client, act_as, owner, make_place(owner, "Kept"))
    gone = _create_share(client, act_as, owner, make_place(owner, "Gone"))
    client.patch(f"/pinory/share/{gone['share_slug']}", json={"action": "revoke"})

    resp = client.get("/pinory/share")

    assert resp.status_code == 200
    assert [(s["share_slug"], s["place"]["name"]) for s in resp.json()] == [(kept["share_slug"], "Kept")]


def test_unsupported_patch_action(client, act_as, make_user, make_place):
    owner = make_user()
    share = _create_share(client, act_as, owner, make_place(owner))
    resp = client.patch(f"/pinory/share/{share['share_slug']}", json={"action": "extend"})
    assert resp.status_code == 400


def test_delete_share_and_lookup_errors(client, act_as, make_user, make_place):
    owner, other = make_user(), make_user()
    share = _create_share(client, act_as, owner, make_place(owner))
    url = f"/pinory/share/{share['share_slug']}"

    act_as(other)
    assert client.delete(url).status_code == 403

    act_as(owner)
    deleted = client.delete(url)
    assert deleted.status_code == 200
    assert deleted.json() == {"deleted": True, "share_slug": share["share_slug"]}
    assert client.get(url).status_code == 404
    assert client.get("/pinory/share/bad.slug").status_code == 400


def test_owner_does_not_inflate_view_count(client, act_as, make_user, make_place):
    owner = make_user()
    share = _create_share(client, act_as, owner, make_place(owner), visibility="public")
    url = f"/pinory/share/{share['share_slug']}"

    client.get(url)
    act_as(None)
    anonymous = client.get(url)
    act_as(owner)
    owner_view = client.get(url)

    assert anonymous.json()["share_info"]["view_count"] == 1
    assert owner_view.json()["view_type"] == "owner"
    assert owner_view.json()["share_info"]["view_count"] == 1


def test_non_string_visibility_is_not_a_validation_error(client, act_as, make_user, make_place):
    owner = make_user()
    share = _create_share(client, act_as, owner, make_place(owner), visibility=5)
    assert share["visibility"] == "friends"
