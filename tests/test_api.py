"""API tests over an in-memory store. Every endpoint answers HTTP 200 with an envelope."""

import json

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from api.main import app, build_services
from pingpal.application import StoreError
from pingpal.application.ports import ROOMS, USERS
from pingpal.infrastructure import InMemoryDocumentStore, JwtIdentityVerifier

SECRET = "api-test-secret"
PASSWORD = "correct horse battery"


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def client(store):
    app.state.services = build_services(store, JwtIdentityVerifier(SECRET))
    try:
        yield TestClient(app)
    finally:
        app.state.services = None


def _envelope(response) -> dict:
    assert response.status_code == 200
    return response.json()


def _create(client, email: str, label: str | None = None) -> str:
    params = {"email": email, "password": PASSWORD}
    if label:
        params["label"] = label
    body = _envelope(client.get("/account-accountCreate", params=params))
    assert body["status"] == 200
    return body["data"]["account_id"]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_create_account_and_conflict(client):
    _create(client, "ann@example.com")
    body = _envelope(
        client.get(
            "/account-accountCreate", params={"email": "ann@example.com", "password": PASSWORD}
        )
    )
    assert body["status"] == 409
    assert body["data"] is None
    assert "already exists" in body["message"]


def test_create_account_missing_email(client):
    body = _envelope(client.get("/account-accountCreate", params={"password": PASSWORD}))
    assert body == {"status": 400, "message": "Email not provided", "data": None}


def test_account_info_hides_optional_sections_and_storage(client):
    account_id = _create(client, "ann@example.com", "Ann")
    client.get(
        "/account-accountStorageSet", params={"account_id": account_id, "key": "k", "value": "v"}
    )

    data = _envelope(client.get("/account-accountInfo", params={"account_id": account_id}))["data"]
    assert data["id"] == account_id
    assert data["label"] == "Ann"
    assert data["contact"] == {"email": "ann@example.com"}
    for hidden in ("flags", "friends", "invites", "storage", "rooms"):
        assert hidden not in data

    data = _envelope(
        client.get(
            "/account-accountInfo",
            params={"account_id": account_id, "flags": "true", "friends": "true", "invites": "1"},
        )
    )["data"]
    assert data["flags"] == ["needs_init"]
    assert data["friends"] == []
    assert data["invites"] == []
    assert "storage" not in data


def test_account_info_with_rooms(client, store):
    account_id = _create(client, "ann@example.com")
    store.put(ROOMS, "lobby", {"label": "Lobby", "access": [account_id]})
    store.put(ROOMS, "den", {"label": "Den", "access": []})

    data = _envelope(
        client.get("/account-accountInfo", params={"account_id": account_id, "rooms": "true"})
    )["data"]
    assert [r["id"] for r in data["rooms"]] == ["lobby"]


def test_account_info_errors(client):
    assert _envelope(client.get("/account-accountInfo"))["status"] == 400
    assert (
        _envelope(client.get("/account-accountInfo", params={"account_id": "ghost"}))["status"]
        == 404
    )


def test_account_change(client):
    account_id = _create(client, "ann@example.com")
    changes = {
        "label": "Ann",
        "details": {"first_name": "Ann", "sex": "F"},
        "contact": {"email": "evil@example.com"},
    }
    body = _envelope(
        client.get(
            "/account-accountChange",
            params={"account_id": account_id, "changes": json.dumps(changes)},
        )
    )
    assert body["status"] == 204

    data = _envelope(
        client.get("/account-accountInfo", params={"account_id": account_id, "flags": "true"})
    )["data"]
    assert data["label"] == "Ann"
    assert data["details"]["first_name"] == "Ann"
    assert data["details"]["sex"] == "F"
    assert data["contact"]["email"] == "ann@example.com"
    assert data["flags"] == []


def test_account_change_rejects_bad_changes(client):
    account_id = _create(client, "ann@example.com")
    for raw in ("{not json", "[1, 2]", "{}", json.dumps({"details": {"sex": "Q"}})):
        body = _envelope(
            client.get("/account-accountChange", params={"account_id": account_id, "changes": raw})
        )
        assert body["status"] == 400, raw


def test_login(client):
    token = jwt.encode({"sub": "uid-1"}, SECRET, algorithm="HS256")
    body = _envelope(client.get("/account-accountLogin", params={"token": token}))
    assert body["data"] == {"account_id": "uid-1"}

    body = _envelope(client.get("/account-accountLogin", params={"token": "garbage"}))
    assert body["status"] == 404
    assert body["message"] == "Token expired."


def test_find_and_list(client):
    ann = _create(client, "ann@example.com", "Ann")
    _create(client, "bob@example.com", "Bob")

    found = _envelope(client.get("/account-accountFind", params={"email": "ann@example.com"}))
    assert found["data"]["id"] == ann
    assert "storage" not in found["data"]
    assert _envelope(client.get("/account-accountFind"))["status"] == 400

    listed = _envelope(client.get("/account-accountList", params={"volume": 1}))["data"]
    assert [a["label"] for a in listed] == ["Ann"]
    assert len(_envelope(client.get("/account-accountList"))["data"]) == 2


def test_invite_handshake(client):
    ann = _create(client, "ann@example.com")
    bob = _create(client, "bob@example.com")

    sent = _envelope(
        client.get("/account-accountInviteFriend", params={"account_id": ann, "friend_id": bob})
    )
    assert sent["status"] == 200
    invite_id = sent["data"]["invite_id"]

    answered = _envelope(
        client.get(
            "/account-accountAnswerInvite",
            params={"account_id": bob, "friend_id": ann, "invite_id": invite_id, "accept": "true"},
        )
    )
    assert answered["status"] == 204

    bob_view = _envelope(
        client.get(
            "/account-accountInfo",
            params={"account_id": bob, "friends": "true", "invites": "true"},
        )
    )["data"]
    assert [f["account_id"] for f in bob_view["friends"]] == [ann]
    assert bob_view["invites"][0]["status"] == "resolved"


def test_answer_invite_with_self_as_friend_is_bad_request(client):
    ann = _create(client, "ann@example.com")
    bob = _create(client, "bob@example.com")
    sent = _envelope(
        client.get("/account-accountInviteFriend", params={"account_id": ann, "friend_id": bob})
    )
    body = _envelope(
        client.get(
            "/account-accountAnswerInvite",
            params={
                "account_id": ann,
                "friend_id": ann,
                "invite_id": sent["data"]["invite_id"],
                "accept": "true",
            },
        )
    )
    assert body == {
        "status": 400,
        "message": "Cannot answer an invite from yourself.",
        "data": None,
    }


def test_answer_invite_requires_answer(client):
    body = _envelope(
        client.get(
            "/account-accountAnswerInvite",
            params={"account_id": "a", "friend_id": "b", "invite_id": "i"},
        )
    )
    assert body["status"] == 400


def test_contacts_and_suggestions(client):
    ann = _create(client, "ann@example.com")
    bob = _create(client, "bob@example.com")

    added = client.get("/account-accountAddContact", params={"account_id": ann, "friend_id": bob})
    assert _envelope(added)["status"] == 204
    again = client.get("/account-accountAddContact", params={"account_id": ann, "friend_id": bob})
    assert _envelope(again)["status"] == 409

    suggestions = _envelope(
        client.get("/account-accountGetSuggestions", params={"account_id": ann})
    )["data"]
    assert suggestions == [{"type": "never-messaged", "account_id": bob}]

    updated = client.get(
        "/account-accountUpdateContact",
        params={
            "account_id": ann,
            "friend_id": bob,
            "changes": json.dumps({"favorite": True, "last_contacted": "2000-01-01T00:00:00Z"}),
        },
    )
    assert _envelope(updated)["status"] == 204
    suggestions = _envelope(
        client.get("/account-accountGetSuggestions", params={"account_id": ann})
    )["data"]
    assert suggestions == [{"type": "long-not-messaged", "account_id": bob}]

    bad = client.get(
        "/account-accountUpdateContact",
        params={"account_id": ann, "friend_id": bob, "changes": json.dumps({"last_contacted": "nope"})},
    )
    assert _envelope(bad)["status"] == 400

    for _ in range(2):
        deleted = client.get(
            "/account-accountDeleteContact", params={"account_id": ann, "friend_id": bob}
        )
        assert _envelope(deleted)["status"] == 204


def test_storage(client):
    ann = _create(client, "ann@example.com")
    missing = client.get("/account-accountStorageGet", params={"account_id": ann, "key": "theme"})
    assert _envelope(missing)["status"] == 404

    client.get("/account-accountStorageSet", params={"account_id": ann, "key": "theme", "value": "dark"})
    found = client.get("/account-accountStorageGet", params={"account_id": ann, "key": "theme"})
    assert _envelope(found)["data"] == "dark"


def test_rooms(client, store):
    ann = _create(client, "ann@example.com")
    store.put(ROOMS, "lobby", {"label": "Lobby", "access": [ann]})

    rooms = _envelope(client.get("/room-roomList"))["data"]
    assert [r["id"] for r in rooms] == ["lobby"]

    info = _envelope(client.get("/room-roomInfo", params={"room_id": "lobby", "accounts": "true"}))
    assert [a["id"] for a in info["data"]["accounts"]] == [ann]
    assert _envelope(client.get("/room-roomInfo", params={"room_id": "attic"}))["status"] == 404

    access = _envelope(
        client.get("/room-checkRoomAccess", params={"account_id": ann, "room_id": "lobby"})
    )
    assert access["data"] == {"hasAccess": True}


def test_invalid_query_parameter_type(client):
    body = _envelope(client.get("/account-accountList", params={"volume": "many"}))
    assert body["status"] == 400
    assert "volume" in body["message"]


def test_user_created_hook(client, monkeypatch):
    monkeypatch.delenv("HOOK_SECRET", raising=False)
    body = _envelope(
        client.post(
            "/hooks/user-created",
            json={"uid": "uid-1", "email": "ann@example.com", "display_name": "Ann"},
        )
    )
    assert body["data"] == {"account_id": "uid-1"}

    info = _envelope(
        client.get("/account-accountInfo", params={"account_id": "uid-1", "flags": "true"})
    )["data"]
    assert info["label"] == "Ann"
    assert info["flags"] == ["needs_init", "verify_email"]


def test_user_created_hook_checks_secret(client, monkeypatch):
    monkeypatch.setenv("HOOK_SECRET", "s3cret")
    payload = {"uid": "uid-1", "email": "ann@example.com"}
    denied = _envelope(client.post("/hooks/user-created", json=payload))
    assert denied["status"] == 403
    allowed = _envelope(
        client.post("/hooks/user-created", json=payload, headers={"X-Hook-Secret": "s3cret"})
    )
    assert allowed["status"] == 200


def test_store_failure_becomes_500_envelope(client, store, monkeypatch):
    def broken(*args, **kwargs):
        raise StoreError("store unavailable")

    monkeypatch.setattr(store, "get", broken)
    body = _envelope(client.get("/account-accountInfo", params={"account_id": "ann"}))
    assert body == {"status": 500, "message": "store unavailable", "data": None}


def test_account_with_repeated_friends_still_loads(client, store):
    store.put(
        USERS,
        "ann",
        {
            "contact": {"email": "ann@example.com"},
            "friends": [{"account_id": "bob"}, {"account_id": "bob"}, {"account_id": "ann"}],
        },
    )
    body = _envelope(
        client.get("/account-accountInfo", params={"account_id": "ann", "friends": "true"})
    )
    assert body["status"] == 200
    assert [f["account_id"] for f in body["data"]["friends"]] == ["bob"]
