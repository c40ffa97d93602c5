"""Tests for the shallow partial-update merge and its stripped-field policy."""

from pingpal.application.merge import (
    ACCOUNT_POLICY,
    FRIEND_POLICY,
    STRIPPED_FIELDS,
    clear_init_flag,
    merge_changes,
)


def test_merge_overwrites_and_adds_keys() -> None:
    assert merge_changes({"a": 1, "b": 2}, {"b": 3, "c": 4}, ACCOUNT_POLICY) == {
        "a": 1,
        "b": 3,
        "c": 4,
    }


def test_merge_does_not_mutate_inputs() -> None:
    entity = {"a": 1}
    changes = {"a": 2}
    merge_changes(entity, changes, ACCOUNT_POLICY)
    assert entity == {"a": 1}
    assert changes == {"a": 2}


def test_protected_account_keys_are_dropped() -> None:
    entity = {"label": "Old", "contact": {"email": "a@example.com"}, "storage": {"k": 1}}
    changes = {
        "label": "New",
        "contact": {"email": "evil@example.com"},
        "friends": [{"account_id": "x"}],
        "invites": [],
        "storage": {},
        "rooms": ["r1"],
        "id": "other",
    }
    merged = merge_changes(entity, changes, ACCOUNT_POLICY)
    assert merged == {
        "label": "New",
        "contact": {"email": "a@example.com"},
        "storage": {"k": 1},
    }


def test_nested_objects_are_replaced_not_merged() -> None:
    entity = {"details": {"first_name": "Ann", "last_name": "Lee"}}
    merged = merge_changes(entity, {"details": {"first_name": "Bo"}}, ACCOUNT_POLICY)
    assert merged == {"details": {"first_name": "Bo"}}


def test_friend_policy_protects_account_id() -> None:
    entity = {"account_id": "bob", "favorite": False}
    merged = merge_changes(entity, {"account_id": "eve", "favorite": True}, FRIEND_POLICY)
    assert merged == {"account_id": "bob", "favorite": True}


def test_policy_table() -> None:
    assert STRIPPED_FIELDS[ACCOUNT_POLICY] >= {"contact", "friends", "invites", "storage"}


def test_clear_init_flag() -> None:
    assert clear_init_flag(["needs_init", "verify_email"]) == ["verify_email"]
    assert clear_init_flag(["verify_email"]) == ["verify_email"]
    assert clear_init_flag([]) == []
