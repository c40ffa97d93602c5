"""Shallow partial-update merge shared by account and friend edits."""

from collections.abc import Iterable, Mapping

from pingpal.domain import FLAG_NEEDS_INIT

ACCOUNT_POLICY = "account"
FRIEND_POLICY = "friend"

# Keys clients can never change through a generic edit.
STRIPPED_FIELDS: dict[str, frozenset[str]] = {
    ACCOUNT_POLICY: frozenset(
        {"id", "contact", "rooms", "friends", "invites", "storage"}
    ),
    FRIEND_POLICY: frozenset({"account_id"}),
}


def strip_protected(changes: Mapping, policy: str) -> dict:
    """Return changes without the keys the policy protects."""
    stripped = STRIPPED_FIELDS[policy]
    return {k: v for k, v in changes.items() if k not in stripped}


def merge_changes(entity: Mapping, changes: Mapping, policy: str) -> dict:
    """Return a copy of entity with every allowed key of changes overwritten.

    One level deep only: a nested mapping in changes replaces the nested
    mapping in entity wholesale.
    """
    merged = dict(entity)
    merged.update(strip_protected(changes, policy))
    return merged


def clear_init_flag(flags: Iterable[str]) -> list[str]:
    return [f for f in flags if f != FLAG_NEEDS_INIT]
