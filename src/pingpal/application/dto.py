"""Input DTOs and result types returned by the use cases.

Failures are values, not exceptions: Invalid, NotFound and Conflict. Only the
store raises (StoreError, see ports).
"""

from dataclasses import dataclass
from datetime import datetime

from pingpal.domain import Account, Room

# --- inputs ---


@dataclass(frozen=True)
class FriendChanges:
    """Sparse update of a Friend entry. None means "leave as is"."""

    favorite: bool | None = None
    last_contacted: datetime | str | None = None

    def is_empty(self) -> bool:
        return self.favorite is None and self.last_contacted is None


# --- failures ---


@dataclass(frozen=True)
class Invalid:
    """Missing or malformed input."""

    reason: str


@dataclass(frozen=True)
class NotFound:
    """A referenced account, room, friend, invite or storage key is absent."""

    reason: str


@dataclass(frozen=True)
class Conflict:
    """Duplicate email, duplicate friend or an invite already in flight."""

    reason: str


# --- successes ---


@dataclass(frozen=True)
class Done:
    """Success without payload."""

    pass


@dataclass(frozen=True)
class AccountCreated:
    account_id: str


@dataclass(frozen=True)
class Authenticated:
    account_id: str


@dataclass(frozen=True)
class InviteSent:
    invite_id: str


@dataclass(frozen=True)
class StorageValue:
    key: str
    value: object


@dataclass(frozen=True)
class RoomAccess:
    has_access: bool


@dataclass(frozen=True)
class RoomDetails:
    """A room, optionally hydrated with the accounts listed in its access."""

    room: Room
    accounts: list[Account] | None = None
