"""Domain entities: Account (with embedded Friend and Invite), Room, Suggestion.

Entities are immutable; use cases build new instances with dataclasses.replace.
Each top-level entity converts to and from a JSON-compatible document, which is
what the document store persists. The document id lives outside the body.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

DEFAULT_LABEL = "Unknown"

FLAG_NEEDS_INIT = "needs_init"
FLAG_VERIFY_EMAIL = "verify_email"

SEXES = ("M", "F", "O")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: datetime | str) -> datetime:
    """Parse an ISO-8601 timestamp. Naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _timestamp_or_none(value) -> datetime | None:
    if value is None or value == "":
        return None
    return parse_timestamp(value)


def _date_or_none(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


class InviteStatus(str, Enum):
    PENDING = "pending"
    WAITING = "waiting"
    RESOLVED = "resolved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (InviteStatus.RESOLVED, InviteStatus.REJECTED)


class SuggestionType(str, Enum):
    LONG_NOT_MESSAGED = "long-not-messaged"
    NEVER_MESSAGED = "never-messaged"


@dataclass(frozen=True)
class Friend:
    """A reference from the owning account to another account."""

    account_id: str
    favorite: bool = False
    last_contacted: datetime | None = None

    def __post_init__(self):
        if not self.account_id or not str(self.account_id).strip():
            raise ValueError("Friend account_id must be non-empty.")

    def to_document(self) -> dict:
        return {
            "account_id": self.account_id,
            "favorite": self.favorite,
            "last_contacted": (
                self.last_contacted.isoformat() if self.last_contacted else None
            ),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "Friend":
        return cls(
            account_id=doc["account_id"],
            favorite=bool(doc.get("favorite", False)),
            last_contacted=_timestamp_or_none(doc.get("last_contacted")),
        )


@dataclass(frozen=True)
class Invite:
    """One party's copy of a friend invite. account_id is the other party."""

    id: str
    account_id: str
    created_at: datetime
    status: InviteStatus

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
        }

    @classmethod
    def from_document(cls, doc: dict) -> "Invite":
        return cls(
            id=doc["id"],
            account_id=doc["account_id"],
            created_at=parse_timestamp(doc["created_at"]),
            status=InviteStatus(doc["status"]),
        )


@dataclass(frozen=True)
class AccountContact:
    """Email is required and immutable once the account exists."""

    email: str
    phone: str | None = None

    def __post_init__(self):
        if not self.email or not self.email.strip():
            raise ValueError("Account email must be non-empty.")

    def to_document(self) -> dict:
        doc = {"email": self.email}
        if self.phone:
            doc["phone"] = self.phone
        return doc


@dataclass(frozen=True)
class AccountDetails:
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    birthdate: date | None = None
    sex: str | None = None

    def __post_init__(self):
        if self.sex is not None and self.sex not in SEXES:
            raise ValueError(f"Account sex must be one of {', '.join(SEXES)}.")

    def to_document(self) -> dict:
        return {
            "first_name": self.first_name,
            "middle_name": self.middle_name,
            "last_name": self.last_name,
            "birthdate": self.birthdate.isoformat() if self.birthdate else None,
            "sex": self.sex,
        }

    @classmethod
    def from_document(cls, doc: dict | None) -> "AccountDetails":
        doc = doc or {}
        return cls(
            first_name=doc.get("first_name"),
            middle_name=doc.get("middle_name"),
            last_name=doc.get("last_name"),
            birthdate=_date_or_none(doc.get("birthdate")),
            sex=doc.get("sex"),
        )


@dataclass(frozen=True)
class Account:
    """
    A user identity. Friends and invites are embedded value objects owned by
    exactly one account; storage is private and never part of generic responses.
    """

    contact: AccountContact
    id: str = ""
    label: str = DEFAULT_LABEL
    created_at: datetime = field(default_factory=utcnow)
    avatar_url: str | None = None
    details: AccountDetails = field(default_factory=AccountDetails)
    flags: tuple[str, ...] = ()
    friends: tuple[Friend, ...] = ()
    invites: tuple[Invite, ...] = ()
    storage: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.contact is None:
            raise ValueError("Account must have contact information.")
        seen: set[str] = set()
        for friend in self.friends:
            if friend.account_id in seen:
                raise ValueError(f"Duplicate friend {friend.account_id}.")
            if self.id and friend.account_id == self.id:
                raise ValueError("An account cannot be its own friend.")
            seen.add(friend.account_id)

    def friend(self, account_id: str) -> Friend | None:
        for f in self.friends:
            if f.account_id == account_id:
                return f
        return None

    def invite(self, invite_id: str) -> Invite | None:
        for i in self.invites:
            if i.id == invite_id:
                return i
        return None

    def to_document(self) -> dict:
        """Body as stored; the id is kept outside the body."""
        return {
            "label": self.label,
            "created_at": self.created_at.isoformat(),
            "avatar_url": self.avatar_url,
            "contact": self.contact.to_document(),
            "details": self.details.to_document(),
            "flags": list(self.flags),
            "friends": [f.to_document() for f in self.friends],
            "invites": [i.to_document() for i in self.invites],
            "storage": dict(self.storage),
        }

    @classmethod
    def from_document(cls, doc: dict, account_id: str | None = None) -> "Account":
        contact = doc.get("contact") or {}
        if not isinstance(contact, dict):
            raise ValueError("Account contact must be an object.")
        details = doc.get("details")
        if details is not None and not isinstance(details, dict):
            raise ValueError("Account details must be an object.")
        flags = doc.get("flags") or []
        if isinstance(flags, str) or not isinstance(flags, list | tuple):
            raise ValueError("Account flags must be a list.")
        storage = doc.get("storage") or {}
        if not isinstance(storage, dict):
            raise ValueError("Account storage must be an object.")
        account_id = account_id if account_id is not None else doc.get("id", "")
        # Older documents may repeat a friend or list the owner; keep the first entry.
        friends: dict[str, Friend] = {}
        for entry in doc.get("friends") or []:
            friend = Friend.from_document(entry)
            if friend.account_id != account_id:
                friends.setdefault(friend.account_id, friend)
        return cls(
            id=account_id,
            label=doc.get("label") or DEFAULT_LABEL,
            created_at=_timestamp_or_none(doc.get("created_at")) or utcnow(),
            avatar_url=doc.get("avatar_url"),
            contact=AccountContact(
                email=contact.get("email", ""),
                phone=contact.get("phone"),
            ),
            details=AccountDetails.from_document(details),
            flags=tuple(dict.fromkeys(str(f) for f in flags)),
            friends=tuple(friends.values()),
            invites=tuple(Invite.from_document(i) for i in doc.get("invites") or []),
            storage=dict(storage),
        )


@dataclass(frozen=True)
class Room:
    """A shared space; access lists the account ids permitted to enter."""

    id: str
    label: str
    created_at: datetime = field(default_factory=utcnow)
    access: tuple[str, ...] = ()

    def to_document(self) -> dict:
        return {
            "label": self.label,
            "created_at": self.created_at.isoformat(),
            "access": list(self.access),
        }

    @classmethod
    def from_document(cls, doc: dict, room_id: str | None = None) -> "Room":
        return cls(
            id=room_id if room_id is not None else doc.get("id", ""),
            label=doc.get("label") or "",
            created_at=_timestamp_or_none(doc.get("created_at")) or utcnow(),
            access=tuple(doc.get("access") or ()),
        )


@dataclass(frozen=True)
class Suggestion:
    type: SuggestionType
    account_id: str
