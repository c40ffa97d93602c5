"""Domain layer: entities and value objects. No dependencies on outer layers."""

from pingpal.domain.entities import (
    DEFAULT_LABEL,
    FLAG_NEEDS_INIT,
    FLAG_VERIFY_EMAIL,
    Account,
    AccountContact,
    AccountDetails,
    Friend,
    Invite,
    InviteStatus,
    Room,
    Suggestion,
    SuggestionType,
)

__all__ = [
    "DEFAULT_LABEL",
    "FLAG_NEEDS_INIT",
    "FLAG_VERIFY_EMAIL",
    "Account",
    "AccountContact",
    "AccountDetails",
    "Friend",
    "Invite",
    "InviteStatus",
    "Room",
    "Suggestion",
    "SuggestionType",
]
