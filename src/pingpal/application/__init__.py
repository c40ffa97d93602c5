"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from pingpal.application.account_service import AccountService
from pingpal.application.dto import (
    AccountCreated,
    Authenticated,
    Conflict,
    Done,
    FriendChanges,
    Invalid,
    InviteSent,
    NotFound,
    RoomAccess,
    RoomDetails,
    StorageValue,
)
from pingpal.application.friend_service import FriendService
from pingpal.application.ports import (
    AccountRepository,
    DocumentStore,
    IdentityVerifier,
    RoomRepository,
    StoreError,
)
from pingpal.application.room_service import RoomService
from pingpal.application.suggestion_service import SuggestionService

__all__ = [
    "AccountCreated",
    "AccountRepository",
    "AccountService",
    "Authenticated",
    "Conflict",
    "DocumentStore",
    "Done",
    "FriendChanges",
    "FriendService",
    "IdentityVerifier",
    "Invalid",
    "InviteSent",
    "NotFound",
    "RoomAccess",
    "RoomDetails",
    "RoomRepository",
    "RoomService",
    "StorageValue",
    "StoreError",
    "SuggestionService",
]
