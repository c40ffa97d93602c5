"""
Pingpal core: clean-architecture layout.

- domain: entities (Account, Friend, Invite, Room, Suggestion). No outer dependencies.
- application: use cases (AccountService, FriendService, SuggestionService, RoomService),
  ports (DocumentStore, AccountRepository, RoomRepository, IdentityVerifier), DTOs.
- infrastructure: adapters (InMemoryDocumentStore, Neo4jDocumentStore, document
  repositories, JwtIdentityVerifier).
"""

from pingpal.application import (
    AccountService,
    Conflict,
    Done,
    FriendChanges,
    FriendService,
    Invalid,
    NotFound,
    RoomService,
    StoreError,
    SuggestionService,
)
from pingpal.domain import Account, Friend, Invite, InviteStatus, Room, Suggestion
from pingpal.infrastructure import (
    DocumentAccountRepository,
    DocumentRoomRepository,
    InMemoryDocumentStore,
    JwtIdentityVerifier,
    Neo4jDocumentStore,
)

__all__ = [
    "Account",
    "AccountService",
    "Conflict",
    "DocumentAccountRepository",
    "DocumentRoomRepository",
    "Done",
    "Friend",
    "FriendChanges",
    "FriendService",
    "InMemoryDocumentStore",
    "Invalid",
    "Invite",
    "InviteStatus",
    "JwtIdentityVerifier",
    "Neo4jDocumentStore",
    "NotFound",
    "Room",
    "RoomService",
    "StoreError",
    "Suggestion",
    "SuggestionService",
]
