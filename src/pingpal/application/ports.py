"""Application ports (interfaces). Implemented by infrastructure adapters."""

from collections.abc import Iterable, Mapping
from typing import Protocol

from pingpal.domain import Account, Room

USERS = "users"
ROOMS = "rooms"


class StoreError(Exception):
    """The underlying document store failed. Carries the store's message."""


class DocumentStore(Protocol):
    """Key/document CRUD over named collections.

    Documents are JSON-compatible dicts. Reads inject the document id under "id";
    writes ignore an "id" key in the body. Failures raise StoreError.
    """

    def get(self, collection: str, doc_id: str) -> dict | None:
        """Return the document or None."""
        ...

    def list_collection(self, collection: str) -> list[dict]:
        """Return every document of the collection in a stable order."""
        ...

    def query(self, collection: str, field: str, op: str, value: object) -> list[dict]:
        """Return documents where field (dotted path) matches value.

        Supported ops: "==" and "array-contains".
        """
        ...

    def put(self, collection: str, doc_id: str, doc: Mapping) -> None:
        """Create or fully replace the document."""
        ...

    def add(self, collection: str, doc: Mapping) -> str:
        """Store a new document under a store-assigned id and return it."""
        ...

    def put_many(self, collection: str, docs: Mapping[str, Mapping]) -> None:
        """Replace several documents atomically: all are written or none."""
        ...


class AccountRepository(Protocol):
    """Reads and writes Account aggregates."""

    def get_by_id(self, account_id: str) -> Account | None:
        ...

    def get_by_email(self, email: str) -> Account | None:
        ...

    def list_all(self) -> list[Account]:
        ...

    def list_by_ids(self, account_ids: Iterable[str]) -> list[Account]:
        """Return the accounts that exist, in the order of account_ids."""
        ...

    def create(self, account: Account) -> str:
        """Store a new account under a store-assigned id. Returns the id."""
        ...

    def save(self, account: Account) -> None:
        """Replace the account stored at account.id (creating it if absent)."""
        ...

    def save_all(self, accounts: Iterable[Account]) -> None:
        """Replace several accounts in one atomic write."""
        ...


class RoomRepository(Protocol):
    def get_by_id(self, room_id: str) -> Room | None:
        ...

    def list_all(self) -> list[Room]:
        ...

    def list_accessible_by(self, account_id: str) -> list[Room]:
        """Return rooms whose access list contains account_id."""
        ...


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> str | None:
        """Return the stable account id for a valid token, None otherwise. Never raises."""
        ...
