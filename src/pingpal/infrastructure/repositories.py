"""Account and room repositories over a DocumentStore."""

from collections.abc import Iterable

from pingpal.application.ports import ROOMS, USERS, DocumentStore
from pingpal.domain import Account, Room


class DocumentAccountRepository:
    """Accounts live in the "users" collection, one document per account."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def get_by_id(self, account_id: str) -> Account | None:
        if not account_id:
            return None
        doc = self._store.get(USERS, account_id)
        if doc is None:
            return None
        return Account.from_document(doc, account_id)

    def get_by_email(self, email: str) -> Account | None:
        docs = self._store.query(USERS, "contact.email", "==", email)
        if not docs:
            return None
        return Account.from_document(docs[0], docs[0]["id"])

    def list_all(self) -> list[Account]:
        return [Account.from_document(doc, doc["id"]) for doc in self._store.list_collection(USERS)]

    def list_by_ids(self, account_ids: Iterable[str]) -> list[Account]:
        out = []
        for account_id in dict.fromkeys(account_ids):
            account = self.get_by_id(account_id)
            if account is not None:
                out.append(account)
        return out

    def create(self, account: Account) -> str:
        return self._store.add(USERS, account.to_document())

    def save(self, account: Account) -> None:
        self._store.put(USERS, account.id, account.to_document())

    def save_all(self, accounts: Iterable[Account]) -> None:
        self._store.put_many(USERS, {a.id: a.to_document() for a in accounts})


class DocumentRoomRepository:
    """Rooms live in the "rooms" collection."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def get_by_id(self, room_id: str) -> Room | None:
        if not room_id:
            return None
        doc = self._store.get(ROOMS, room_id)
        if doc is None:
            return None
        return Room.from_document(doc, room_id)

    def list_all(self) -> list[Room]:
        return [Room.from_document(doc, doc["id"]) for doc in self._store.list_collection(ROOMS)]

    def list_accessible_by(self, account_id: str) -> list[Room]:
        docs = self._store.query(ROOMS, "access", "array-contains", account_id)
        return [Room.from_document(doc, doc["id"]) for doc in docs]
