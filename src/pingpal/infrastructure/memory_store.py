"""In-memory implementation of DocumentStore (no DB)."""

import uuid
from collections.abc import Mapping

from pingpal.infrastructure.documents import decode, encode, matches


class InMemoryDocumentStore:
    """Keeps encoded documents per collection. Order preserved by insertion.
    Bodies are stored as JSON so callers never share mutable state with the store.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, str]] = {}

    def _collection(self, name: str) -> dict[str, str]:
        return self._collections.setdefault(name, {})

    def get(self, collection: str, doc_id: str) -> dict | None:
        body = self._collection(collection).get(doc_id)
        if body is None:
            return None
        return decode(doc_id, body)

    def list_collection(self, collection: str) -> list[dict]:
        return [
            decode(doc_id, body) for doc_id, body in self._collection(collection).items()
        ]

    def query(self, collection: str, field: str, op: str, value: object) -> list[dict]:
        return [doc for doc in self.list_collection(collection) if matches(doc, field, op, value)]

    def put(self, collection: str, doc_id: str, doc: Mapping) -> None:
        self._collection(collection)[doc_id] = encode(doc)

    def add(self, collection: str, doc: Mapping) -> str:
        doc_id = str(uuid.uuid4())
        self.put(collection, doc_id, doc)
        return doc_id

    def put_many(self, collection: str, docs: Mapping[str, Mapping]) -> None:
        # Encode everything first so a bad document leaves the collection untouched.
        encoded = {doc_id: encode(doc) for doc_id, doc in docs.items()}
        self._collection(collection).update(encoded)
