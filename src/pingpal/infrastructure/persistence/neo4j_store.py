"""Neo4j implementation of DocumentStore.
Graph: one (:Document {collection, id, body, stored_at}) node per document; body is the
JSON-encoded document. (collection, id) is unique, see ensure_document_constraint.
Field queries decode the collection and filter in Python.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone

from neo4j.exceptions import DriverError, Neo4jError

from pingpal.application.ports import StoreError
from pingpal.infrastructure.documents import decode, encode, matches

logger = logging.getLogger(__name__)

_CONSTRAINT_QUERY = """
CREATE CONSTRAINT document_key_unique IF NOT EXISTS
FOR (d:Document) REQUIRE (d.collection, d.id) IS UNIQUE
"""

_GET_QUERY = """
MATCH (d:Document {collection: $collection, id: $id})
RETURN d.body AS body
"""

_LIST_QUERY = """
MATCH (d:Document {collection: $collection})
RETURN d.id AS id, d.body AS body
ORDER BY d.stored_at, d.id
"""

_PUT_MANY_QUERY = """
UNWIND $docs AS doc
MERGE (d:Document {collection: $collection, id: doc.id})
ON CREATE SET d.stored_at = $stored_at
SET d.body = doc.body
"""

_CREATE_QUERY = """
CREATE (d:Document {collection: $collection, id: $id, body: $body, stored_at: $stored_at})
RETURN d.id AS id
"""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def ensure_document_constraint(driver) -> None:
    """Create unique constraint on Document(collection, id) if missing."""
    try:
        with driver.session() as session:
            session.run(_CONSTRAINT_QUERY)
    except (DriverError, Neo4jError) as e:
        raise StoreError(str(e)) from e


class Neo4jDocumentStore:
    """Stores documents as nodes. put_many runs in a single write transaction."""

    def __init__(self, driver: object) -> None:
        self._driver = driver

    def get(self, collection: str, doc_id: str) -> dict | None:
        try:
            with self._driver.session() as session:
                record = session.run(_GET_QUERY, collection=collection, id=doc_id).single()
        except (DriverError, Neo4jError) as e:
            raise StoreError(str(e)) from e
        if not record or record["body"] is None:
            return None
        return decode(doc_id, record["body"])

    def list_collection(self, collection: str) -> list[dict]:
        try:
            with self._driver.session() as session:
                result = session.run(_LIST_QUERY, collection=collection)
                rows = [(rec["id"], rec["body"]) for rec in result]
        except (DriverError, Neo4jError) as e:
            raise StoreError(str(e)) from e
        return [decode(doc_id, body) for doc_id, body in rows]

    def query(self, collection: str, field: str, op: str, value: object) -> list[dict]:
        docs = self.list_collection(collection)
        found = [doc for doc in docs if matches(doc, field, op, value)]
        logger.debug(
            "Query %s where %s %s %r: %d of %d", collection, field, op, value, len(found), len(docs)
        )
        return found

    def put(self, collection: str, doc_id: str, doc: Mapping) -> None:
        self.put_many(collection, {doc_id: doc})

    def add(self, collection: str, doc: Mapping) -> str:
        body = encode(doc)
        doc_id = str(uuid.uuid4())
        try:
            with self._driver.session() as session:
                session.run(
                    _CREATE_QUERY,
                    collection=collection,
                    id=doc_id,
                    body=body,
                    stored_at=_now_iso(),
                ).consume()
        except (DriverError, Neo4jError) as e:
            raise StoreError(str(e)) from e
        return doc_id

    def put_many(self, collection: str, docs: Mapping[str, Mapping]) -> None:
        rows = [{"id": doc_id, "body": encode(doc)} for doc_id, doc in docs.items()]
        if not rows:
            return
        stored_at = _now_iso()

        def _write(tx):
            tx.run(_PUT_MANY_QUERY, collection=collection, docs=rows, stored_at=stored_at).consume()

        try:
            with self._driver.session() as session:
                session.execute_write(_write)
        except (DriverError, Neo4jError) as e:
            logger.error("Write of %d %s documents failed: %s", len(rows), collection, e)
            raise StoreError(str(e)) from e
