"""Infrastructure layer: concrete implementations of application ports."""

from pingpal.infrastructure.identity import JwtIdentityVerifier
from pingpal.infrastructure.memory_store import InMemoryDocumentStore
from pingpal.infrastructure.persistence.neo4j_store import (
    Neo4jDocumentStore,
    ensure_document_constraint,
)
from pingpal.infrastructure.phone import PhoneNormalizer
from pingpal.infrastructure.repositories import (
    DocumentAccountRepository,
    DocumentRoomRepository,
)

__all__ = [
    "DocumentAccountRepository",
    "DocumentRoomRepository",
    "InMemoryDocumentStore",
    "JwtIdentityVerifier",
    "Neo4jDocumentStore",
    "PhoneNormalizer",
    "ensure_document_constraint",
]
