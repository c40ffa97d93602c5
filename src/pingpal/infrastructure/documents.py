"""Document helpers shared by the store adapters: encoding and field matching."""

import json
from collections.abc import Mapping

from pingpal.application.ports import StoreError

QUERY_OPS = ("==", "array-contains")


def encode(doc: Mapping) -> str:
    """JSON body of a document, without its id."""
    body = {k: v for k, v in doc.items() if k != "id"}
    try:
        return json.dumps(body, sort_keys=True)
    except (TypeError, ValueError) as e:
        raise StoreError(f"Document is not JSON serializable: {e}") from e


def decode(doc_id: str, body: str) -> dict:
    doc = json.loads(body)
    doc["id"] = doc_id
    return doc


def lookup(doc: Mapping, path: str) -> object:
    """Value at a dotted path ("contact.email"), or None when any step is missing."""
    value: object = doc
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return None
        value = value[part]
    return value


def matches(doc: Mapping, field: str, op: str, value: object) -> bool:
    found = lookup(doc, field)
    if op == "==":
        return found == value
    if op == "array-contains":
        return isinstance(found, list) and value in found
    raise StoreError(f"Unsupported query operator: {op}")
