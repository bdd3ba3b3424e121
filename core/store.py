"""File-backed document store.

Each collection lives in ``<root>/data/<collection>.json`` as::

    {"documents": {"<id>": {...fields, "createdAt": ..., "updatedAt": ...}}}

Every write holds the collection lock from core.fileio for its whole
read-modify-write, so concurrent writers to different documents of the
same collection do not drop each other's changes. Writers to the same
document still see last-write-wins.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from core.fileio import locked_json, read_json
from core.workspace import collection_path, now_local

logger = logging.getLogger(__name__)


def _load(collection: str, root: Path | None) -> dict[str, dict[str, Any]]:
    data = read_json(collection_path(collection, root))
    docs = data.get("documents") or {}
    return docs if isinstance(docs, dict) else {}


@contextmanager
def _editing(collection: str, root: Path | None) -> Iterator[dict[str, dict[str, Any]]]:
    """Locked, mutable view of a collection's documents."""
    with locked_json(collection_path(collection, root)) as data:
        docs = data.get("documents")
        if not isinstance(docs, dict):
            docs = data["documents"] = {}
        yield docs


def _timestamp(root: Path | None) -> str:
    return now_local(root).isoformat(timespec="seconds")


def new_document_id() -> str:
    return secrets.token_hex(10)


def create_document(collection: str, data: dict[str, Any], root: Path | None = None) -> str:
    """Insert a new document and return its generated id."""
    now = _timestamp(root)
    doc = {k: v for k, v in data.items() if k != "id"}
    doc.update({"createdAt": now, "updatedAt": now})
    with _editing(collection, root) as docs:
        doc_id = new_document_id()
        while doc_id in docs:
            doc_id = new_document_id()
        docs[doc_id] = doc
    logger.debug("Created %s/%s", collection, doc_id)
    return doc_id


def set_document(collection: str, doc_id: str, data: dict[str, Any], root: Path | None = None) -> None:
    """Create or replace the document stored under *doc_id*."""
    now = _timestamp(root)
    doc = {k: v for k, v in data.items() if k != "id"}
    with _editing(collection, root) as docs:
        doc.update({"createdAt": docs.get(doc_id, {}).get("createdAt", now), "updatedAt": now})
        docs[doc_id] = doc


def get_document(collection: str, doc_id: str, root: Path | None = None) -> dict[str, Any] | None:
    """Return the document with its id merged in, or None."""
    doc = _load(collection, root).get(doc_id)
    if doc is None:
        return None
    return {"id": doc_id, **doc}


def query_documents(collection: str, root: Path | None = None, **equals: Any) -> list[dict[str, Any]]:
    """Return documents whose fields equal every keyword given."""
    result = []
    for doc_id, doc in _load(collection, root).items():
        if all(doc.get(k) == v for k, v in equals.items()):
            result.append({"id": doc_id, **doc})
    return result


def update_document(collection: str, doc_id: str, updates: dict[str, Any], root: Path | None = None) -> bool:
    """Merge *updates* into an existing document. Returns False if missing."""
    now = _timestamp(root)
    with _editing(collection, root) as docs:
        if doc_id not in docs:
            return False
        docs[doc_id].update({k: v for k, v in updates.items() if k not in ("id", "createdAt")})
        docs[doc_id]["updatedAt"] = now
    return True


def delete_document(collection: str, doc_id: str, root: Path | None = None) -> bool:
    with _editing(collection, root) as docs:
        if docs.pop(doc_id, None) is None:
            return False
    logger.debug("Deleted %s/%s", collection, doc_id)
    return True
