"""Firestore-backed document store (implements IDocumentStore for the cascade)."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

from account_purge.application.dtos.account_deletion import FieldChange
from account_purge.infrastructure.firebase._rest_client import (
    DocumentSnapshot,
    FirestoreRESTClient,
)
from account_purge.infrastructure.firebase._rest_encoding import (
    delete_write,
    transform_write,
)

logger = logging.getLogger(__name__)


class FirestoreWriteBatch:
    """Collects REST writes and commits them in one documents:commit call."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._writes: list[dict] = []

    def stage_delete(self, path: str) -> None:
        self._writes.append(delete_write(self._client.document_name(path)))

    def stage_field_update(self, path: str, changes: list[FieldChange]) -> None:
        if not changes:
            return
        self._writes.append(transform_write(self._client.document_name(path), changes))

    async def commit(self) -> None:
        """Commit staged writes atomically. Raises FirestoreError on rejection."""
        if not self._writes:
            return
        await self._client.commit(self._writes)
        logger.debug("Firestore commit applied %s write(s)", len(self._writes))
        self._writes = []


class FirestoreDocumentStore:
    """Document store over the Firestore REST client. Same contract as IDocumentStore."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client

    async def get(self, path: str) -> DocumentSnapshot | None:
        """Return the document at path, or None if it does not exist."""
        return await self._client.document(path).get()

    async def query(
        self, collection: str, field: str, op: str, value: Any
    ) -> AsyncIterator[DocumentSnapshot]:
        """Yield every document in collection where ``field op value`` (server-side, paged)."""
        async for snapshot in self._client.collection(collection).where(field, op, value).stream():
            yield snapshot

    async def list_documents(self, collection_path: str) -> AsyncIterator[DocumentSnapshot]:
        """Yield every document of a (sub)collection, following page tokens."""
        async for snapshot in self._client.collection(collection_path).stream():
            yield snapshot

    def open_batch(self) -> FirestoreWriteBatch:
        return FirestoreWriteBatch(self._client)
