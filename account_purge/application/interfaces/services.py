"""Collaborator interfaces (ports) for the account-deletion workflow.

Protocols define the contracts the identity provider, document store and
session cache adapters must fulfill (DIP). Adapters raise the port errors
below; the workflow stages remap them to the domain taxonomy.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from account_purge.application.dtos.account_deletion import (
        FieldChange,
        ReauthResult,
    )


class IdentityProviderError(Exception):
    """Failure reported by the identity provider.

    Attributes:
        code: Provider error code (e.g. INVALID_PASSWORD). Remapped through
            the explicit table in error_mapping, never shown to users.
    """

    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        super().__init__(message or code)


class DocumentStoreError(Exception):
    """Failure reported by the document store (query or commit)."""


class StoredDocument(Protocol):
    """Snapshot of a stored document."""

    id: str
    path: str

    def to_dict(self) -> dict[str, Any]:
        """Return the document fields."""


class IIdentityProvider(Protocol):
    """Protocol for the identity/credential provider."""

    async def reauthenticate(self, email: str, password: str) -> ReauthResult:
        """Re-prove the password; raise IdentityProviderError on failure."""

    async def delete_current_identity(self, id_token: str) -> None:
        """Delete the identity the (recently issued) token belongs to."""


class IWriteBatch(Protocol):
    """Protocol for an atomic set of writes; nothing is applied until commit."""

    def stage_delete(self, path: str) -> None:
        """Stage deletion of the document at path (absent documents are a no-op)."""

    def stage_field_update(self, path: str, changes: list[FieldChange]) -> None:
        """Stage field changes on an existing document."""

    async def commit(self) -> None:
        """Apply all staged writes atomically; raise DocumentStoreError on failure."""


class IDocumentStore(Protocol):
    """Protocol for the document store used by the cascade planner."""

    async def get(self, path: str) -> StoredDocument | None:
        """Return the document at path, or None if it does not exist."""

    def query(
        self, collection: str, field: str, op: str, value: Any
    ) -> AsyncIterator[StoredDocument]:
        """Yield every document in collection matching the single-field filter."""

    def list_documents(self, collection_path: str) -> AsyncIterator[StoredDocument]:
        """Yield every document in a (sub)collection."""

    def open_batch(self) -> IWriteBatch:
        """Return a new, empty write batch."""


class ISessionCache(Protocol):
    """Protocol for the caller's locally cached session state."""

    async def clear_all(self) -> None:
        """Remove all cached state for the session. Idempotent."""
