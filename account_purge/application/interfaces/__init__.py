"""Application interfaces (ports) for the deletion workflow collaborators."""

from account_purge.application.interfaces.services import (
    DocumentStoreError,
    IDocumentStore,
    IdentityProviderError,
    IIdentityProvider,
    ISessionCache,
    IWriteBatch,
    StoredDocument,
)

__all__ = [
    "DocumentStoreError",
    "IDocumentStore",
    "IIdentityProvider",
    "ISessionCache",
    "IWriteBatch",
    "IdentityProviderError",
    "StoredDocument",
]
