"""Firebase integration: Firestore REST client, document store, Identity Toolkit."""

from account_purge.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    get_project_id,
    init_firebase,
)
from account_purge.infrastructure.firebase.document_store import (
    FirestoreDocumentStore,
    FirestoreWriteBatch,
)
from account_purge.infrastructure.firebase.identity_toolkit import (
    FirebaseIdentityProvider,
)

__all__ = [
    "FirebaseIdentityProvider",
    "FirestoreDocumentStore",
    "FirestoreWriteBatch",
    "close_firebase",
    "get_firestore_client",
    "get_project_id",
    "init_firebase",
]
