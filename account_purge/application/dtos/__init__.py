"""Application DTOs (no Firestore or HTTP dependency)."""

from account_purge.application.dtos.account_deletion import (
    ArrayRemove,
    AuthSession,
    DeletionOutcome,
    FieldChange,
    Increment,
    MutationIntent,
    PurgePlan,
    PurgeReceipt,
    ReauthResult,
    VerifiedCredential,
)

__all__ = [
    "ArrayRemove",
    "AuthSession",
    "DeletionOutcome",
    "FieldChange",
    "Increment",
    "MutationIntent",
    "PurgePlan",
    "PurgeReceipt",
    "ReauthResult",
    "VerifiedCredential",
]
