"""DTOs for the account-deletion workflow (no dependency on Firestore types)."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from account_purge.domain.enums import DeletionStatus, MutationKind, PurgeStage


@dataclass(frozen=True)
class AuthSession:
    """Currently signed-in identity, taken from a verified ID token."""

    uid: str
    email: str | None
    id_token: str


@dataclass(frozen=True)
class ReauthResult:
    """Identity provider answer to a successful reauthentication."""

    uid: str
    id_token: str


@dataclass(frozen=True)
class VerifiedCredential:
    """Proof that the password was re-proven in this workflow invocation.

    Only the credential gate creates these. IdentityRevoker.finalize_deletion
    requires one; the purge stage takes just its uid.
    """

    uid: str
    email: str
    id_token: str
    verified_at: datetime


@dataclass(frozen=True)
class ArrayRemove:
    """Remove every occurrence of ``value`` from an array field."""

    field: str
    value: Any


@dataclass(frozen=True)
class Increment:
    """Add ``amount`` (may be negative) to a numeric field."""

    field: str
    amount: int


FieldChange = ArrayRemove | Increment


@dataclass(frozen=True)
class MutationIntent:
    """One write to stage in a batch.

    ``path`` is the document path relative to the database root
    (e.g. ``personal_chats/T1/messages/m1``).
    """

    kind: MutationKind
    path: str
    stage: PurgeStage
    changes: tuple[FieldChange, ...] = ()

    @classmethod
    def delete(cls, path: str, stage: PurgeStage) -> "MutationIntent":
        return cls(MutationKind.DELETE, path, stage)

    @classmethod
    def field_update(
        cls, path: str, stage: PurgeStage, *changes: FieldChange
    ) -> "MutationIntent":
        return cls(MutationKind.FIELD_UPDATE, path, stage, tuple(changes))


@dataclass
class PurgePlan:
    """Ordered mutation intents for one identity."""

    identity_id: str
    intents: list[MutationIntent] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.intents)

    def extend(self, intents: list[MutationIntent]) -> None:
        self.intents.extend(intents)

    def counts_by_stage(self) -> dict[str, int]:
        """Return number of intents per stage value (stages with none omitted)."""
        return dict(Counter(intent.stage.value for intent in self.intents))

    def chunks(self, size: int) -> list[list[MutationIntent]]:
        """Split intents in plan order into chunks of at most ``size``."""
        return [
            self.intents[i : i + size] for i in range(0, len(self.intents), size)
        ]


@dataclass(frozen=True)
class PurgeReceipt:
    """Result of a committed data purge; required to revoke the identity."""

    identity_id: str
    mutations: int
    counts: dict[str, int]
    batches_committed: int
    completed_at: datetime


@dataclass(frozen=True)
class DeletionOutcome:
    """Final result handed back to the caller after a successful deletion."""

    status: DeletionStatus
    redirect_to: str
    message: str
    receipt: PurgeReceipt
