"""In-memory fakes for the identity provider, document store and session cache.

The store keeps documents by path (``collection/doc/sub/doc``) and counts
every call so tests can assert that nothing touched it.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from account_purge.application.dtos.account_deletion import (
    ArrayRemove,
    FieldChange,
    Increment,
    ReauthResult,
)
from account_purge.application.interfaces.services import (
    DocumentStoreError,
    IdentityProviderError,
)


def _parent(path: str) -> str:
    return path.rsplit("/", 1)[0]


@dataclass
class FakeDocument:
    path: str
    data: dict[str, Any]

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[1]

    def to_dict(self) -> dict[str, Any]:
        return dict(self.data)


class InMemoryWriteBatch:
    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store
        self.writes: list[tuple[str, str, tuple[FieldChange, ...]]] = []

    def stage_delete(self, path: str) -> None:
        self.writes.append(("delete", path, ()))

    def stage_field_update(self, path: str, changes: list[FieldChange]) -> None:
        self.writes.append(("update", path, tuple(changes)))

    async def commit(self) -> None:
        self._store.apply(self.writes)


class InMemoryDocumentStore:
    """Document store fake with atomic batches.

    Args:
        docs: Initial documents by path.
        fail_commit_at: Zero-based commit attempt that raises DocumentStoreError.
        fail_query_on: Collection path whose queries raise DocumentStoreError.
    """

    def __init__(
        self,
        docs: dict[str, dict[str, Any]] | None = None,
        fail_commit_at: int | None = None,
        fail_query_on: str | None = None,
    ) -> None:
        self.docs = {path: dict(data) for path, data in (docs or {}).items()}
        self.fail_commit_at = fail_commit_at
        self.fail_query_on = fail_query_on
        self.calls: Counter[str] = Counter()
        self.commits: list[list[tuple[str, str, tuple[FieldChange, ...]]]] = []
        self._commit_attempts = 0

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    async def get(self, path: str) -> FakeDocument | None:
        self.calls["get"] += 1
        data = self.docs.get(path)
        return FakeDocument(path, data) if data is not None else None

    async def query(self, collection: str, field_name: str, op: str, value: Any):
        self.calls["query"] += 1
        if collection == self.fail_query_on:
            raise DocumentStoreError(f"query on {collection} failed")
        for path in sorted(self.docs):
            if _parent(path) != collection:
                continue
            actual = self.docs[path].get(field_name)
            if op == "==" and actual == value:
                yield FakeDocument(path, self.docs[path])
            elif op == "array-contains" and isinstance(actual, list) and value in actual:
                yield FakeDocument(path, self.docs[path])

    async def list_documents(self, collection_path: str):
        self.calls["list_documents"] += 1
        for path in sorted(self.docs):
            if _parent(path) == collection_path:
                yield FakeDocument(path, self.docs[path])

    def open_batch(self) -> InMemoryWriteBatch:
        self.calls["open_batch"] += 1
        return InMemoryWriteBatch(self)

    def apply(self, writes: list[tuple[str, str, tuple[FieldChange, ...]]]) -> None:
        """Apply writes all-or-nothing, like a store batch commit."""
        self.calls["commit"] += 1
        attempt = self._commit_attempts
        self._commit_attempts += 1
        if attempt == self.fail_commit_at:
            raise DocumentStoreError("commit rejected")
        for kind, path, _ in writes:
            if kind == "update" and path not in self.docs:
                raise DocumentStoreError(f"no document to update: {path}")
        for kind, path, changes in writes:
            if kind == "delete":
                self.docs.pop(path, None)
                continue
            data = self.docs[path]
            for change in changes:
                if isinstance(change, ArrayRemove):
                    data[change.field] = [
                        v for v in data.get(change.field, []) if v != change.value
                    ]
                elif isinstance(change, Increment):
                    data[change.field] = data.get(change.field, 0) + change.amount
        self.commits.append(list(writes))


@dataclass
class FakeIdentityProvider:
    """Identity provider fake holding a single account."""

    uid: str = "U1"
    email: str = "u1@example.com"
    password: str = "correct-horse"
    reauth_error: str | None = None
    delete_error: str | None = None
    reauth_uid: str | None = None
    deleted: bool = False
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def reauthenticate(self, email: str, password: str) -> ReauthResult:
        self.calls.append(("reauthenticate", email))
        if self.reauth_error:
            raise IdentityProviderError(self.reauth_error)
        if self.deleted or email != self.email:
            raise IdentityProviderError("EMAIL_NOT_FOUND")
        if password != self.password:
            raise IdentityProviderError("INVALID_LOGIN_CREDENTIALS")
        return ReauthResult(uid=self.reauth_uid or self.uid, id_token="fresh-id-token")

    async def delete_current_identity(self, id_token: str) -> None:
        self.calls.append(("delete_current_identity", id_token))
        if self.delete_error:
            raise IdentityProviderError(self.delete_error)
        self.deleted = True


@dataclass
class FakeSessionCache:
    fail: bool = False
    cleared: int = 0

    async def clear_all(self) -> None:
        if self.fail:
            raise RuntimeError("cache down")
        self.cleared += 1


def scenario_documents(uid: str = "U1") -> dict[str, dict[str, Any]]:
    """Documents for an account with one thread, one group, two notifications
    and one sent follow request, plus unrelated data that must survive."""
    return {
        f"users/{uid}": {"name": "User One", "email": "u1@example.com"},
        "users/U2": {"name": "User Two"},
        "personal_chats/T1": {"userIds": [uid, "U2"]},
        "personal_chats/T1/messages/m1": {"senderId": uid, "text": "hi"},
        "personal_chats/T1/messages/m2": {"senderId": "U2", "text": "hello"},
        "personal_chats/T1/messages/m3": {"senderId": uid, "text": "bye"},
        "personal_chats/T2": {"userIds": ["U2", "U3"]},
        "personal_chats/T2/messages/m1": {"senderId": "U3", "text": "x"},
        "groups/G1": {
            "name": "Group One",
            "memberIds": [uid, "U2", "U3", "U4", "U5", "U6", "U7", "U8", "U9", "U10"],
            "members": 10,
        },
        "groups/G2": {"name": "Group Two", "memberIds": ["U2"], "members": 1},
        "notifications/N1": {"userId": uid, "type": "like"},
        "notifications/N2": {"userId": uid, "type": "follow"},
        "notifications/N3": {"userId": "U2", "type": "like"},
        "follow_requests/F1": {"fromId": uid, "toId": "U2"},
        "follow_requests/F2": {"fromId": "U2", "toId": "U3"},
    }
