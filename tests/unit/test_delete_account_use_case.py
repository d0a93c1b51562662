"""End-to-end tests for DeleteAccountUseCase with in-memory collaborators."""

from unittest.mock import AsyncMock

import pytest

from account_purge.application.services import (
    CascadeExecutor,
    CredentialGate,
    IdentityRevoker,
)
from account_purge.application.use_cases import DeleteAccountUseCase
from account_purge.domain.exceptions import (
    InvalidCredentialException,
    NotAuthenticatedException,
    PartialFailureException,
    RevocationFailedException,
    StaleSessionException,
)
from fakes import (
    FakeIdentityProvider,
    FakeSessionCache,
    InMemoryDocumentStore,
    scenario_documents,
)


def _use_case(store, provider, cache) -> DeleteAccountUseCase:
    return DeleteAccountUseCase(
        CredentialGate(provider),
        CascadeExecutor(store),
        IdentityRevoker(provider, cache),
    )


async def test_account_with_thread_group_notifications_and_follow_request(
    session, store, identity_provider, session_cache
) -> None:
    outcome = await _use_case(store, identity_provider, session_cache).execute(
        session, "correct-horse"
    )

    assert outcome.status.value == "deleted"
    assert outcome.redirect_to == "/signup"
    for gone in (
        "personal_chats/T1",
        "personal_chats/T1/messages/m1",
        "personal_chats/T1/messages/m2",
        "personal_chats/T1/messages/m3",
        "notifications/N1",
        "notifications/N2",
        "follow_requests/F1",
        "users/U1",
    ):
        assert gone not in store.docs
    assert store.docs["groups/G1"]["members"] == 9
    assert "U1" not in store.docs["groups/G1"]["memberIds"]
    assert session_cache.cleared == 1

    # The identity no longer authenticates.
    with pytest.raises(InvalidCredentialException):
        await CredentialGate(identity_provider).verify_recent_credential(
            session, "correct-horse"
        )


async def test_wrong_password_touches_nothing(session, store, identity_provider, session_cache) -> None:
    with pytest.raises(InvalidCredentialException):
        await _use_case(store, identity_provider, session_cache).execute(session, "nope")

    assert store.total_calls == 0
    assert store.docs == scenario_documents()
    assert not identity_provider.deleted
    assert session_cache.cleared == 0


async def test_stale_session_touches_nothing(session, store, session_cache) -> None:
    provider = FakeIdentityProvider(reauth_error="CREDENTIAL_TOO_OLD_LOGIN_AGAIN")
    with pytest.raises(StaleSessionException):
        await _use_case(store, provider, session_cache).execute(session, "correct-horse")
    assert store.total_calls == 0


async def test_signed_out_caller_is_refused(store, identity_provider, session_cache) -> None:
    with pytest.raises(NotAuthenticatedException):
        await _use_case(store, identity_provider, session_cache).execute(None, "correct-horse")
    assert store.total_calls == 0
    assert identity_provider.calls == []


async def test_commit_failure_keeps_identity(session, identity_provider, session_cache) -> None:
    store = InMemoryDocumentStore(scenario_documents(), fail_commit_at=0)
    with pytest.raises(PartialFailureException):
        await _use_case(store, identity_provider, session_cache).execute(
            session, "correct-horse"
        )

    assert not identity_provider.deleted
    assert ("delete_current_identity", "fresh-id-token") not in identity_provider.calls
    assert store.docs == scenario_documents()
    assert session_cache.cleared == 0


async def test_query_failure_keeps_identity(session, identity_provider, session_cache) -> None:
    store = InMemoryDocumentStore(scenario_documents(), fail_query_on="groups")
    with pytest.raises(PartialFailureException) as exc_info:
        await _use_case(store, identity_provider, session_cache).execute(
            session, "correct-horse"
        )
    assert exc_info.value.stage == "groups"
    assert store.calls["commit"] == 0
    assert not identity_provider.deleted


async def test_revocation_failure_after_purge(session, store, session_cache) -> None:
    provider = FakeIdentityProvider(delete_error="USER_NOT_FOUND")
    with pytest.raises(RevocationFailedException):
        await _use_case(store, provider, session_cache).execute(session, "correct-horse")

    assert "users/U1" not in store.docs
    assert session_cache.cleared == 0


async def test_retry_after_partial_failure_succeeds(session, identity_provider, session_cache) -> None:
    store = InMemoryDocumentStore(scenario_documents(), fail_commit_at=0)
    use_case = _use_case(store, identity_provider, session_cache)
    with pytest.raises(PartialFailureException):
        await use_case.execute(session, "correct-horse")

    outcome = await use_case.execute(session, "correct-horse")

    assert outcome.receipt.mutations == 9
    assert identity_provider.deleted


async def test_stages_run_in_order_and_stop_at_first_failure(session) -> None:
    """Revocation is never attempted when the purge raises."""
    gate = AsyncMock(spec=CredentialGate)
    executor = AsyncMock(spec=CascadeExecutor)
    revoker = AsyncMock(spec=IdentityRevoker)
    executor.purge_account_data.side_effect = PartialFailureException("commit", 0, 1)

    with pytest.raises(PartialFailureException):
        await DeleteAccountUseCase(gate, executor, revoker).execute(session, "pw")

    gate.verify_recent_credential.assert_awaited_once_with(session, "pw")
    executor.purge_account_data.assert_awaited_once()
    revoker.finalize_deletion.assert_not_awaited()
