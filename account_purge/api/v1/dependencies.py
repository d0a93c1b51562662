"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the signed-in session and the delete-account
use case. The use case is built from infrastructure implementations here;
routes depend only on these dependencies, not on infra directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from account_purge.application.dtos.account_deletion import AuthSession
from account_purge.application.services import (
    CascadeExecutor,
    CascadeLayout,
    CredentialGate,
    IdentityRevoker,
)
from account_purge.application.use_cases import DeleteAccountUseCase
from account_purge.core.config import get_settings
from account_purge.infrastructure.cache import RedisSessionCache
from account_purge.infrastructure.firebase import (
    FirebaseIdentityProvider,
    FirestoreDocumentStore,
    get_firestore_client,
    get_project_id,
)
from account_purge.infrastructure.firebase.id_tokens import verify_session_token

_http_bearer = HTTPBearer(auto_error=False)


# ---- Auth (current session from Firebase ID token) ----


async def get_current_session(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> AuthSession | None:
    """Return the session from a valid Bearer ID token; else None.

    A missing session is not rejected here: the credential gate turns it into
    NOT_AUTHENTICATED so every refusal goes through the same error taxonomy.
    """
    if not credentials:
        return None
    project_id = get_project_id() or get_settings().firebase_project_id
    if not project_id:
        return None
    return await verify_session_token(credentials.credentials, project_id)


# ---- Use case ----


def get_delete_account_use_case(
    request: Request,
    session: Annotated[AuthSession | None, Depends(get_current_session)],
) -> DeleteAccountUseCase:
    """Delete-account use case wired to Firestore, Identity Toolkit and Redis."""
    settings = get_settings()
    client = get_firestore_client()
    if client is None or settings.firebase_web_api_key is None:
        raise HTTPException(status_code=503, detail="Account deletion is unavailable")

    http_client = getattr(request.app.state, "http_client", None)
    if http_client is None:
        raise HTTPException(status_code=503, detail="Account deletion is unavailable")
    identity_provider = FirebaseIdentityProvider(
        api_key=settings.firebase_web_api_key.get_secret_value(),
        http_client=http_client,
    )
    executor = CascadeExecutor(
        FirestoreDocumentStore(client),
        layout=CascadeLayout.from_settings(settings),
        max_batch_writes=settings.max_batch_writes,
    )
    session_cache = RedisSessionCache(
        getattr(request.app.state, "cache", None),
        uid=session.uid if session else "",
        prefix=settings.session_key_prefix,
    )
    revoker = IdentityRevoker(
        identity_provider,
        session_cache,
        redirect_to=settings.signup_redirect_path,
    )
    return DeleteAccountUseCase(CredentialGate(identity_provider), executor, revoker)
