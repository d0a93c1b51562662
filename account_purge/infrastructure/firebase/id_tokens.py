"""Firebase ID token verification (google-auth) into an AuthSession."""

from __future__ import annotations

import asyncio
import logging

from account_purge.application.dtos.account_deletion import AuthSession

logger = logging.getLogger(__name__)


def _verify(token: str, project_id: str) -> dict:
    from google.auth.transport.requests import Request
    from google.oauth2 import id_token

    return id_token.verify_firebase_token(token, Request(), audience=project_id)


async def verify_session_token(token: str, project_id: str) -> AuthSession | None:
    """Verify a Firebase ID token; return the session or None if invalid.

    Signature, expiry, issuer and audience are checked by google-auth in a
    worker thread (it fetches Google's public certificates).
    """
    try:
        claims = await asyncio.to_thread(_verify, token, project_id)
    except ValueError as e:
        logger.info("Rejected ID token: %s", e)
        return None
    uid = claims.get("user_id") or claims.get("sub")
    if not uid:
        return None
    return AuthSession(uid=uid, email=claims.get("email"), id_token=token)
