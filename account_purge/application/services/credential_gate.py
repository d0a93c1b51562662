"""Credential gate: re-prove the password before any destructive action."""

from __future__ import annotations

import logging

from account_purge.application.dtos.account_deletion import (
    AuthSession,
    VerifiedCredential,
)
from account_purge.application.interfaces.services import (
    IdentityProviderError,
    IIdentityProvider,
)
from account_purge.application.services.error_mapping import (
    classify_identity_error,
    normalize_provider_code,
)
from account_purge.domain.enums import CredentialFailureKind
from account_purge.domain.exceptions import (
    InvalidCredentialException,
    NotAuthenticatedException,
    StaleSessionException,
)
from account_purge.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class CredentialGate:
    """Verifies that the caller just proved possession of the account password.

    Reauthentication is mandatory even with a valid session: the identity
    provider only accepts self-deletion from a freshly issued token.
    """

    def __init__(self, identity_provider: IIdentityProvider) -> None:
        self._identity_provider = identity_provider

    async def verify_recent_credential(
        self, session: AuthSession | None, password: str
    ) -> VerifiedCredential:
        """Reauthenticate the session's email with password.

        Args:
            session: Current session, or None when nobody is signed in.
            password: Plaintext password supplied in this interaction.

        Returns:
            VerifiedCredential carrying the fresh ID token.

        Raises:
            NotAuthenticatedException: No session, or the session has no email.
            InvalidCredentialException: Wrong password.
            StaleSessionException: Provider demands a fresh login.
        """
        if session is None or not session.email:
            raise NotAuthenticatedException()
        if not password:
            raise InvalidCredentialException("MISSING_PASSWORD")

        try:
            result = await self._identity_provider.reauthenticate(
                session.email, password
            )
        except IdentityProviderError as e:
            code = normalize_provider_code(e.code)
            kind = classify_identity_error(code)
            logger.info(
                "Reauthentication rejected for %s: %s (%s)", session.uid, code, kind.value
            )
            if kind is CredentialFailureKind.INVALID_CREDENTIAL:
                raise InvalidCredentialException(code) from None
            raise StaleSessionException(code) from None

        if result.uid != session.uid:
            logger.warning(
                "Reauthentication returned identity %s for session %s",
                result.uid,
                session.uid,
            )
            raise InvalidCredentialException("IDENTITY_MISMATCH")

        return VerifiedCredential(
            uid=session.uid,
            email=session.email,
            id_token=result.id_token,
            verified_at=utc_now(),
        )
