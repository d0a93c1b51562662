"""Identity revoker and session teardown: the last, irreversible stage."""

from __future__ import annotations

import logging

from account_purge.application.dtos.account_deletion import (
    DeletionOutcome,
    PurgeReceipt,
    VerifiedCredential,
)
from account_purge.application.interfaces.services import (
    IdentityProviderError,
    IIdentityProvider,
    ISessionCache,
)
from account_purge.application.services.error_mapping import (
    classify_identity_error,
    normalize_provider_code,
)
from account_purge.domain.enums import DeletionStatus
from account_purge.domain.exceptions import RevocationFailedException

logger = logging.getLogger(__name__)

DELETED_MESSAGE = "Your account has been deleted."


class IdentityRevoker:
    """Deletes the identity after its data is gone, then clears the session."""

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        session_cache: ISessionCache,
        redirect_to: str = "/signup",
    ) -> None:
        self._identity_provider = identity_provider
        self._session_cache = session_cache
        self._redirect_to = redirect_to

    async def finalize_deletion(
        self, credential: VerifiedCredential, receipt: PurgeReceipt
    ) -> DeletionOutcome:
        """Delete the identity with the fresh token and tear down the session.

        Args:
            credential: Proof from the credential gate in this invocation.
            receipt: Receipt of the committed data purge for the same identity.

        Returns:
            DeletionOutcome pointing the caller at the logged-out entry point.

        Raises:
            RuntimeError: The receipt belongs to another identity.
            RevocationFailedException: The provider refused the deletion; data
                is already purged.
        """
        if receipt.identity_id != credential.uid:
            raise RuntimeError(
                f"Purge receipt for {receipt.identity_id} cannot revoke {credential.uid}"
            )

        try:
            await self._identity_provider.delete_current_identity(credential.id_token)
        except IdentityProviderError as e:
            code = normalize_provider_code(e.code)
            logger.error(
                "Identity revocation failed for %s after data purge: %s",
                credential.uid,
                code,
            )
            raise RevocationFailedException(
                credential.uid, reason=classify_identity_error(code).value
            ) from None
        logger.info("Identity %s deleted", credential.uid)

        await self.teardown_session()
        return DeletionOutcome(
            status=DeletionStatus.DELETED,
            redirect_to=self._redirect_to,
            message=DELETED_MESSAGE,
            receipt=receipt,
        )

    async def teardown_session(self) -> None:
        """Clear cached session state. Best-effort; never raises."""
        try:
            await self._session_cache.clear_all()
        except Exception:
            logger.exception("Session cache teardown failed; continuing")
