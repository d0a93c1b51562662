"""Delete-account use case: credential gate, data purge, identity revocation.

The three stages run strictly in order. Each is a hard precondition for the
next, and the purge receipt is what allows revocation: an identity is never
deleted while its data may still exist.
"""

from __future__ import annotations

import logging

from account_purge.application.dtos.account_deletion import (
    AuthSession,
    DeletionOutcome,
)
from account_purge.application.services.cascade_executor import CascadeExecutor
from account_purge.application.services.credential_gate import CredentialGate
from account_purge.application.services.identity_revoker import IdentityRevoker
from account_purge.core.constants import (
    SPAN_FINALIZE,
    SPAN_PURGE_DATA,
    SPAN_VERIFY_CREDENTIAL,
)
from account_purge.domain.exceptions import PurgeException
from account_purge.shared.telemetry.tracing import TracedOperation, add_span_attributes

logger = logging.getLogger(__name__)


class DeleteAccountUseCase:
    """Irreversibly delete the signed-in account and everything that references it."""

    def __init__(
        self,
        gate: CredentialGate,
        executor: CascadeExecutor,
        revoker: IdentityRevoker,
    ) -> None:
        self._gate = gate
        self._executor = executor
        self._revoker = revoker

    async def execute(self, session: AuthSession | None, password: str) -> DeletionOutcome:
        """Run the deletion workflow once. Nothing is retried internally.

        Raises:
            NotAuthenticatedException, InvalidCredentialException,
            StaleSessionException: Gate refused; nothing was touched.
            PartialFailureException: Purge failed; identity still exists.
            RevocationFailedException: Data purged, identity still exists.
        """
        uid = session.uid if session else None
        logger.info("Account deletion requested for %s", uid)
        try:
            async with TracedOperation(SPAN_VERIFY_CREDENTIAL):
                credential = await self._gate.verify_recent_credential(session, password)

            async with TracedOperation(SPAN_PURGE_DATA, {"user_id": credential.uid}):
                receipt = await self._executor.purge_account_data(credential.uid)
                add_span_attributes(
                    mutations=receipt.mutations, batches=receipt.batches_committed
                )

            async with TracedOperation(SPAN_FINALIZE, {"user_id": credential.uid}):
                outcome = await self._revoker.finalize_deletion(credential, receipt)
        except PurgeException as e:
            logger.warning(
                "Account deletion for %s stopped: %s %s", uid, e.error_code, e.details
            )
            raise

        logger.info(
            "Account %s deleted (%s mutation(s) in %s batch(es))",
            credential.uid,
            receipt.mutations,
            receipt.batches_committed,
        )
        return outcome
