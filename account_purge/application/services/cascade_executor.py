"""Cascade executor: apply a purge plan as one or more atomic batches.

Batches are committed sequentially in plan order. A single batch commits or
fails as a unit; when the plan needs several batches, batches committed
before a failure stay committed and the failure reports how far it got.
"""

from __future__ import annotations

import logging

from account_purge.application.dtos.account_deletion import PurgePlan, PurgeReceipt
from account_purge.application.interfaces.services import (
    DocumentStoreError,
    IDocumentStore,
)
from account_purge.application.services.cascade_planner import (
    CascadeLayout,
    CascadePlanner,
)
from account_purge.core.config import FIRESTORE_MAX_BATCH_WRITES
from account_purge.domain.enums import MutationKind, PurgeStage
from account_purge.domain.exceptions import PartialFailureException
from account_purge.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class CascadeExecutor:
    """Plans and commits the data purge for an identity."""

    def __init__(
        self,
        store: IDocumentStore,
        layout: CascadeLayout | None = None,
        max_batch_writes: int = FIRESTORE_MAX_BATCH_WRITES,
    ) -> None:
        if not 1 <= max_batch_writes <= FIRESTORE_MAX_BATCH_WRITES:
            raise ValueError(f"max_batch_writes out of range: {max_batch_writes}")
        self._store = store
        self._planner = CascadePlanner(store, layout or CascadeLayout())
        self._max_batch_writes = max_batch_writes

    async def plan_account_purge(self, identity_id: str) -> PurgePlan:
        """Return the purge plan without writing anything (dry run)."""
        return await self._planner.plan(identity_id)

    async def purge_account_data(self, identity_id: str) -> PurgeReceipt:
        """Plan and commit every deletion and membership removal.

        Safe to repeat: a fully purged identity plans zero mutations and
        commits nothing.

        Raises:
            PartialFailureException: A query or commit failed.
        """
        plan = await self._planner.plan(identity_id)
        committed = await self.apply_plan(plan)
        return PurgeReceipt(
            identity_id=identity_id,
            mutations=len(plan),
            counts=plan.counts_by_stage(),
            batches_committed=committed,
            completed_at=utc_now(),
        )

    async def apply_plan(self, plan: PurgePlan) -> int:
        """Commit the plan in chunks; return the number of batches committed."""
        chunks = plan.chunks(self._max_batch_writes)
        for index, chunk in enumerate(chunks):
            batch = self._store.open_batch()
            for intent in chunk:
                if intent.kind is MutationKind.DELETE:
                    batch.stage_delete(intent.path)
                else:
                    batch.stage_field_update(intent.path, list(intent.changes))
            try:
                await batch.commit()
            except DocumentStoreError as e:
                logger.error(
                    "Purge commit failed for %s at batch %s/%s: %s",
                    plan.identity_id,
                    index + 1,
                    len(chunks),
                    e,
                )
                raise PartialFailureException(
                    PurgeStage.COMMIT.value,
                    batches_committed=index,
                    batches_total=len(chunks),
                    reason=str(e),
                ) from e
            logger.info(
                "Committed purge batch %s/%s for %s (%s write(s))",
                index + 1,
                len(chunks),
                plan.identity_id,
                len(chunk),
            )
        return len(chunks)
