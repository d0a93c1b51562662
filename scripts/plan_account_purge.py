"""Show (or commit) the data purge of one account.

Prints the per-stage mutation counts the deletion cascade would write for the
identity. With --execute the purge is committed in batches; the identity
itself is left alone (remove it from the Firebase console or let the user
retry the in-app deletion).

Usage:
    uv run python -m scripts.plan_account_purge <uid>
    uv run python -m scripts.plan_account_purge <uid> --execute
Requires FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from account_purge.application.services import CascadeExecutor, CascadeLayout
from account_purge.core.config import get_settings
from account_purge.domain.exceptions import PartialFailureException
from account_purge.infrastructure.firebase import (
    FirestoreDocumentStore,
    close_firebase,
    get_firestore_client,
    init_firebase,
)
from account_purge.shared.telemetry import setup_logging


async def run(uid: str, *, execute: bool) -> dict[str, Any]:
    """Plan the purge for uid; commit it when execute is True."""
    settings = get_settings()
    if not init_firebase(settings):
        print("Firestore not configured", file=sys.stderr)
        sys.exit(1)
    client = get_firestore_client()
    executor = CascadeExecutor(
        FirestoreDocumentStore(client),
        layout=CascadeLayout.from_settings(settings),
        max_batch_writes=settings.max_batch_writes,
    )
    summary: dict[str, Any] = {"uid": uid, "execute": execute}
    try:
        plan = await executor.plan_account_purge(uid)
        summary["mutations"] = len(plan)
        summary["counts"] = plan.counts_by_stage()
        summary["batches"] = len(plan.chunks(settings.max_batch_writes))
        if execute and len(plan):
            summary["batches_committed"] = await executor.apply_plan(plan)
    except PartialFailureException as e:
        summary["error"] = e.error_code
        summary.update(e.details)
    finally:
        await close_firebase()
    return summary


def main() -> None:
    parser = argparse.ArgumentParser(description="Plan or commit one account's data purge.")
    parser.add_argument("uid", help="Identity id (Firebase uid) whose data to purge")
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Commit the purge. Without this flag nothing is written.",
    )
    args = parser.parse_args()

    setup_logging()
    summary = asyncio.run(run(args.uid, execute=args.execute))
    print(json.dumps(summary, indent=2, sort_keys=True))
    if "error" in summary:
        sys.exit(2)


if __name__ == "__main__":
    main()
