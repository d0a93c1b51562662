"""Cascade planner: discover every record that references an identity.

Each ``plan_*`` function is a read-then-stage step
``(store, layout, identity_id) -> list[MutationIntent]``; nothing is written
here. ``CascadePlanner.plan`` composes them in a fixed order and maps store
failures to PartialFailureException tagged with the stage that failed.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from account_purge.application.dtos.account_deletion import (
    ArrayRemove,
    Increment,
    MutationIntent,
    PurgePlan,
)
from account_purge.application.interfaces.services import (
    DocumentStoreError,
    IDocumentStore,
)
from account_purge.core.config import Settings
from account_purge.domain.enums import PurgeStage
from account_purge.domain.exceptions import PartialFailureException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CascadeLayout:
    """Collection and field names the cascade reads and writes."""

    users: str = "users"
    notifications: str = "notifications"
    follow_requests: str = "follow_requests"
    personal_chats: str = "personal_chats"
    groups: str = "groups"
    messages: str = "messages"
    notification_recipient: str = "userId"
    follow_from: str = "fromId"
    follow_to: str = "toId"
    chat_participants: str = "userIds"
    group_members: str = "memberIds"
    group_counters: tuple[str, ...] = ("members", "memberCount")
    message_sender: str = "senderId"
    purge_group_messages: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "CascadeLayout":
        return cls(
            users=settings.collection_users,
            notifications=settings.collection_notifications,
            follow_requests=settings.collection_follow_requests,
            personal_chats=settings.collection_personal_chats,
            groups=settings.collection_groups,
            messages=settings.subcollection_messages,
            notification_recipient=settings.field_notification_recipient,
            follow_from=settings.field_follow_from,
            follow_to=settings.field_follow_to,
            chat_participants=settings.field_chat_participants,
            group_members=settings.field_group_members,
            group_counters=tuple(settings.group_counter_fields),
            message_sender=settings.field_message_sender,
            purge_group_messages=settings.purge_group_messages,
        )


async def plan_profile(
    store: IDocumentStore, layout: CascadeLayout, identity_id: str
) -> list[MutationIntent]:
    """Stage deletion of the profile document if it still exists."""
    path = f"{layout.users}/{identity_id}"
    if await store.get(path) is None:
        return []
    return [MutationIntent.delete(path, PurgeStage.PROFILE)]


async def plan_notifications(
    store: IDocumentStore, layout: CascadeLayout, identity_id: str
) -> list[MutationIntent]:
    """Stage deletion of every notification addressed to the identity."""
    return [
        MutationIntent.delete(doc.path, PurgeStage.NOTIFICATIONS)
        async for doc in store.query(
            layout.notifications, layout.notification_recipient, "==", identity_id
        )
    ]


async def plan_follow_requests(
    store: IDocumentStore, layout: CascadeLayout, identity_id: str
) -> list[MutationIntent]:
    """Stage deletion of follow requests sent by or sent to the identity.

    Two independent queries; a document matching both is staged once.
    """
    seen: set[str] = set()
    intents: list[MutationIntent] = []
    for side in (layout.follow_from, layout.follow_to):
        async for doc in store.query(layout.follow_requests, side, "==", identity_id):
            if doc.path in seen:
                continue
            seen.add(doc.path)
            intents.append(MutationIntent.delete(doc.path, PurgeStage.FOLLOW_REQUESTS))
    return intents


async def plan_direct_threads(
    store: IDocumentStore, layout: CascadeLayout, identity_id: str
) -> list[MutationIntent]:
    """Stage deletion of every thread the identity participates in.

    All of a thread's messages are enumerated and staged before the thread
    itself, so a thread is never marked complete with messages left behind.
    """
    intents: list[MutationIntent] = []
    async for thread in store.query(
        layout.personal_chats, layout.chat_participants, "array-contains", identity_id
    ):
        messages = [
            MutationIntent.delete(msg.path, PurgeStage.DIRECT_THREADS)
            async for msg in store.list_documents(f"{thread.path}/{layout.messages}")
        ]
        intents.extend(messages)
        intents.append(MutationIntent.delete(thread.path, PurgeStage.DIRECT_THREADS))
        logger.debug(
            "Planned thread %s with %s message(s)", thread.path, len(messages)
        )
    return intents


async def plan_group_memberships(
    store: IDocumentStore, layout: CascadeLayout, identity_id: str
) -> list[MutationIntent]:
    """Stage removal of the identity from every group it belongs to.

    Groups are amended, never deleted: the id leaves the member array and
    each counter present on the document drops by one. With
    ``purge_group_messages`` the identity's sent group messages go too.
    """
    intents: list[MutationIntent] = []
    async for group in store.query(
        layout.groups, layout.group_members, "array-contains", identity_id
    ):
        if layout.purge_group_messages:
            async for msg in store.query(
                f"{group.path}/{layout.messages}",
                layout.message_sender,
                "==",
                identity_id,
            ):
                intents.append(MutationIntent.delete(msg.path, PurgeStage.GROUPS))
        data = group.to_dict()
        changes = [ArrayRemove(layout.group_members, identity_id)]
        changes.extend(
            Increment(counter, -1)
            for counter in layout.group_counters
            if isinstance(data.get(counter), int)
        )
        intents.append(
            MutationIntent.field_update(group.path, PurgeStage.GROUPS, *changes)
        )
    return intents


PlanStep = Callable[[IDocumentStore, CascadeLayout, str], Awaitable[list[MutationIntent]]]

DEFAULT_PLAN_STEPS: tuple[tuple[PurgeStage, PlanStep], ...] = (
    (PurgeStage.PROFILE, plan_profile),
    (PurgeStage.NOTIFICATIONS, plan_notifications),
    (PurgeStage.FOLLOW_REQUESTS, plan_follow_requests),
    (PurgeStage.DIRECT_THREADS, plan_direct_threads),
    (PurgeStage.GROUPS, plan_group_memberships),
)


@dataclass
class CascadePlanner:
    """Builds the ordered purge plan for an identity."""

    store: IDocumentStore
    layout: CascadeLayout = field(default_factory=CascadeLayout)
    steps: tuple[tuple[PurgeStage, PlanStep], ...] = DEFAULT_PLAN_STEPS

    async def plan(self, identity_id: str) -> PurgePlan:
        """Run every planning step in order and return the combined plan.

        Raises:
            PartialFailureException: A query failed; nothing has been written.
        """
        plan = PurgePlan(identity_id=identity_id)
        for stage, step in self.steps:
            try:
                plan.extend(await step(self.store, self.layout, identity_id))
            except DocumentStoreError as e:
                logger.error(
                    "Purge planning failed at %s for %s: %s", stage.value, identity_id, e
                )
                raise PartialFailureException(stage.value, reason=str(e)) from e
        logger.info(
            "Purge plan for %s: %s mutation(s) %s",
            identity_id,
            len(plan),
            plan.counts_by_stage(),
        )
        return plan
