"""Tests for the cascade planner (read-then-stage, nothing written)."""

import pytest

from account_purge.application.dtos.account_deletion import ArrayRemove, Increment
from account_purge.application.services.cascade_planner import (
    CascadeLayout,
    CascadePlanner,
    plan_direct_threads,
    plan_follow_requests,
    plan_group_memberships,
)
from account_purge.domain.enums import MutationKind, PurgeStage
from account_purge.domain.exceptions import PartialFailureException
from fakes import InMemoryDocumentStore


async def test_plan_covers_every_stage_in_order(store) -> None:
    plan = await CascadePlanner(store).plan("U1")

    stages = [intent.stage for intent in plan.intents]
    assert stages == sorted(stages, key=PurgeStage.planning_stages().index)
    assert plan.counts_by_stage() == {
        "profile": 1,
        "notifications": 2,
        "follow_requests": 1,
        "direct_threads": 4,
        "groups": 1,
    }
    assert store.calls["open_batch"] == 0
    assert store.calls["commit"] == 0


async def test_unrelated_documents_are_not_planned(store) -> None:
    plan = await CascadePlanner(store).plan("U1")
    paths = {intent.path for intent in plan.intents}
    assert not paths & {
        "users/U2",
        "personal_chats/T2",
        "personal_chats/T2/messages/m1",
        "groups/G2",
        "notifications/N3",
        "follow_requests/F2",
    }


async def test_thread_messages_precede_thread(store) -> None:
    intents = await plan_direct_threads(store, CascadeLayout(), "U1")
    assert [i.path for i in intents] == [
        "personal_chats/T1/messages/m1",
        "personal_chats/T1/messages/m2",
        "personal_chats/T1/messages/m3",
        "personal_chats/T1",
    ]
    assert all(i.kind is MutationKind.DELETE for i in intents)


async def test_follow_request_matching_both_sides_is_staged_once() -> None:
    store = InMemoryDocumentStore({"follow_requests/F9": {"fromId": "U1", "toId": "U1"}})
    intents = await plan_follow_requests(store, CascadeLayout(), "U1")
    assert [i.path for i in intents] == ["follow_requests/F9"]


async def test_incoming_follow_requests_are_planned() -> None:
    store = InMemoryDocumentStore({"follow_requests/F3": {"fromId": "U2", "toId": "U1"}})
    intents = await plan_follow_requests(store, CascadeLayout(), "U1")
    assert [i.path for i in intents] == ["follow_requests/F3"]


async def test_group_is_amended_not_deleted(store) -> None:
    intents = await plan_group_memberships(store, CascadeLayout(), "U1")
    assert len(intents) == 1
    intent = intents[0]
    assert intent.kind is MutationKind.FIELD_UPDATE
    assert intent.path == "groups/G1"
    assert intent.changes == (ArrayRemove("memberIds", "U1"), Increment("members", -1))


async def test_group_counters_absent_from_document_are_left_alone() -> None:
    store = InMemoryDocumentStore(
        {"groups/G3": {"memberIds": ["U1", "U2"], "memberCount": 2}}
    )
    intents = await plan_group_memberships(store, CascadeLayout(), "U1")
    assert intents[0].changes == (
        ArrayRemove("memberIds", "U1"),
        Increment("memberCount", -1),
    )


async def test_sent_group_messages_are_planned_before_group_update() -> None:
    store = InMemoryDocumentStore(
        {
            "groups/G1": {"memberIds": ["U1", "U2"], "members": 2},
            "groups/G1/messages/a": {"senderId": "U1"},
            "groups/G1/messages/b": {"senderId": "U2"},
        }
    )
    intents = await plan_group_memberships(store, CascadeLayout(), "U1")
    assert [(i.kind, i.path) for i in intents] == [
        (MutationKind.DELETE, "groups/G1/messages/a"),
        (MutationKind.FIELD_UPDATE, "groups/G1"),
    ]


async def test_group_messages_kept_when_disabled() -> None:
    store = InMemoryDocumentStore(
        {
            "groups/G1": {"memberIds": ["U1"], "members": 1},
            "groups/G1/messages/a": {"senderId": "U1"},
        }
    )
    layout = CascadeLayout(purge_group_messages=False)
    intents = await plan_group_memberships(store, layout, "U1")
    assert [i.path for i in intents] == ["groups/G1"]


async def test_missing_profile_is_not_planned() -> None:
    store = InMemoryDocumentStore({"notifications/N1": {"userId": "U1"}})
    plan = await CascadePlanner(store).plan("U1")
    assert [i.path for i in plan.intents] == ["notifications/N1"]


async def test_custom_layout_names_are_used() -> None:
    store = InMemoryDocumentStore(
        {"profiles/U1": {}, "alerts/A1": {"recipient": "U1"}}
    )
    layout = CascadeLayout(
        users="profiles", notifications="alerts", notification_recipient="recipient"
    )
    plan = await CascadePlanner(store, layout).plan("U1")
    assert [i.path for i in plan.intents] == ["profiles/U1", "alerts/A1"]


async def test_query_failure_reports_stage() -> None:
    store = InMemoryDocumentStore(
        {"users/U1": {}}, fail_query_on="personal_chats"
    )
    with pytest.raises(PartialFailureException) as exc_info:
        await CascadePlanner(store).plan("U1")
    assert exc_info.value.stage == "direct_threads"
    assert exc_info.value.details["batches_committed"] == 0
