"""Tests for the presence hub and the per-user progress dispatcher."""

import asyncio

import pytest

from lingo_quest.learning.adaptive import AdaptiveDifficultyEngine
from lingo_quest.models.session import ActivityReport, SessionType
from lingo_quest.realtime.dispatcher import ProgressDispatcher
from lingo_quest.realtime.presence import PresenceHub
from lingo_quest.storage.profile_store import InMemoryProfileStore


class FakeConnection:
    def __init__(self):
        self.sent: list[dict] = []

    async def send_json(self, data):
        self.sent.append(data)

    def types(self) -> list[str]:
        return [m["type"] for m in self.sent]


class BrokenConnection:
    async def send_json(self, data):
        raise RuntimeError("socket closed")


class TestPresenceHub:
    async def test_connect_announces_once(self):
        hub = PresenceHub()
        alice, bob, bob_tab = FakeConnection(), FakeConnection(), FakeConnection()
        await hub.connect("alice", alice)
        await hub.connect("bob", bob)
        await hub.connect("bob", bob_tab)

        assert hub.online_users() == ["alice", "bob"]
        assert alice.types() == ["presence_update"]
        assert alice.sent[0] == {"type": "presence_update", "user_id": "bob", "status": "online"}

    async def test_disconnect_last_connection(self):
        hub = PresenceHub()
        alice, bob = FakeConnection(), FakeConnection()
        await hub.connect("alice", alice)
        await hub.connect("bob", bob)
        await hub.join_room("cafe", "alice")
        await hub.join_room("cafe", "bob")

        await hub.disconnect("bob", bob)

        assert not hub.is_online("bob")
        assert hub.room_members("cafe") == ["alice"]
        assert alice.types()[-2:] == ["participant_left", "presence_update"]
        assert alice.sent[-1]["status"] == "offline"

    async def test_room_broadcast_reaches_members_only(self):
        hub = PresenceHub()
        alice, bob, carol = FakeConnection(), FakeConnection(), FakeConnection()
        for user_id, conn in (("alice", alice), ("bob", bob), ("carol", carol)):
            await hub.connect(user_id, conn)
        await hub.join_room("cafe", "alice")
        await hub.join_room("cafe", "bob")
        for conn in (alice, bob, carol):
            conn.sent.clear()

        await hub.broadcast("cafe", {"type": "room_message", "text": "hi"})
        await hub.broadcast("carol", {"type": "direct"})

        assert alice.types() == ["room_message"]
        assert bob.types() == ["room_message"]
        assert carol.types() == ["direct"]

    async def test_leaving_empty_room_removes_it(self):
        hub = PresenceHub()
        await hub.join_room("cafe", "alice")
        await hub.leave_room("cafe", "alice")
        assert hub.room_members("cafe") == []

    async def test_failed_send_is_contained(self):
        hub = PresenceHub()
        healthy = FakeConnection()
        await hub.connect("alice", BrokenConnection())
        await hub.connect("alice", healthy)

        await hub.send_to_user("alice", {"type": "ping"})

        assert healthy.types() == ["ping"]

    async def test_on_message_handlers(self):
        hub = PresenceHub()
        received = []

        async def handler(user_id, message):
            received.append((user_id, message["payload"]))

        hub.on_message("typing", handler)

        assert await hub.dispatch("alice", {"type": "typing", "payload": 1})
        assert not await hub.dispatch("alice", {"type": "unknown"})
        assert received == [("alice", 1)]


@pytest.fixture
def dispatcher(engine):
    return ProgressDispatcher(
        store=InMemoryProfileStore(),
        engine=engine,
        adaptive=AdaptiveDifficultyEngine(),
        hub=PresenceHub(),
    )


def _report(now, **kwargs) -> ActivityReport:
    return ActivityReport(
        session_type=SessionType.CONVERSATION,
        duration_minutes=10,
        accuracy_rate=80,
        engagement_score=80,
        timestamp=now,
        **kwargs,
    )


class TestProgressDispatcher:
    async def test_submit_persists_and_advises(self, dispatcher, now):
        outcome, adaptation = await dispatcher.submit("alice", _report(now))

        profile = dispatcher.store.load("alice")
        assert profile.total_xp == outcome.progress.xp_earned == 16
        assert len(dispatcher.store.recent_sessions("alice")) == 1
        assert adaptation.difficulty_adjustment == 0.0
        assert adaptation.motivation_message.startswith("👍 Good progress!")

    async def test_submit_notifies_clients(self, dispatcher, now):
        alice, bob = FakeConnection(), FakeConnection()
        await dispatcher.hub.connect("alice", alice)
        await dispatcher.hub.connect("bob", bob)
        bob.sent.clear()

        await dispatcher.submit("alice", _report(now))

        assert alice.types()[-1] == "learning_progress_updated"
        assert alice.sent[-1]["outcome"]["user_id"] == "alice"
        assert bob.types() == ["user_achievement"]
        assert bob.sent[0]["achievement"] == "First Words"

    async def test_updates_for_one_user_are_serialized(self, dispatcher, now):
        release = asyncio.Event()

        async def hold():
            async with dispatcher.user_lock("alice"):
                await release.wait()

        holder = asyncio.create_task(hold())
        await asyncio.sleep(0.01)
        task = asyncio.create_task(dispatcher.submit("alice", _report(now)))
        await asyncio.sleep(0.01)

        assert not task.done()
        assert dispatcher.store.load("alice").total_xp == 0

        release.set()
        await holder
        await task
        assert dispatcher.store.load("alice").total_xp == 16

    async def test_other_users_are_not_blocked(self, dispatcher, now):
        release = asyncio.Event()

        async def hold():
            async with dispatcher.user_lock("alice"):
                await release.wait()

        holder = asyncio.create_task(hold())
        await asyncio.sleep(0.01)

        await asyncio.wait_for(dispatcher.submit("bob", _report(now)), timeout=1)
        assert dispatcher.store.load("bob").total_xp == 16

        release.set()
        await holder

    async def test_idle_locks_are_dropped(self, dispatcher, now):
        release = asyncio.Event()

        async def hold():
            async with dispatcher.user_lock("alice"):
                await release.wait()

        holder = asyncio.create_task(hold())
        await asyncio.sleep(0.01)
        waiter = asyncio.create_task(dispatcher.submit("alice", _report(now)))
        await asyncio.sleep(0.01)
        assert dispatcher.locked_users == ["alice"]

        release.set()
        await holder
        await waiter
        await dispatcher.submit("bob", _report(now))

        assert dispatcher.locked_users == []

    async def test_lock_released_when_operation_fails(self, dispatcher):
        def boom(profile):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await dispatcher.run("alice", boom)

        assert dispatcher.locked_users == []
        assert await dispatcher.run("alice", lambda profile: profile.total_xp) == 0

    async def test_concurrent_submits_all_apply(self, dispatcher, now):
        await asyncio.gather(*(dispatcher.submit("alice", _report(now)) for _ in range(5)))

        profile = dispatcher.store.load("alice")
        assert profile.weekly_goals.completed_conversations == 5
        assert len(dispatcher.store.recent_sessions("alice")) == 5

    async def test_run_saves_result_of_operation(self, dispatcher):
        def add_xp(profile):
            profile.total_xp += 7
            return profile.total_xp

        assert await dispatcher.run("alice", add_xp) == 7
        assert await dispatcher.run("alice", add_xp) == 14
