"""Serialized per-user progression updates."""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

import structlog

from lingo_quest.learning.adaptive import AdaptiveDifficultyEngine
from lingo_quest.models.profile import GameProfile
from lingo_quest.models.results import Adaptation, SessionOutcome
from lingo_quest.models.session import ActivityReport
from lingo_quest.progression.engine import ProgressionEngine
from lingo_quest.realtime.presence import PresenceHub
from lingo_quest.storage.profile_store import ProfileStore

logger = structlog.get_logger()

T = TypeVar("T")


class ProgressDispatcher:
    """Runs profile read-modify-write cycles one at a time per user.

    Updates for different users proceed independently; persistence happens
    after the engine call returns, inside the user's lock.

    Args:
        store: Profile persistence.
        engine: Progression orchestrator.
        adaptive: Adaptive difficulty engine.
        hub: Presence hub for notifying connected clients; optional.
        history_window: Number of recent sessions fed to the adaptive engine.
    """

    def __init__(
        self,
        store: ProfileStore,
        engine: ProgressionEngine,
        adaptive: AdaptiveDifficultyEngine,
        hub: PresenceHub | None = None,
        history_window: int = 10,
    ):
        self.store = store
        self.engine = engine
        self.adaptive = adaptive
        self.hub = hub
        self.history_window = history_window
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @property
    def locked_users(self) -> list[str]:
        """Users with an update in flight or waiting."""
        return sorted(self._locks)

    @asynccontextmanager
    async def user_lock(self, user_id: str) -> AsyncIterator[None]:
        """Hold the user's lock; it is dropped once nobody holds or awaits it."""
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if not self._lock_users[user_id]:
                del self._lock_users[user_id]
                del self._locks[user_id]

    async def run(self, user_id: str, operation: Callable[[GameProfile], T]) -> T:
        """Load the profile, apply ``operation``, save, all under the user's lock."""
        async with self.user_lock(user_id):
            profile = self.store.load(user_id)
            result = operation(profile)
            self.store.save(profile)
            return result

    async def read(self, user_id: str) -> GameProfile:
        async with self.user_lock(user_id):
            return self.store.load(user_id)

    async def submit(
        self, user_id: str, report: ActivityReport
    ) -> tuple[SessionOutcome, Adaptation]:
        """Record a session report and return its outcome and next-session advice."""
        async with self.user_lock(user_id):
            profile = self.store.load(user_id)
            outcome, session = self.engine.record_session(profile, report)
            self.store.save(profile)
            self.store.append_session(user_id, session)
            recent = self.store.recent_sessions(user_id, self.history_window)
            adaptation = self.adaptive.analyze_and_adapt(recent, profile)

        await self._notify(outcome, adaptation)
        return outcome, adaptation

    async def _notify(self, outcome: SessionOutcome, adaptation: Adaptation) -> None:
        if self.hub is None:
            return
        await self.hub.send_to_user(
            outcome.user_id,
            {
                "type": "learning_progress_updated",
                "outcome": outcome.model_dump(mode="json"),
                "adaptation": adaptation.model_dump(mode="json"),
            },
        )
        for achievement in outcome.progress.new_achievements:
            await self.hub.broadcast_all(
                {
                    "type": "user_achievement",
                    "user_id": outcome.user_id,
                    "achievement": achievement.name,
                },
                exclude=outcome.user_id,
            )
