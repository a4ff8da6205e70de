"""Tests for profile and session history persistence."""

from datetime import timedelta

import pytest

from lingo_quest.errors import ValidationError
from lingo_quest.models.profile import GameProfile
from lingo_quest.models.session import LearningSession, SessionType
from lingo_quest.storage.profile_store import (
    InMemoryProfileStore,
    JsonProfileStore,
    validate_user_id,
)


@pytest.fixture(params=["json", "memory"])
def store(request, tmp_path):
    if request.param == "json":
        return JsonProfileStore(tmp_path)
    return InMemoryProfileStore()


def _session(session_id, start) -> LearningSession:
    return LearningSession(
        session_id=session_id, session_type=SessionType.VOCABULARY, start_time=start
    )


class TestValidateUserId:
    def test_accepts_simple_ids(self):
        assert validate_user_id("user_01-a") == "user_01-a"

    @pytest.mark.parametrize("user_id", ["", "../etc/passwd", "a b", "x" * 65])
    def test_rejects_unsafe_ids(self, user_id):
        with pytest.raises(ValidationError):
            validate_user_id(user_id)


class TestProfiles:
    def test_load_new_user(self, store):
        profile = store.load("user_new")
        assert isinstance(profile, GameProfile)
        assert profile.user_id == "user_new"
        assert profile.total_xp == 0

    def test_save_and_load(self, store):
        profile = store.load("user_save")
        profile.total_xp = 420
        profile.topics_mastered = ["travel", "weather"]
        store.save(profile)

        loaded = store.load("user_save")
        assert loaded.total_xp == 420
        assert loaded.topics_mastered == ["travel", "weather"]

    def test_loaded_profile_is_a_copy(self, store):
        profile = store.load("user_copy")
        store.save(profile)
        profile.total_xp = 999
        assert store.load("user_copy").total_xp == 0

    def test_invalid_id_rejected(self, store):
        with pytest.raises(ValidationError):
            store.load("../escape")


class TestSessionHistory:
    def test_empty_history(self, store):
        assert store.recent_sessions("nobody") == []

    def test_recent_sessions_newest_first(self, store, now):
        for i in range(5):
            store.append_session("user_hist", _session(f"s{i}", now - timedelta(days=i)))

        recent = store.recent_sessions("user_hist", limit=3)

        assert [s.session_id for s in recent] == ["s0", "s1", "s2"]

    def test_histories_are_per_user(self, store, now):
        store.append_session("alice", _session("a1", now))
        store.append_session("bob", _session("b1", now))
        assert [s.session_id for s in store.recent_sessions("alice")] == ["a1"]


class TestJsonLayout:
    def test_files_written(self, tmp_path, now):
        store = JsonProfileStore(tmp_path)
        store.save(GameProfile(user_id="user_files"))
        store.append_session("user_files", _session("s1", now))

        assert [p.name for p in (tmp_path / "profiles").iterdir()] == ["user_files.json"]
        assert (tmp_path / "sessions" / "user_files.json").exists()


class TestListing:
    def test_full_history_without_limit(self, store, now):
        for i in range(12):
            store.append_session("user_all", _session(f"s{i}", now - timedelta(hours=i)))

        assert len(store.recent_sessions("user_all")) == 10
        assert len(store.recent_sessions("user_all", limit=None)) == 12

    def test_list_user_ids(self, store):
        assert store.list_user_ids() == []
        store.save(GameProfile(user_id="zed"))
        store.save(GameProfile(user_id="amy"))
        store.load("ghost")
        assert store.list_user_ids() == ["amy", "zed"]
