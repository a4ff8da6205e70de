"""Profile and session history persistence (JSON + fcntl.flock + atomic write)."""

import fcntl
import json
import os
import re
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Protocol

from lingo_quest.errors import ValidationError
from lingo_quest.models.profile import GameProfile
from lingo_quest.models.session import LearningSession

_USER_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_user_id(user_id: str) -> str:
    if not _USER_ID_RE.match(user_id):
        raise ValidationError(f"Invalid user id: {user_id!r}")
    return user_id


class ProfileStore(Protocol):
    """Persistence collaborator injected into the application layer."""

    def load(self, user_id: str) -> GameProfile: ...

    def save(self, profile: GameProfile) -> None: ...

    def append_session(self, user_id: str, session: LearningSession) -> None: ...

    def recent_sessions(
        self, user_id: str, limit: int | None = 10
    ) -> list[LearningSession]: ...

    def list_user_ids(self) -> list[str]: ...


class InMemoryProfileStore:
    """Process-local store, used for tests and mock mode."""

    def __init__(self) -> None:
        self._profiles: dict[str, str] = {}
        self._sessions: dict[str, list[LearningSession]] = {}

    def load(self, user_id: str) -> GameProfile:
        validate_user_id(user_id)
        data = self._profiles.get(user_id)
        if data is None:
            return GameProfile(user_id=user_id)
        return GameProfile.model_validate_json(data)

    def save(self, profile: GameProfile) -> None:
        profile.updated_at = datetime.now()
        self._profiles[profile.user_id] = profile.model_dump_json()

    def append_session(self, user_id: str, session: LearningSession) -> None:
        self._sessions.setdefault(user_id, []).append(session.model_copy(deep=True))

    def recent_sessions(self, user_id: str, limit: int | None = 10) -> list[LearningSession]:
        """Most recent sessions newest-first; ``limit=None`` returns the whole history."""
        sessions = sorted(
            self._sessions.get(user_id, []), key=lambda s: s.start_time, reverse=True
        )
        return sessions[:limit]

    def list_user_ids(self) -> list[str]:
        return sorted(self._profiles)


class JsonProfileStore:
    """One JSON file per profile and one history file per user.

    Args:
        data_dir: Root directory; ``profiles/`` and ``sessions/`` are created below it.
    """

    def __init__(self, data_dir: Path):
        self.profiles_dir = data_dir / "profiles"
        self.sessions_dir = data_dir / "sessions"
        self.profiles_dir.mkdir(parents=True, exist_ok=True)
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

    def profile_path(self, user_id: str) -> Path:
        return self.profiles_dir / f"{validate_user_id(user_id)}.json"

    def history_path(self, user_id: str) -> Path:
        return self.sessions_dir / f"{validate_user_id(user_id)}.json"

    def load(self, user_id: str) -> GameProfile:
        path = self.profile_path(user_id)
        if not path.exists():
            return GameProfile(user_id=user_id)
        with open(path, encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            data = json.load(f)
            fcntl.flock(f, fcntl.LOCK_UN)
        return GameProfile.model_validate(data)

    def save(self, profile: GameProfile) -> None:
        path = self.profile_path(profile.user_id)
        profile.updated_at = datetime.now()
        _atomic_write(path, profile.model_dump(mode="json"))

    def append_session(self, user_id: str, session: LearningSession) -> None:
        history_path = self.history_path(user_id)
        lock_path = history_path.with_suffix(".lock")
        with open(lock_path, "w") as lock_file:
            fcntl.flock(lock_file, fcntl.LOCK_EX)
            data = _read_history(history_path)
            data["sessions"].append(session.model_dump(mode="json"))
            _atomic_write(history_path, data)

    def recent_sessions(self, user_id: str, limit: int | None = 10) -> list[LearningSession]:
        data = _read_history(self.history_path(user_id))
        sessions = [LearningSession.model_validate(s) for s in data["sessions"]]
        sessions.sort(key=lambda s: s.start_time, reverse=True)
        return sessions[:limit]

    def list_user_ids(self) -> list[str]:
        """Users with a saved profile."""
        return sorted(path.stem for path in self.profiles_dir.glob("*.json"))


def _read_history(path: Path) -> dict:
    if not path.exists():
        return {"sessions": []}
    return json.loads(path.read_text(encoding="utf-8"))


def _atomic_write(path: Path, data: dict) -> None:
    with tempfile.NamedTemporaryFile(
        "w", dir=path.parent, delete=False, suffix=".tmp", encoding="utf-8"
    ) as tmp:
        json.dump(data, tmp, indent=2)
    os.replace(tmp.name, path)
