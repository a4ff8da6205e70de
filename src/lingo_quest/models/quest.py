"""Quest and quest objective models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class QuestKind(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SPECIAL = "special"


class ObjectiveKind(StrEnum):
    CONVERSATION_MINUTES = "conversation_minutes"
    MESSAGES_SENT = "messages_sent"
    ACCURACY_RATE = "accuracy_rate"
    VOCABULARY_LEARNED = "vocabulary_learned"
    STREAK_MAINTAINED = "streak_maintained"
    WEEKLY_XP = "weekly_xp"


class QuestObjective(BaseModel):
    """A single measurable goal inside a quest."""

    id: str
    description: str = ""
    kind: ObjectiveKind
    target_value: float
    current_value: float = 0.0
    is_completed: bool = False

    @property
    def percent(self) -> float:
        """Completion percentage, clamped to 100."""
        if self.target_value <= 0:
            return 100.0
        return min(100.0, self.current_value / self.target_value * 100)


class Quest(BaseModel):
    """A time-boxed set of objectives with an XP reward."""

    id: str
    name: str
    description: str = ""
    kind: QuestKind
    objectives: list[QuestObjective] = Field(default_factory=list)
    reward_xp: int
    reward_items: list[str] = Field(default_factory=list)
    expires_at: datetime
    is_completed: bool = False
    is_claimed: bool = False
    progress_percent: int = 0

    def objective(self, objective_id: str) -> QuestObjective | None:
        for obj in self.objectives:
            if obj.id == objective_id:
                return obj
        return None

    def recompute_progress(self) -> None:
        """Derive objective completion, progress percent and quest completion."""
        for obj in self.objectives:
            obj.is_completed = obj.current_value >= obj.target_value
        if not self.objectives:
            self.progress_percent = 0
            self.is_completed = False
            return
        average = sum(obj.percent for obj in self.objectives) / len(self.objectives)
        self.progress_percent = min(100, int(average))
        self.is_completed = all(obj.is_completed for obj in self.objectives)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
