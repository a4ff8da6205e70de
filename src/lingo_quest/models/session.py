"""Learning session data models."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from lingo_quest.errors import ValidationError


class SessionType(StrEnum):
    """Kinds of learning session a user can complete."""

    CONVERSATION = "conversation"
    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    PRONUNCIATION = "pronunciation"
    LISTENING = "listening"


class ActivityKind(StrEnum):
    """Activity kinds that can earn XP."""

    CONVERSATION = "conversation"
    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    PRONUNCIATION = "pronunciation"
    LISTENING = "listening"
    ACHIEVEMENT = "achievement"
    QUEST = "quest"


class LearningLevel(StrEnum):
    """Coarse proficiency band used for content selection."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @classmethod
    def from_skill_average(cls, average: float) -> "LearningLevel":
        """Determine learning level from the 0-100 average of skill scores."""
        if average >= 85:
            return cls.ADVANCED
        elif average >= 70:
            return cls.INTERMEDIATE
        else:
            return cls.BEGINNER


class ActivityReport(BaseModel):
    """Telemetry for one completed learning session (input only)."""

    session_type: SessionType
    duration_minutes: float | None = Field(default=None, ge=0)
    accuracy_rate: float | None = Field(default=None, ge=0, le=100)
    engagement_score: float | None = Field(default=None, ge=0, le=100)
    new_words_learned: int = Field(default=0, ge=0)
    mistakes_count: int = Field(default=0, ge=0)
    messages_sent: int = Field(default=0, ge=0)
    difficulty_level: int = Field(default=5, ge=1, le=10)
    topic: str | None = None
    timestamp: datetime = Field(default_factory=datetime.now)

    @field_validator("timestamp")
    @classmethod
    def to_local_naive(cls, value: datetime) -> datetime:
        """Offset-aware timestamps are stored as naive local time."""
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "ActivityReport":
        """Validate raw input, raising the domain ValidationError on bad data."""
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            raise ValidationError(
                f"Invalid activity report: {', '.join(fields)}"
            ) from e


class SessionPerformance(BaseModel):
    """Performance metrics recorded for a session."""

    accuracy_rate: float | None = None
    engagement_score: float | None = None
    completion_rate: float = 100.0
    mistakes_count: int = 0
    improvements_noted: list[str] = Field(default_factory=list)


class LearningSession(BaseModel):
    """A completed session as kept in the user's history."""

    session_id: str
    session_type: SessionType
    topic: str = "general"
    start_time: datetime
    end_time: datetime | None = None
    duration_minutes: float = 0.0
    difficulty_level: int = 5
    performance: SessionPerformance = Field(default_factory=SessionPerformance)
    xp_earned: int = 0
    achievements_unlocked: list[str] = Field(default_factory=list)

    @classmethod
    def from_report(
        cls,
        session_id: str,
        report: ActivityReport,
        xp_earned: int = 0,
        achievements_unlocked: list[str] | None = None,
    ) -> "LearningSession":
        return cls(
            session_id=session_id,
            session_type=report.session_type,
            topic=report.topic or "general",
            start_time=report.timestamp,
            duration_minutes=report.duration_minutes or 0.0,
            difficulty_level=report.difficulty_level,
            performance=SessionPerformance(
                accuracy_rate=report.accuracy_rate,
                engagement_score=report.engagement_score,
                mistakes_count=report.mistakes_count,
            ),
            xp_earned=xp_earned,
            achievements_unlocked=achievements_unlocked or [],
        )


class CompletedActivity(BaseModel):
    """An activity with its XP already computed, as seen by the progression engine."""

    kind: ActivityKind
    xp_earned: int = Field(ge=0)
    duration_minutes: float | None = None
    accuracy_rate: float | None = None
    new_words_learned: int = 0
    mistakes_count: int = 0

    @classmethod
    def from_report(cls, report: ActivityReport, xp_earned: int) -> "CompletedActivity":
        return cls(
            kind=ActivityKind(report.session_type.value),
            xp_earned=xp_earned,
            duration_minutes=report.duration_minutes,
            accuracy_rate=report.accuracy_rate,
            new_words_learned=report.new_words_learned,
            mistakes_count=report.mistakes_count,
        )
