"""Game profile model tracking gamification and learning progress."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from lingo_quest.models.goal import LearningGoal
from lingo_quest.models.quest import Quest
from lingo_quest.models.session import LearningLevel


class League(StrEnum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"


class Rarity(StrEnum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class PowerUpEffect(StrEnum):
    DOUBLE_XP = "double_xp"
    STREAK_FREEZE = "streak_freeze"
    MISTAKE_PROTECTION = "mistake_protection"
    HINT_BOOST = "hint_boost"
    TIME_EXTENSION = "time_extension"


class Badge(BaseModel):
    """Immutable badge awarded for a completed achievement."""

    model_config = {"frozen": True}

    id: str
    name: str
    description: str = ""
    icon: str
    category: str
    rarity: Rarity = Rarity.COMMON
    earned_at: datetime
    xp_reward: int = 0


class Achievement(BaseModel):
    id: str
    name: str
    description: str = ""
    category: str = "general"
    progress: int = 0
    target: int
    is_completed: bool = False
    completed_at: datetime | None = None
    reward_xp: int = 0
    tier: int = Field(default=1, ge=1, le=5)


class SkillScoreSet(BaseModel):
    """Per-skill scores (0-100 each)."""

    grammar: float = 50.0
    vocabulary: float = 50.0
    listening: float = 50.0
    speaking: float = 50.0
    reading: float = 50.0
    writing: float = 50.0

    @property
    def average(self) -> float:
        scores = self.model_dump()
        return sum(scores.values()) / len(scores)


class WeeklyGoals(BaseModel):
    target_minutes: float = 60.0
    achieved_minutes: float = 0.0
    target_conversations: int = 5
    completed_conversations: int = 0


class PowerUp(BaseModel):
    id: str
    name: str
    description: str = ""
    effect: PowerUpEffect
    duration_minutes: int | None = None
    uses_remaining: int = 1
    expires_at: datetime | None = None


class GameProfile(BaseModel):
    """Single per-user progression state, owned by the caller."""

    user_id: str
    username: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    level: int = Field(default=1, ge=1)
    total_xp: int = Field(default=0, ge=0)
    weekly_xp: int = Field(default=0, ge=0)
    monthly_xp: int = Field(default=0, ge=0)
    current_streak_days: int = Field(default=0, ge=0)
    longest_streak_days: int = Field(default=0, ge=0)
    last_activity: datetime | None = None
    league: League = League.BRONZE

    badges: list[Badge] = Field(default_factory=list)
    achievements: list[Achievement] = Field(default_factory=list)
    quests: list[Quest] = Field(default_factory=list)
    claimed_quest_ids: list[str] = Field(default_factory=list)
    power_ups: list[PowerUp] = Field(default_factory=list)

    learning_level: LearningLevel = LearningLevel.BEGINNER
    skill_scores: SkillScoreSet = Field(default_factory=SkillScoreSet)
    topics_mastered: list[str] = Field(default_factory=list)
    topics_in_progress: list[str] = Field(default_factory=list)
    weekly_goals: WeeklyGoals = Field(default_factory=WeeklyGoals)
    goals: list[LearningGoal] = Field(default_factory=list)

    def has_achievement(self, achievement_id: str) -> bool:
        return any(a.id == achievement_id for a in self.achievements)

    def find_quest(self, quest_id: str) -> Quest | None:
        for quest in self.quests:
            if quest.id == quest_id:
                return quest
        return None
