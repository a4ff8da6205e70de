"""Typed result bundles returned by the progression and learning engines."""

from enum import StrEnum

from pydantic import BaseModel, Field

from lingo_quest.models.profile import Achievement, Badge, League, PowerUpEffect


class RewardType(StrEnum):
    XP = "xp"
    BADGE = "badge"
    ACHIEVEMENT = "achievement"
    ITEM = "item"
    BOOST = "boost"


class Reward(BaseModel):
    type: RewardType
    value: int | str
    description: str
    rarity: str | None = None


class ProgressResult(BaseModel):
    """Diff produced by one progress update."""

    xp_earned: int = 0
    new_achievements: list[Achievement] = Field(default_factory=list)
    new_badges: list[Badge] = Field(default_factory=list)
    level_up: bool = False
    new_level: int | None = None
    rewards: list[Reward] = Field(default_factory=list)


class LeagueStanding(BaseModel):
    """Advisory league position; applying it is up to the caller."""

    current_league: League
    xp_in_league: int
    xp_to_next_league: int
    next_league: League | None = None
    can_promote: bool = False
    can_demote: bool = False


class Adaptation(BaseModel):
    """Difficulty and content recommendation for the next session."""

    difficulty_adjustment: float = 0.0
    recommended_focus: list[str] = Field(default_factory=list)
    next_topics: list[str] = Field(default_factory=list)
    motivation_message: str = ""


class SessionOutcome(BaseModel):
    """Everything that changed after recording one learning session."""

    user_id: str
    session_id: str
    progress: ProgressResult
    streak_days: int
    completed_quest_ids: list[str] = Field(default_factory=list)
    league: LeagueStanding
    learning_level_changed: bool = False


class ClaimError(StrEnum):
    NOT_FOUND = "not_found"
    PRECONDITION_FAILED = "precondition_failed"


class ClaimOutcome(BaseModel):
    """Result of claiming a quest reward; failures are expected outcomes."""

    ok: bool
    quest_id: str
    error: ClaimError | None = None
    message: str = ""
    progress: ProgressResult | None = None
    items: list[str] = Field(default_factory=list)


class PowerUpActivation(BaseModel):
    power_up_id: str
    effect: PowerUpEffect
    duration_minutes: int | None = None
    uses_remaining: int
    message: str


class LeaderboardEntry(BaseModel):
    user_id: str
    username: str = ""
    xp: int = 0
    rank: int = 0
    league: League = League.BRONZE
    streak: int = 0


class LeaderboardPosition(BaseModel):
    position: int
    total_users: int
    nearby_users: list[LeaderboardEntry]
    user_entry: LeaderboardEntry
