"""Learner-defined goal model."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class GoalType(StrEnum):
    SKILL_LEVEL = "skill_level"
    CONVERSATION_COUNT = "conversation_count"
    VOCABULARY_SIZE = "vocabulary_size"
    STREAK = "streak"
    CUSTOM = "custom"


class LearningGoal(BaseModel):
    id: str
    user_id: str
    title: str
    description: str = ""
    target_date: datetime
    goal_type: GoalType
    target_value: float = Field(gt=0)
    current_value: float = 0.0
    is_completed: bool = False
    reward_xp: int = Field(default=0, ge=0)
