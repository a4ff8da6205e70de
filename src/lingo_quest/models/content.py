"""Personalized learning content models."""

from pydantic import BaseModel, Field


class RecommendedTopic(BaseModel):
    topic: str
    reason: str
    difficulty: int
    estimated_minutes: int = 15


class SkillFocusArea(BaseModel):
    skill: str
    current_level: int
    target_level: int
    recommended_exercises: list[str] = Field(default_factory=list)


class ConversationScenario(BaseModel):
    scenario: str
    difficulty: int
    skills_practiced: list[str] = Field(default_factory=list)
    description: str = ""


class PersonalizedContent(BaseModel):
    recommended_topics: list[RecommendedTopic] = Field(default_factory=list)
    skill_focus_areas: list[SkillFocusArea] = Field(default_factory=list)
    conversation_scenarios: list[ConversationScenario] = Field(default_factory=list)
