"""Conversation reply and performance assessment models."""

from pydantic import BaseModel, Field


class PerformanceMetrics(BaseModel):
    """Per-utterance assessment scores (0-100 each)."""

    accuracy: float = 50.0
    fluency: float = 50.0
    vocabulary: float = 50.0
    grammar: float = 50.0
    pronunciation: float = 50.0
    overall_score: float = 50.0

    def compute_overall(self) -> float:
        """Compute weighted overall score from components."""
        scores = self.model_dump()
        self.overall_score = round(
            sum(scores[key] * weight for key, weight in METRIC_WEIGHTS.items()), 1
        )
        return self.overall_score


METRIC_WEIGHTS: dict[str, float] = {
    "accuracy": 0.25,
    "fluency": 0.20,
    "vocabulary": 0.20,
    "grammar": 0.25,
    "pronunciation": 0.10,
}


class ConversationReply(BaseModel):
    """A tutor reply to one user message."""

    text: str
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    corrections: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    source: str = "mock"  # "openai" or "mock"


class ConversationContext(BaseModel):
    """What the conversation collaborators know about the learner."""

    user_id: str = "default"
    level: str = "beginner"
    topic: str | None = None
    difficulty_level: int = 5
    history: list[dict[str, str]] = Field(default_factory=list)
