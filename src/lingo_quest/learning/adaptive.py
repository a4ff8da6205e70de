"""Adaptive difficulty and content recommendation from recent sessions."""

from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence

from lingo_quest.learning.topics import (
    LEVEL_MAX_SCENARIO_DIFFICULTY,
    LEVEL_SKILL_TARGET,
    SCENARIOS,
    exercises_for_skill,
    topic_difficulty,
    topics_for_level,
)
from lingo_quest.models.content import (
    PersonalizedContent,
    RecommendedTopic,
    SkillFocusArea,
)
from lingo_quest.models.profile import GameProfile
from lingo_quest.models.results import Adaptation
from lingo_quest.models.session import LearningSession

DEFAULT_FOCUS = ["conversation", "vocabulary"]
DEFAULT_TOPICS = ["introductions", "daily_routines", "hobbies"]
WELCOME_MESSAGE = (
    "🌟 Welcome to your language learning journey! "
    "Start with basic conversations to build confidence."
)

WEAK_AREA_THRESHOLD = 70.0
TOPIC_REPEAT_LIMIT = 3
MAX_NEXT_TOPICS = 5
MAX_ADJUSTMENT = 2.0


def _mean(values: Iterable[float | None]) -> float | None:
    known = [v for v in values if v is not None]
    if not known:
        return None
    return sum(known) / len(known)


class AdaptiveDifficultyEngine:
    """Recommends difficulty, focus areas and topics from recent sessions.

    Pure read-and-recommend: neither the sessions nor the profile are
    modified.

    Args:
        window: Number of most recent sessions considered.
    """

    def __init__(self, window: int = 10):
        self.window = window

    def analyze_and_adapt(
        self, sessions: Sequence[LearningSession], profile: GameProfile
    ) -> Adaptation:
        recent = sorted(sessions, key=lambda s: s.start_time, reverse=True)[: self.window]
        if not recent:
            return Adaptation(
                difficulty_adjustment=0.0,
                recommended_focus=list(DEFAULT_FOCUS),
                next_topics=list(DEFAULT_TOPICS),
                motivation_message=WELCOME_MESSAGE,
            )

        avg_accuracy = self.average_accuracy(recent)
        avg_engagement = self.average_engagement(recent)
        velocity = self.learning_velocity(recent)

        return Adaptation(
            difficulty_adjustment=self.difficulty_adjustment(
                avg_accuracy, avg_engagement, velocity
            ),
            recommended_focus=self.weak_areas(recent),
            next_topics=self.next_topics(recent, profile),
            motivation_message=self.motivation_message(
                avg_accuracy, profile.current_streak_days, profile.total_xp
            ),
        )

    @staticmethod
    def average_accuracy(sessions: Sequence[LearningSession]) -> float | None:
        """Mean accuracy over sessions that reported it, None when none did."""
        return _mean(s.performance.accuracy_rate for s in sessions)

    @staticmethod
    def average_engagement(sessions: Sequence[LearningSession]) -> float | None:
        return _mean(s.performance.engagement_score for s in sessions)

    @staticmethod
    def learning_velocity(sessions: Sequence[LearningSession]) -> float:
        """Sessions per day across the window (span of at least one day)."""
        if not sessions:
            return 0.0
        times = [s.start_time for s in sessions]
        days = (max(times) - min(times)).total_seconds() / 86400
        return len(sessions) / max(1.0, days)

    @staticmethod
    def difficulty_adjustment(
        accuracy: float | None, engagement: float | None, velocity: float
    ) -> float:
        """Clamped difficulty step; an unreported metric triggers no rule."""
        known_accuracy = accuracy is not None
        known_engagement = engagement is not None
        adjustment = 0.0
        if known_accuracy and known_engagement and accuracy > 85 and engagement > 75:
            adjustment = 1.0
        elif (known_accuracy and accuracy < 60) or (known_engagement and engagement < 50):
            adjustment = -1.0
        if velocity > 2 and known_accuracy and accuracy > 75:
            adjustment += 0.5
        return max(-MAX_ADJUSTMENT, min(MAX_ADJUSTMENT, adjustment))

    @staticmethod
    def weak_areas(sessions: Sequence[LearningSession]) -> list[str]:
        """Session types averaging under 70% accuracy, weakest first."""
        by_type: dict[str, list[float]] = defaultdict(list)
        for session in sessions:
            if session.performance.accuracy_rate is None:
                continue
            by_type[session.session_type.value].append(session.performance.accuracy_rate)

        averages = [(skill, sum(scores) / len(scores)) for skill, scores in by_type.items()]
        weak = [(skill, avg) for skill, avg in averages if avg < WEAK_AREA_THRESHOLD]
        weak.sort(key=lambda item: item[1])
        return [skill for skill, _ in weak]

    @staticmethod
    def next_topics(sessions: Sequence[LearningSession], profile: GameProfile) -> list[str]:
        frequency = Counter(s.topic for s in sessions)
        suggestions = [
            topic
            for topic in topics_for_level(profile.learning_level)
            if topic not in profile.topics_mastered and frequency[topic] < TOPIC_REPEAT_LIMIT
        ]
        return suggestions[:MAX_NEXT_TOPICS]

    @staticmethod
    def motivation_message(accuracy: float | None, streak_days: int, xp_points: int) -> str:
        known = accuracy is not None
        if known and accuracy >= 85:
            return (
                f"🌟 Outstanding performance! Your {accuracy:.1f}% accuracy shows real "
                "mastery. Keep up the excellent work!"
            )
        elif known and accuracy >= 70:
            return (
                f"👍 Good progress! You're doing well with {accuracy:.1f}% accuracy. "
                "Push yourself a little more!"
            )
        elif streak_days >= 7:
            return (
                f"🔥 Amazing {streak_days}-day streak! Consistency is key to language "
                "learning. You're building great habits!"
            )
        elif xp_points >= 1000:
            return (
                f"🏆 Impressive {xp_points} XP earned! Your dedication is paying off. "
                "Every conversation makes you stronger!"
            )
        else:
            return (
                "💪 Every step counts! You're making progress. Remember, language "
                "learning is a journey, not a race."
            )

    def personalized_content(
        self, profile: GameProfile, interests: Sequence[str] = ()
    ) -> PersonalizedContent:
        """Topics, skill focus areas and scenarios suited to the learner's level."""
        level = profile.learning_level

        topics = [
            RecommendedTopic(
                topic=topic,
                reason=(
                    "Matches your interests" if topic in interests
                    else "Recommended for your level"
                ),
                difficulty=topic_difficulty(topic, level),
            )
            for topic in topics_for_level(level)
            if topic not in profile.topics_mastered
        ][:MAX_NEXT_TOPICS]

        target = LEVEL_SKILL_TARGET[level]
        focus = [
            SkillFocusArea(
                skill=skill,
                current_level=round(score),
                target_level=target,
                recommended_exercises=exercises_for_skill(skill),
            )
            for skill, score in profile.skill_scores.model_dump().items()
            if score < target
        ]

        max_difficulty = LEVEL_MAX_SCENARIO_DIFFICULTY[level]
        scenarios = [s for s in SCENARIOS if s.difficulty <= max_difficulty][:MAX_NEXT_TOPICS]

        return PersonalizedContent(
            recommended_topics=topics,
            skill_focus_areas=focus,
            conversation_scenarios=scenarios,
        )
