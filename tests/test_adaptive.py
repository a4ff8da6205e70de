"""Tests for adaptive difficulty and personalized content."""

from datetime import timedelta

from lingo_quest.learning.adaptive import WELCOME_MESSAGE, AdaptiveDifficultyEngine
from lingo_quest.models.session import (
    LearningLevel,
    LearningSession,
    SessionPerformance,
    SessionType,
)


def _session(
    start,
    accuracy=80.0,
    engagement=80.0,
    session_type=SessionType.CONVERSATION,
    topic="general",
) -> LearningSession:
    return LearningSession(
        session_id=f"s-{start.isoformat()}-{session_type}-{topic}",
        session_type=session_type,
        topic=topic,
        start_time=start,
        performance=SessionPerformance(accuracy_rate=accuracy, engagement_score=engagement),
    )


class TestAnalyzeAndAdapt:
    def test_no_history_returns_defaults(self, profile):
        adaptation = AdaptiveDifficultyEngine().analyze_and_adapt([], profile)

        assert adaptation.difficulty_adjustment == 0.0
        assert adaptation.recommended_focus == ["conversation", "vocabulary"]
        assert adaptation.next_topics == ["introductions", "daily_routines", "hobbies"]
        assert adaptation.motivation_message == WELCOME_MESSAGE
        assert WELCOME_MESSAGE == (
            "🌟 Welcome to your language learning journey! "
            "Start with basic conversations to build confidence."
        )

    def test_strong_sessions_raise_difficulty(self, profile, now):
        sessions = [_session(now - timedelta(days=d), 90, 85) for d in range(0, 6, 2)]

        adaptation = AdaptiveDifficultyEngine().analyze_and_adapt(sessions, profile)

        assert adaptation.difficulty_adjustment == 1.0
        assert adaptation.recommended_focus == []
        assert adaptation.motivation_message.startswith(
            "🌟 Outstanding performance! Your 90.0% accuracy"
        )

    def test_weak_sessions_lower_difficulty(self, profile, now):
        sessions = [_session(now - timedelta(days=d), 50, 80) for d in range(3)]
        adaptation = AdaptiveDifficultyEngine().analyze_and_adapt(sessions, profile)
        assert adaptation.difficulty_adjustment == -1.0
        assert adaptation.recommended_focus == ["conversation"]

    def test_unreported_accuracy_is_not_counted_as_zero(self, profile, now):
        sessions = [
            _session(
                now - timedelta(days=d),
                accuracy=None,
                engagement=90,
                session_type=SessionType.VOCABULARY,
            )
            for d in range(3)
        ]

        adaptation = AdaptiveDifficultyEngine().analyze_and_adapt(sessions, profile)

        assert adaptation.difficulty_adjustment == 0.0
        assert adaptation.recommended_focus == []
        assert adaptation.motivation_message.startswith("💪 Every step counts!")

    def test_only_window_counts(self, profile, now):
        old = [_session(now - timedelta(days=30 + d), 0, 0) for d in range(5)]
        recent = [_session(now - timedelta(days=d), 90, 90) for d in range(10)]

        adaptation = AdaptiveDifficultyEngine(window=10).analyze_and_adapt(old + recent, profile)

        assert adaptation.difficulty_adjustment == 1.0


class TestHelpers:
    def test_velocity_uses_at_least_one_day(self, now):
        sessions = [_session(now - timedelta(hours=h)) for h in range(5)]
        assert AdaptiveDifficultyEngine.learning_velocity(sessions) == 5.0

    def test_fast_learner_bonus(self):
        assert AdaptiveDifficultyEngine.difficulty_adjustment(80, 60, 3.0) == 0.5
        assert AdaptiveDifficultyEngine.difficulty_adjustment(90, 90, 3.0) == 1.5
        assert AdaptiveDifficultyEngine.difficulty_adjustment(70, 70, 1.0) == 0.0

    def test_averages_skip_missing_metrics(self, now):
        sessions = [_session(now, accuracy=None, engagement=None), _session(now, 90, 60)]
        assert AdaptiveDifficultyEngine.average_accuracy(sessions) == 90
        assert AdaptiveDifficultyEngine.average_engagement(sessions) == 60
        assert AdaptiveDifficultyEngine.average_accuracy(sessions[:1]) is None

    def test_missing_metrics_trigger_no_rule(self):
        adjustment = AdaptiveDifficultyEngine.difficulty_adjustment
        assert adjustment(None, 40, 1.0) == -1.0
        assert adjustment(95, None, 1.0) == 0.0
        assert adjustment(None, None, 3.0) == 0.0

    def test_weak_areas_ignore_unreported_accuracy(self, now):
        sessions = [
            _session(now, None, session_type=SessionType.GRAMMAR),
            _session(now, 50, session_type=SessionType.VOCABULARY),
        ]
        assert AdaptiveDifficultyEngine.weak_areas(sessions) == ["vocabulary"]

    def test_weak_areas_weakest_first(self, now):
        sessions = [
            _session(now, 80, session_type=SessionType.CONVERSATION),
            _session(now, 65, session_type=SessionType.VOCABULARY),
            _session(now, 40, session_type=SessionType.GRAMMAR),
            _session(now, 60, session_type=SessionType.GRAMMAR),
        ]
        assert AdaptiveDifficultyEngine.weak_areas(sessions) == ["grammar", "vocabulary"]

    def test_next_topics_skip_mastered_and_repeated(self, profile, now):
        profile.topics_mastered = ["introductions"]
        sessions = [_session(now - timedelta(hours=h), topic="hobbies") for h in range(3)]

        topics = AdaptiveDifficultyEngine.next_topics(sessions, profile)

        assert topics == ["daily_routines", "food_dining", "family_friends"]

    def test_next_topics_capped_at_five(self, profile):
        profile.learning_level = LearningLevel.ADVANCED
        assert len(AdaptiveDifficultyEngine.next_topics([], profile)) == 5

    def test_message_priority(self):
        message = AdaptiveDifficultyEngine.motivation_message
        assert message(75, 10, 5000).startswith("👍 Good progress!")
        assert message(50, 10, 5000).startswith("🔥 Amazing 10-day streak!")
        assert message(50, 2, 5000).startswith("🏆 Impressive 5000 XP")
        assert message(50, 2, 10).startswith("💪 Every step counts!")


class TestPersonalizedContent:
    def test_beginner_content(self, profile):
        content = AdaptiveDifficultyEngine().personalized_content(profile, ["hobbies"])

        topics = {t.topic: t for t in content.recommended_topics}
        assert len(topics) == 5
        assert topics["hobbies"].reason == "Matches your interests"
        assert topics["introductions"].reason == "Recommended for your level"
        assert topics["introductions"].difficulty == 1

        assert len(content.skill_focus_areas) == 6
        assert all(area.target_level == 70 for area in content.skill_focus_areas)

        assert [s.scenario for s in content.conversation_scenarios] == [
            "Coffee shop conversation"
        ]

    def test_strong_skills_leave_focus(self, profile):
        profile.skill_scores.grammar = 90
        content = AdaptiveDifficultyEngine().personalized_content(profile)
        assert "grammar" not in {area.skill for area in content.skill_focus_areas}
