"""Learning progress updates: skill smoothing, weekly goals, levels, topics."""

import structlog

from lingo_quest.models.profile import GameProfile
from lingo_quest.models.session import ActivityReport, LearningLevel, SessionType

logger = structlog.get_logger()

SKILL_FOR_SESSION: dict[SessionType, str] = {
    SessionType.CONVERSATION: "speaking",
    SessionType.VOCABULARY: "vocabulary",
    SessionType.GRAMMAR: "grammar",
    SessionType.PRONUNCIATION: "speaking",
    SessionType.LISTENING: "listening",
}

SMOOTHING_WEIGHT = 0.2
MASTERY_ACCURACY = 85.0

_LEVEL_ORDER = [LearningLevel.BEGINNER, LearningLevel.INTERMEDIATE, LearningLevel.ADVANCED]


class LearningProgressTracker:
    """Applies one session to the learner's skill scores and content state."""

    def apply(self, profile: GameProfile, report: ActivityReport) -> bool:
        """Update the profile in place.

        Returns:
            True if the learning level was promoted.
        """
        self.update_skill_scores(profile, report)
        self.update_weekly_goals(profile, report)
        self.update_topics(profile, report)
        return self.check_level_progression(profile)

    @staticmethod
    def update_skill_scores(profile: GameProfile, report: ActivityReport) -> None:
        skill = SKILL_FOR_SESSION.get(report.session_type)
        if skill is None or report.accuracy_rate is None:
            return
        previous = getattr(profile.skill_scores, skill)
        smoothed = previous * (1 - SMOOTHING_WEIGHT) + report.accuracy_rate * SMOOTHING_WEIGHT
        setattr(profile.skill_scores, skill, max(0.0, min(100.0, smoothed)))

    @staticmethod
    def update_weekly_goals(profile: GameProfile, report: ActivityReport) -> None:
        profile.weekly_goals.achieved_minutes += report.duration_minutes or 0.0
        if report.session_type == SessionType.CONVERSATION:
            profile.weekly_goals.completed_conversations += 1

    @staticmethod
    def update_topics(profile: GameProfile, report: ActivityReport) -> None:
        topic = report.topic
        if not topic or topic in profile.topics_mastered:
            return
        if (report.accuracy_rate or 0.0) >= MASTERY_ACCURACY:
            profile.topics_mastered.append(topic)
            profile.topics_in_progress = [t for t in profile.topics_in_progress if t != topic]
        elif topic not in profile.topics_in_progress:
            profile.topics_in_progress.append(topic)

    @staticmethod
    def check_level_progression(profile: GameProfile) -> bool:
        """Promote the learning level one band at a time; never demotes."""
        suggested = LearningLevel.from_skill_average(profile.skill_scores.average)
        current = _LEVEL_ORDER.index(profile.learning_level)
        if _LEVEL_ORDER.index(suggested) <= current:
            return False
        profile.learning_level = _LEVEL_ORDER[current + 1]
        logger.info(
            "learning_level_changed",
            user_id=profile.user_id,
            new_level=profile.learning_level.value,
        )
        return True
