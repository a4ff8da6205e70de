"""Rule-table driven achievement unlocking."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

import structlog

from lingo_quest.models.profile import Achievement, GameProfile
from lingo_quest.models.session import ActivityKind, CompletedActivity

logger = structlog.get_logger()

Predicate = Callable[[GameProfile, CompletedActivity], bool]


@dataclass(frozen=True)
class AchievementRule:
    """One unlockable achievement and the condition that grants it."""

    id: str
    name: str
    predicate: Predicate
    target: int
    reward_xp: int
    category: str = "general"
    tier: int = 1
    description: str = ""


DEFAULT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule(
        id="first_conversation",
        name="First Words",
        predicate=lambda profile, activity: activity.kind == ActivityKind.CONVERSATION,
        target=1,
        reward_xp=50,
        category="conversation",
        description="Complete your first conversation",
    ),
    AchievementRule(
        id="streak_week",
        name="Week Warrior",
        predicate=lambda profile, activity: profile.current_streak_days >= 7,
        target=7,
        reward_xp=200,
        category="streak",
        description="Practice seven days in a row",
    ),
    AchievementRule(
        id="accuracy_master",
        name="Accuracy Master",
        predicate=lambda profile, activity: (activity.accuracy_rate or 0) >= 95,
        target=95,
        reward_xp=150,
        category="accuracy",
        description="Reach 95% accuracy in a session",
    ),
    AchievementRule(
        id="word_collector",
        name="Word Collector",
        predicate=lambda profile, activity: activity.new_words_learned >= 20,
        target=20,
        reward_xp=100,
        category="vocabulary",
        description="Learn 20 new words in one session",
    ),
    AchievementRule(
        id="streak_month",
        name="Monthly Commitment",
        predicate=lambda profile, activity: profile.current_streak_days >= 30,
        target=30,
        reward_xp=500,
        category="streak",
        tier=3,
        description="Practice thirty days in a row",
    ),
    AchievementRule(
        id="thousand_points",
        name="Thousand Points",
        predicate=lambda profile, activity: profile.total_xp >= 1000,
        target=1000,
        reward_xp=100,
        tier=2,
        description="Earn 1000 XP in total",
    ),
)


class AchievementEngine:
    """Evaluates achievement rules against a profile and the latest activity.

    Args:
        rules: Rule table; defaults to the built-in rules.
    """

    def __init__(self, rules: Sequence[AchievementRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    def check(
        self,
        profile: GameProfile,
        activity: CompletedActivity,
        now: datetime | None = None,
    ) -> list[Achievement]:
        """Unlock every rule not yet earned whose predicate holds.

        Newly completed achievements are appended to ``profile.achievements``
        and returned. Already earned ids never fire again.
        """
        now = now or datetime.now()
        unlocked: list[Achievement] = []
        for rule in self.rules:
            if profile.has_achievement(rule.id):
                continue
            if not rule.predicate(profile, activity):
                continue
            achievement = Achievement(
                id=rule.id,
                name=rule.name,
                description=rule.description or f"Achievement: {rule.name}",
                category=rule.category,
                progress=rule.target,
                target=rule.target,
                is_completed=True,
                completed_at=now,
                reward_xp=rule.reward_xp,
                tier=rule.tier,
            )
            profile.achievements.append(achievement)
            unlocked.append(achievement)
            logger.info("achievement_unlocked", user_id=profile.user_id, achievement=rule.id)
        return unlocked
