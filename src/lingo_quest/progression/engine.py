"""Progression orchestrator: applies activities to a caller-owned profile."""

import uuid
from collections.abc import Callable
from datetime import datetime

import structlog

from lingo_quest.errors import PreconditionError
from lingo_quest.learning.progress import LearningProgressTracker
from lingo_quest.models.profile import GameProfile, WeeklyGoals
from lingo_quest.models.quest import Quest
from lingo_quest.models.results import (
    ClaimError,
    ClaimOutcome,
    LeagueStanding,
    PowerUpActivation,
    ProgressResult,
    Reward,
    RewardType,
    SessionOutcome,
)
from lingo_quest.models.session import (
    ActivityKind,
    ActivityReport,
    CompletedActivity,
    LearningSession,
)
from lingo_quest.progression.achievements import AchievementEngine
from lingo_quest.progression.badges import BadgeEngine
from lingo_quest.progression.league import LeagueEngine
from lingo_quest.progression.leveling import level_for_xp
from lingo_quest.progression.messages import Selector, make_selector, motivational_message
from lingo_quest.progression.power_ups import activate_power_up, grant_item
from lingo_quest.progression.quests import QuestEngine
from lingo_quest.progression.rewards import calculate_xp_reward
from lingo_quest.progression.streak import StreakTracker

logger = structlog.get_logger()

LEVEL_UP_BONUS_PER_LEVEL = 10


class ProgressionEngine:
    """Coordinates the gamification engines for one profile at a time.

    The engine holds no profile state: every call takes the caller's
    profile, mutates it in place and returns a typed diff.

    Args:
        achievements: Achievement rule engine.
        badges: Badge engine.
        quests: Quest engine.
        league: League engine.
        streak: Streak tracker.
        learning: Learning progress tracker.
        selector: Picks one flavor message from a list.
        clock: Source of the current time.
    """

    def __init__(
        self,
        achievements: AchievementEngine | None = None,
        badges: BadgeEngine | None = None,
        quests: QuestEngine | None = None,
        league: LeagueEngine | None = None,
        streak: StreakTracker | None = None,
        learning: LearningProgressTracker | None = None,
        selector: Selector | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.achievements = achievements or AchievementEngine()
        self.badges = badges or BadgeEngine()
        self.quests = quests or QuestEngine()
        self.league = league or LeagueEngine()
        self.streak = streak or StreakTracker()
        self.learning = learning or LearningProgressTracker()
        self.selector = selector or make_selector()
        self.clock = clock

    def update_progress(
        self,
        profile: GameProfile,
        activity: CompletedActivity,
        now: datetime | None = None,
    ) -> ProgressResult:
        """Credit XP, resolve level-ups, then unlock achievements and badges.

        Level-ups are resolved in a loop: each bonus (new level × 10) is
        credited to total XP and may itself trigger a further level-up.
        """
        now = now or self.clock()
        result = ProgressResult(xp_earned=activity.xp_earned)

        profile.total_xp += activity.xp_earned
        profile.weekly_xp += activity.xp_earned
        profile.monthly_xp += activity.xp_earned

        while (new_level := level_for_xp(profile.total_xp)) > profile.level:
            profile.level = new_level
            bonus = new_level * LEVEL_UP_BONUS_PER_LEVEL
            profile.total_xp += bonus
            result.level_up = True
            result.new_level = new_level
            result.rewards.append(
                Reward(type=RewardType.XP, value=bonus, description=f"Level {new_level} bonus!")
            )
            logger.info("level_up", user_id=profile.user_id, new_level=new_level, bonus=bonus)

        result.new_achievements = self.achievements.check(profile, activity, now)
        result.new_badges = self.badges.award_for(profile, result.new_achievements, now)
        for badge in result.new_badges:
            result.rewards.append(
                Reward(
                    type=RewardType.BADGE,
                    value=badge.id,
                    description=f"Earned {badge.name} badge!",
                    rarity=badge.rarity.value,
                )
            )
        return result

    def record_session(
        self,
        profile: GameProfile,
        report: ActivityReport,
        session_id: str | None = None,
        now: datetime | None = None,
    ) -> tuple[SessionOutcome, LearningSession]:
        """Apply one completed session to the profile.

        Returns:
            The outcome bundle and the history record the caller should persist.
        """
        now = now or self.clock()
        session_id = session_id or str(uuid.uuid4())

        self.quests.refresh(profile, now)
        streak_days = self.streak.update(profile, report.timestamp, now)

        xp = calculate_xp_reward(
            ActivityKind(report.session_type.value),
            duration_minutes=report.duration_minutes,
            accuracy_rate=report.accuracy_rate,
            difficulty_level=report.difficulty_level,
            streak_eligible=True,
            current_streak_days=streak_days,
        )
        progress = self.update_progress(profile, CompletedActivity.from_report(report, xp), now)
        completed_quests = self.quests.track_activity(profile, report)
        level_changed = self.learning.apply(profile, report)
        profile.updated_at = now

        logger.info(
            "session_recorded",
            user_id=profile.user_id,
            session_id=session_id,
            session_type=report.session_type.value,
            xp_earned=xp,
            streak_days=streak_days,
        )

        outcome = SessionOutcome(
            user_id=profile.user_id,
            session_id=session_id,
            progress=progress,
            streak_days=streak_days,
            completed_quest_ids=completed_quests,
            league=self.league.standing(profile),
            learning_level_changed=level_changed,
        )
        session = LearningSession.from_report(
            session_id,
            report,
            xp_earned=xp,
            achievements_unlocked=[a.id for a in progress.new_achievements],
        )
        return outcome, session

    def refresh_quests(self, profile: GameProfile, now: datetime | None = None) -> list[Quest]:
        """Bring the profile's quests up to date and return the active ones."""
        self.quests.refresh(profile, now or self.clock())
        return list(profile.quests)

    def claim_quest(
        self, profile: GameProfile, quest_id: str, now: datetime | None = None
    ) -> ClaimOutcome:
        """Claim a completed quest's reward.

        Unknown, incomplete and already claimed quests are reported in the
        outcome rather than raised.
        """
        now = now or self.clock()
        quest = profile.find_quest(quest_id)
        if quest is None:
            return ClaimOutcome(
                ok=False,
                quest_id=quest_id,
                error=ClaimError.NOT_FOUND,
                message=f"Quest {quest_id!r} not found",
            )

        try:
            reward_xp = self.quests.complete(quest)
        except PreconditionError as e:
            logger.info("quest_claim_rejected", user_id=profile.user_id, quest_id=quest_id)
            return ClaimOutcome(
                ok=False,
                quest_id=quest_id,
                error=ClaimError.PRECONDITION_FAILED,
                message=str(e),
            )

        profile.claimed_quest_ids.append(quest.id)
        progress = self.update_progress(
            profile, CompletedActivity(kind=ActivityKind.QUEST, xp_earned=reward_xp), now
        )
        for item in quest.reward_items:
            grant_item(profile, item, now)
            progress.rewards.append(
                Reward(type=RewardType.ITEM, value=item, description=f"Received {item}")
            )
        logger.info("quest_claimed", user_id=profile.user_id, quest_id=quest.id, xp=reward_xp)
        return ClaimOutcome(
            ok=True,
            quest_id=quest.id,
            progress=progress,
            items=list(quest.reward_items),
        )

    def use_power_up(
        self, profile: GameProfile, power_up_id: str, now: datetime | None = None
    ) -> PowerUpActivation:
        return activate_power_up(profile, power_up_id, now or self.clock())

    def league_standing(self, profile: GameProfile) -> LeagueStanding:
        return self.league.standing(profile)

    def settle_week(self, profile: GameProfile) -> LeagueStanding:
        """Apply the week's promotion or demotion and start a new week."""
        standing = self.league.standing(profile)
        new_league = self.league.target_league(standing)
        if new_league != profile.league:
            logger.info(
                "league_changed",
                user_id=profile.user_id,
                old_league=profile.league.value,
                new_league=new_league.value,
            )
        profile.league = new_league
        profile.weekly_xp = 0
        profile.weekly_goals = WeeklyGoals(
            target_minutes=profile.weekly_goals.target_minutes,
            target_conversations=profile.weekly_goals.target_conversations,
        )
        return standing

    def motivational_message(self, profile: GameProfile) -> str:
        return motivational_message(profile, self.selector)
