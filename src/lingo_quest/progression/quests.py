"""Quest generation, objective tracking and completion."""

from datetime import date, datetime, time, timedelta

import structlog

from lingo_quest.errors import NotFoundError, PreconditionError
from lingo_quest.models.profile import GameProfile
from lingo_quest.models.quest import ObjectiveKind, Quest, QuestKind, QuestObjective
from lingo_quest.models.session import ActivityReport, SessionType

logger = structlog.get_logger()

# (kind slug, name, description, objective id, objective kind, target, reward xp)
DAILY_TEMPLATES: tuple[tuple[str, str, str, str, ObjectiveKind, float, int], ...] = (
    (
        "conversation",
        "Conversation Master",
        "Have meaningful conversations for 15 minutes",
        "conv_minutes",
        ObjectiveKind.CONVERSATION_MINUTES,
        15,
        100,
    ),
    (
        "accuracy",
        "Accuracy Expert",
        "Achieve 85% accuracy in conversations",
        "accuracy_rate",
        ObjectiveKind.ACCURACY_RATE,
        85,
        150,
    ),
    (
        "vocabulary",
        "Word Collector",
        "Learn 10 new words today",
        "vocab_learned",
        ObjectiveKind.VOCABULARY_LEARNED,
        10,
        80,
    ),
)

WEEKLY_XP_TARGET = 1000
WEEKLY_STREAK_TARGET = 7
WEEKLY_REWARD_XP = 500
WEEKLY_REWARD_ITEMS = ("streak_freeze",)


def start_of_week(day: date) -> date:
    """Monday of the week containing ``day``; Sunday belongs to the previous Monday."""
    return day - timedelta(days=day.weekday())


def _midnight(day: date, like: datetime) -> datetime:
    return datetime.combine(day, time.min).replace(tzinfo=like.tzinfo)


class QuestEngine:
    """Creates period quests and keeps their progress derived from objectives."""

    def generate_daily(self, now: datetime) -> list[Quest]:
        """Today's three daily quests.

        Ids are keyed by calendar date, so regenerating on the same day
        yields the same quest identities.
        """
        today = now.date()
        expires_at = _midnight(today + timedelta(days=1), now)
        quests = []
        for slug, name, description, obj_id, obj_kind, target, reward in DAILY_TEMPLATES:
            quests.append(
                Quest(
                    id=f"daily_{slug}_{today.isoformat()}",
                    name=name,
                    description=description,
                    kind=QuestKind.DAILY,
                    objectives=[
                        QuestObjective(
                            id=obj_id,
                            description=description,
                            kind=obj_kind,
                            target_value=target,
                        )
                    ],
                    reward_xp=reward,
                    expires_at=expires_at,
                )
            )
        return quests

    def generate_weekly(self, now: datetime, profile: GameProfile | None = None) -> Quest:
        """This week's challenge, keyed by the week's Monday.

        When a profile is given, objectives start from its weekly XP and
        streak (streak capped at 7).
        """
        monday = start_of_week(now.date())
        quest = Quest(
            id=f"weekly_challenge_{monday.isoformat()}",
            name="Weekly Warrior",
            description="Complete your learning goals this week",
            kind=QuestKind.WEEKLY,
            objectives=[
                QuestObjective(
                    id="weekly_xp",
                    description=f"Earn {WEEKLY_XP_TARGET} XP this week",
                    kind=ObjectiveKind.WEEKLY_XP,
                    target_value=WEEKLY_XP_TARGET,
                ),
                QuestObjective(
                    id="weekly_streak",
                    description=f"Maintain your streak for {WEEKLY_STREAK_TARGET} days",
                    kind=ObjectiveKind.STREAK_MAINTAINED,
                    target_value=WEEKLY_STREAK_TARGET,
                ),
            ],
            reward_xp=WEEKLY_REWARD_XP,
            reward_items=list(WEEKLY_REWARD_ITEMS),
            expires_at=_midnight(monday + timedelta(days=7), now),
        )
        if profile is not None:
            self.update_objective(quest, "weekly_xp", profile.weekly_xp)
            self.update_objective(
                quest,
                "weekly_streak",
                min(profile.current_streak_days, WEEKLY_STREAK_TARGET),
            )
        return quest

    def update_objective(self, quest: Quest, objective_id: str, new_value: float) -> Quest:
        """Set an objective's current value (not additive) and re-derive progress."""
        objective = quest.objective(objective_id)
        if objective is None:
            raise NotFoundError(f"Objective {objective_id!r} not found in quest {quest.id!r}")
        objective.current_value = new_value
        quest.recompute_progress()
        return quest

    def complete(self, quest: Quest) -> int:
        """Mark a completed quest as claimed and return its XP reward."""
        if quest.is_claimed:
            raise PreconditionError(f"Quest {quest.id!r} has already been claimed")
        if not quest.is_completed:
            raise PreconditionError(f"Quest {quest.id!r} is not completed")
        quest.is_claimed = True
        return quest.reward_xp

    def refresh(self, profile: GameProfile, now: datetime) -> list[Quest]:
        """Drop expired quests and add the current period's quests when missing."""
        expired = [q.id for q in profile.quests if q.is_expired(now)]
        if expired:
            profile.quests = [q for q in profile.quests if not q.is_expired(now)]
            logger.debug("quests_expired", user_id=profile.user_id, quest_ids=expired)

        candidates = self.generate_daily(now) + [self.generate_weekly(now, profile)]
        added = []
        for quest in candidates:
            if profile.find_quest(quest.id) or quest.id in profile.claimed_quest_ids:
                continue
            profile.quests.append(quest)
            added.append(quest)
        return added

    def track_activity(self, profile: GameProfile, report: ActivityReport) -> list[str]:
        """Advance objectives of active quests from one session.

        Returns:
            Ids of quests that became completed by this update.
        """
        newly_completed = []
        for quest in profile.quests:
            if quest.is_claimed:
                continue
            was_completed = quest.is_completed
            for obj in quest.objectives:
                value = self._next_value(obj, profile, report)
                if value != obj.current_value:
                    self.update_objective(quest, obj.id, value)
            if quest.is_completed and not was_completed:
                newly_completed.append(quest.id)
                logger.info("quest_completed", user_id=profile.user_id, quest_id=quest.id)
        return newly_completed

    @staticmethod
    def _next_value(obj: QuestObjective, profile: GameProfile, report: ActivityReport) -> float:
        if obj.kind == ObjectiveKind.CONVERSATION_MINUTES:
            if report.session_type == SessionType.CONVERSATION:
                return obj.current_value + (report.duration_minutes or 0.0)
            return obj.current_value
        if obj.kind == ObjectiveKind.MESSAGES_SENT:
            return obj.current_value + report.messages_sent
        if obj.kind == ObjectiveKind.ACCURACY_RATE:
            if report.accuracy_rate is None:
                return obj.current_value
            return max(obj.current_value, report.accuracy_rate)
        if obj.kind == ObjectiveKind.VOCABULARY_LEARNED:
            return obj.current_value + report.new_words_learned
        if obj.kind == ObjectiveKind.STREAK_MAINTAINED:
            return min(profile.current_streak_days, obj.target_value)
        if obj.kind == ObjectiveKind.WEEKLY_XP:
            return profile.weekly_xp
        return obj.current_value
