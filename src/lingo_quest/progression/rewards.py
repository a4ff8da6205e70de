"""XP reward calculation for completed learning activities."""

import math

from lingo_quest.models.session import ActivityKind

BASE_XP: dict[ActivityKind, int] = {
    ActivityKind.VOCABULARY: 10,
    ActivityKind.GRAMMAR: 15,
    ActivityKind.PRONUNCIATION: 12,
    ActivityKind.LISTENING: 12,
    ActivityKind.ACHIEVEMENT: 50,
}

CONVERSATION_XP_PER_MINUTE = 2
DEFAULT_CONVERSATION_MINUTES = 5
STREAK_BONUS_MIN_DAYS = 7
STREAK_BONUS_PER_DAY = 0.02
STREAK_BONUS_CAP = 0.5


def _floor(value: float) -> int:
    # Tolerate binary float error so 50 * 1.14 floors to 57, not 56.
    return math.floor(value + 1e-9)


def calculate_xp_reward(
    kind: ActivityKind,
    duration_minutes: float | None = None,
    accuracy_rate: float | None = None,
    difficulty_level: float | None = None,
    streak_eligible: bool = False,
    current_streak_days: int = 0,
) -> int:
    """Compute the XP earned for one activity.

    Modifiers are applied in order (accuracy, difficulty, streak), flooring
    the running value after each step.

    Args:
        kind: Activity kind.
        duration_minutes: Conversation length; defaults to 5 when absent.
        accuracy_rate: 0-100 accuracy; multiplier never drops below 0.5.
        difficulty_level: 1-10, 5 is neutral.
        streak_eligible: Whether the streak bonus may apply.
        current_streak_days: Streak length, bonus applies from 7 days.

    Returns:
        XP earned, at least 1.
    """
    if kind == ActivityKind.CONVERSATION:
        minutes = DEFAULT_CONVERSATION_MINUTES if duration_minutes is None else duration_minutes
        xp = _floor(minutes * CONVERSATION_XP_PER_MINUTE)
    else:
        xp = BASE_XP.get(kind, 0)

    if accuracy_rate is not None:
        xp = _floor(xp * max(0.5, accuracy_rate / 100))

    if difficulty_level is not None:
        xp = _floor(xp * (1 + (difficulty_level - 5) * 0.1))

    if streak_eligible and current_streak_days >= STREAK_BONUS_MIN_DAYS:
        bonus = min(STREAK_BONUS_CAP, current_streak_days * STREAK_BONUS_PER_DAY)
        xp = _floor(xp * (1 + bonus))

    return max(1, xp)
