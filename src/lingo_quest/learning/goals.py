"""Learner-defined goals and milestone detection."""

import uuid
from collections.abc import Sequence
from datetime import datetime

from lingo_quest.models.goal import GoalType, LearningGoal
from lingo_quest.models.profile import GameProfile
from lingo_quest.models.session import LearningSession, SessionType


def new_goal(
    user_id: str,
    title: str,
    goal_type: GoalType,
    target_value: float,
    target_date: datetime,
    description: str = "",
    reward_xp: int = 0,
) -> LearningGoal:
    return LearningGoal(
        id=f"goal_{uuid.uuid4().hex[:12]}",
        user_id=user_id,
        title=title,
        description=description,
        target_date=target_date,
        goal_type=goal_type,
        target_value=target_value,
        reward_xp=reward_xp,
    )


def add_goal(
    profile: GameProfile,
    title: str,
    goal_type: GoalType,
    target_value: float,
    target_date: datetime,
    description: str = "",
    reward_xp: int = 0,
) -> LearningGoal:
    goal = new_goal(
        profile.user_id, title, goal_type, target_value, target_date, description, reward_xp
    )
    profile.goals.append(goal)
    return goal


def estimate_vocabulary_size(profile: GameProfile) -> int:
    return profile.total_xp // 10


def update_goal_progress(
    goals: Sequence[LearningGoal],
    sessions: Sequence[LearningSession],
    profile: GameProfile,
) -> list[LearningGoal]:
    """Return updated copies of the goals; completed goals are left as they are."""
    updated = []
    for goal in goals:
        if goal.is_completed:
            updated.append(goal)
            continue
        goal = goal.model_copy()
        if goal.goal_type == GoalType.CONVERSATION_COUNT:
            goal.current_value = sum(
                1 for s in sessions if s.session_type == SessionType.CONVERSATION
            )
        elif goal.goal_type == GoalType.STREAK:
            goal.current_value = profile.current_streak_days
        elif goal.goal_type == GoalType.VOCABULARY_SIZE:
            goal.current_value = estimate_vocabulary_size(profile)
        goal.is_completed = goal.current_value >= goal.target_value
        updated.append(goal)
    return updated


def refresh_goals(
    profile: GameProfile, sessions: Sequence[LearningSession]
) -> list[LearningGoal]:
    """Recompute the profile's goals from its full session history."""
    profile.goals = update_goal_progress(profile.goals, sessions, profile)
    return list(profile.goals)


SESSION_MILESTONES = {
    1: "First Steps",
    10: "Getting Started",
    50: "Dedicated Learner",
    100: "Conversation Master",
}
STREAK_MILESTONES = {7: "Week Warrior", 30: "Monthly Commitment", 100: "Streak Legend"}
XP_MILESTONES = ((1000, "Thousand Points"), (5000, "Five Thousand Club"), (10000, "Elite Learner"))


def milestones(profile: GameProfile, total_sessions: int) -> list[str]:
    """Milestone names reached at the current session count, streak, XP and skills."""
    reached = []
    if total_sessions in SESSION_MILESTONES:
        reached.append(SESSION_MILESTONES[total_sessions])
    if profile.current_streak_days in STREAK_MILESTONES:
        reached.append(STREAK_MILESTONES[profile.current_streak_days])
    reached.extend(name for threshold, name in XP_MILESTONES if profile.total_xp >= threshold)
    for skill, score in profile.skill_scores.model_dump().items():
        if score >= 80:
            reached.append(f"{skill} Expert")
        if score >= 95:
            reached.append(f"{skill} Master")
    return reached
