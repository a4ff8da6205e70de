"""Motivational flavor text with an injectable message selector."""

import random
from collections.abc import Callable, Sequence

from lingo_quest.models.profile import GameProfile

Selector = Callable[[Sequence[str]], str]


def make_selector(seed: int | None = None) -> Selector:
    """Random choice from a dedicated generator, reproducible when seeded."""
    return random.Random(seed).choice


def first_option(options: Sequence[str]) -> str:
    return options[0]


def motivational_message(profile: GameProfile, selector: Selector) -> str:
    streak = profile.current_streak_days
    level = profile.level

    if streak >= 7:
        options = [
            f"🔥 Amazing {streak}-day streak! You're on fire!",
            f"⚡ {streak} days strong! Keep the momentum going!",
            f"🌟 Your {streak}-day dedication is inspiring!",
        ]
    elif streak == 0:
        options = [
            "🌱 Every expert was once a beginner. Start your streak today!",
            "💪 Consistency beats perfection. Begin your learning journey!",
            "🎯 Small daily efforts lead to big achievements!",
        ]
    elif level % 5 == 0:
        options = [
            f"🏆 Level {level} achieved! You're making incredible progress!",
            f"⭐ Welcome to Level {level}! Your hard work is paying off!",
            f"🎉 Level {level} unlocked! Keep pushing your limits!",
        ]
    else:
        options = [
            "🚀 Every conversation makes you stronger!",
            "📈 Your improvement is remarkable! Keep going!",
            "💫 Practice makes progress, and you're proof of that!",
            "🌍 You're not just learning a language, you're opening doors!",
        ]
    return selector(options)
