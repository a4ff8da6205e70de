"""Badge synthesis for newly completed achievements."""

from datetime import datetime

from lingo_quest.models.profile import Achievement, Badge, GameProfile, Rarity

BADGE_ICONS: dict[str, str] = {
    "general": "🏆",
    "conversation": "💬",
    "streak": "🔥",
    "accuracy": "🎯",
    "vocabulary": "📚",
    "grammar": "✍️",
}
DEFAULT_BADGE_ICON = "⭐"


def badge_icon(category: str) -> str:
    return BADGE_ICONS.get(category, DEFAULT_BADGE_ICON)


class BadgeEngine:
    """Awards one common badge per completed achievement."""

    def award_for(
        self,
        profile: GameProfile,
        achievements: list[Achievement],
        now: datetime | None = None,
    ) -> list[Badge]:
        now = now or datetime.now()
        owned = {b.id for b in profile.badges}
        awarded: list[Badge] = []
        for achievement in achievements:
            badge_id = f"badge_{achievement.id}"
            if badge_id in owned:
                continue
            badge = Badge(
                id=badge_id,
                name=achievement.name,
                description=f"Earned for: {achievement.description}",
                icon=badge_icon(achievement.category),
                category=achievement.category,
                rarity=Rarity.COMMON,
                earned_at=now,
                xp_reward=achievement.reward_xp,
            )
            profile.badges.append(badge)
            owned.add(badge_id)
            awarded.append(badge)
        return awarded
