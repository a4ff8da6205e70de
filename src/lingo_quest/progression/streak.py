"""Daily practice streak tracking."""

from datetime import datetime, timedelta

from lingo_quest.models.profile import GameProfile


class StreakTracker:
    """Updates a profile's streak when a session is recorded.

    Only sessions dated today move the streak: a session the day after the
    last activity extends it, a later one restarts it at 1, and repeat
    sessions on the same day leave it unchanged.
    """

    def update(
        self,
        profile: GameProfile,
        session_at: datetime,
        now: datetime | None = None,
    ) -> int:
        now = now or datetime.now()
        today = now.date()
        yesterday = today - timedelta(days=1)

        if session_at.date() == today:
            if profile.last_activity is None:
                profile.current_streak_days = 1
            else:
                last_day = profile.last_activity.date()
                if last_day == yesterday:
                    profile.current_streak_days += 1
                elif last_day != today:
                    profile.current_streak_days = 1

        profile.longest_streak_days = max(
            profile.longest_streak_days, profile.current_streak_days
        )
        if profile.last_activity is None or session_at > profile.last_activity:
            profile.last_activity = session_at
        return profile.current_streak_days
