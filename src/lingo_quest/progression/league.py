"""Weekly league standing and leaderboard position."""

from collections.abc import Iterable, Sequence

from lingo_quest.errors import NotFoundError
from lingo_quest.models.profile import GameProfile, League
from lingo_quest.models.results import LeaderboardEntry, LeaderboardPosition, LeagueStanding

LEAGUE_LADDER: tuple[League, ...] = (
    League.BRONZE,
    League.SILVER,
    League.GOLD,
    League.PLATINUM,
    League.DIAMOND,
)
# One more threshold than leagues: the last is diamond's ceiling.
LEAGUE_THRESHOLDS: tuple[int, ...] = (0, 1000, 3000, 7000, 15000, 30000)
DEMOTION_RATIO = 0.8
LEADERBOARD_NEIGHBOURS = 2


class LeagueEngine:
    """Maps weekly XP to promotion and demotion eligibility.

    Output is advisory; the caller decides whether to change ``profile.league``.
    """

    def standing(self, profile: GameProfile) -> LeagueStanding:
        index = LEAGUE_LADDER.index(profile.league)
        current_threshold = LEAGUE_THRESHOLDS[index]
        next_threshold = LEAGUE_THRESHOLDS[index + 1]
        has_next = index < len(LEAGUE_LADDER) - 1

        return LeagueStanding(
            current_league=profile.league,
            xp_in_league=profile.weekly_xp - current_threshold,
            xp_to_next_league=max(0, next_threshold - profile.weekly_xp),
            next_league=LEAGUE_LADDER[index + 1] if has_next else None,
            can_promote=has_next and profile.weekly_xp >= next_threshold,
            can_demote=index > 0 and profile.weekly_xp < current_threshold * DEMOTION_RATIO,
        )

    @staticmethod
    def target_league(standing: LeagueStanding) -> League:
        """League the profile would move to if the standing were applied."""
        index = LEAGUE_LADDER.index(standing.current_league)
        if standing.can_promote:
            return LEAGUE_LADDER[index + 1]
        if standing.can_demote:
            return LEAGUE_LADDER[index - 1]
        return standing.current_league


def leaderboard_position(
    leaderboard: Sequence[LeaderboardEntry], user_id: str
) -> LeaderboardPosition:
    """Locate a user on a ranked leaderboard with two neighbours each side."""
    for index, entry in enumerate(leaderboard):
        if entry.user_id == user_id:
            break
    else:
        raise NotFoundError(f"User {user_id!r} not found in leaderboard")

    start = max(0, index - LEADERBOARD_NEIGHBOURS)
    end = min(len(leaderboard), index + LEADERBOARD_NEIGHBOURS + 1)
    return LeaderboardPosition(
        position=index + 1,
        total_users=len(leaderboard),
        nearby_users=list(leaderboard[start:end]),
        user_entry=leaderboard[index],
    )


def league_leaderboard(profiles: Iterable[GameProfile], league: League) -> list[LeaderboardEntry]:
    """Rank one league's members by weekly XP, ties broken by user id."""
    members = sorted(
        (p for p in profiles if p.league == league),
        key=lambda p: (-p.weekly_xp, p.user_id),
    )
    return [
        LeaderboardEntry(
            user_id=p.user_id,
            username=p.username,
            xp=p.weekly_xp,
            rank=rank,
            league=p.league,
            streak=p.current_streak_days,
        )
        for rank, p in enumerate(members, start=1)
    ]
