"""Tests for league standing and leaderboard position."""

import pytest

from lingo_quest.errors import NotFoundError
from lingo_quest.models.profile import GameProfile, League
from lingo_quest.models.results import LeaderboardEntry
from lingo_quest.progression.league import LeagueEngine, leaderboard_position, league_leaderboard


class TestStanding:
    def test_bronze_below_promotion(self, profile):
        profile.weekly_xp = 600
        standing = LeagueEngine().standing(profile)
        assert standing.current_league == League.BRONZE
        assert standing.xp_in_league == 600
        assert standing.xp_to_next_league == 400
        assert standing.next_league == League.SILVER
        assert not standing.can_promote
        assert not standing.can_demote

    def test_promotion_at_threshold(self, profile):
        profile.weekly_xp = 1000
        standing = LeagueEngine().standing(profile)
        assert standing.can_promote
        assert standing.xp_to_next_league == 0
        assert LeagueEngine.target_league(standing) == League.SILVER

    def test_demotion_below_eighty_percent(self, profile):
        profile.league = League.GOLD
        profile.weekly_xp = 2399
        standing = LeagueEngine().standing(profile)
        assert standing.can_demote
        assert standing.xp_in_league == -601
        assert LeagueEngine.target_league(standing) == League.SILVER

    def test_no_demotion_at_eighty_percent(self, profile):
        profile.league = League.GOLD
        profile.weekly_xp = 2400
        assert not LeagueEngine().standing(profile).can_demote

    def test_bronze_never_demotes(self, profile):
        assert not LeagueEngine().standing(profile).can_demote

    def test_diamond_never_promotes(self, profile):
        profile.league = League.DIAMOND
        profile.weekly_xp = 40000
        standing = LeagueEngine().standing(profile)
        assert not standing.can_promote
        assert standing.next_league is None
        assert standing.xp_to_next_league == 0
        assert LeagueEngine.target_league(standing) == League.DIAMOND


def _board(n: int) -> list[LeaderboardEntry]:
    return [
        LeaderboardEntry(
            user_id=f"user_{i}",
            username=f"User {i}",
            xp=1000 - i * 10,
            rank=i + 1,
            league=League.BRONZE,
            streak=0,
        )
        for i in range(n)
    ]


class TestLeaderboardPosition:
    def test_middle_of_board(self):
        position = leaderboard_position(_board(10), "user_5")
        assert position.position == 6
        assert position.total_users == 10
        assert [e.user_id for e in position.nearby_users] == [
            "user_3", "user_4", "user_5", "user_6", "user_7",
        ]
        assert position.user_entry.user_id == "user_5"

    def test_top_of_board(self):
        position = leaderboard_position(_board(10), "user_0")
        assert [e.user_id for e in position.nearby_users] == ["user_0", "user_1", "user_2"]

    def test_missing_user(self):
        with pytest.raises(NotFoundError):
            leaderboard_position(_board(3), "ghost")


class TestLeagueLeaderboard:
    def test_ranks_members_of_one_league(self):
        profiles = [
            GameProfile(user_id="cara", weekly_xp=300, current_streak_days=4),
            GameProfile(user_id="abe", weekly_xp=300),
            GameProfile(user_id="dan", weekly_xp=900, league=League.SILVER),
            GameProfile(user_id="bo", weekly_xp=500),
        ]

        board = league_leaderboard(profiles, League.BRONZE)

        assert [(e.user_id, e.rank, e.xp) for e in board] == [
            ("bo", 1, 500),
            ("abe", 2, 300),
            ("cara", 3, 300),
        ]
        assert board[2].streak == 4

    def test_empty_league(self):
        assert league_leaderboard([GameProfile(user_id="abe")], League.GOLD) == []
