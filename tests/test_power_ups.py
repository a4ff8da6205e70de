"""Tests for power-up inventory."""

from datetime import timedelta

import pytest

from lingo_quest.errors import NotFoundError, PreconditionError
from lingo_quest.models.profile import PowerUp, PowerUpEffect
from lingo_quest.progression.power_ups import activate_power_up, grant_item


def test_grant_creates_then_stacks(profile, now):
    first = grant_item(profile, "streak_freeze", now)
    second = grant_item(profile, "streak_freeze", now)

    assert first is second
    assert first.id == "streak_freeze_1"
    assert first.uses_remaining == 2
    assert len(profile.power_ups) == 1


def test_grant_unknown_item(profile, now):
    with pytest.raises(ValueError):
        grant_item(profile, "invisibility", now)


def test_activate_decrements(profile, now):
    grant_item(profile, "double_xp", now)

    activation = activate_power_up(profile, "double_xp_1", now)

    assert activation.effect == PowerUpEffect.DOUBLE_XP
    assert activation.uses_remaining == 0
    assert activation.duration_minutes == 60
    assert profile.power_ups[0].uses_remaining == 0


def test_activate_without_uses(profile, now):
    grant_item(profile, "hint_boost", now)
    activate_power_up(profile, "hint_boost_1", now)
    with pytest.raises(PreconditionError):
        activate_power_up(profile, "hint_boost_1", now)


def test_activate_expired(profile, now):
    profile.power_ups.append(
        PowerUp(
            id="old",
            name="Old",
            effect=PowerUpEffect.TIME_EXTENSION,
            expires_at=now - timedelta(minutes=1),
        )
    )
    with pytest.raises(PreconditionError):
        activate_power_up(profile, "old", now)


def test_activate_unknown(profile, now):
    with pytest.raises(NotFoundError):
        activate_power_up(profile, "missing", now)
