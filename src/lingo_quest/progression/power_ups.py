"""Power-up inventory: granting quest items and activating effects."""

from datetime import datetime

import structlog

from lingo_quest.errors import NotFoundError, PreconditionError
from lingo_quest.models.profile import GameProfile, PowerUp, PowerUpEffect
from lingo_quest.models.results import PowerUpActivation

logger = structlog.get_logger()

# effect -> (name, description, duration minutes, activation message)
POWER_UP_CATALOG: dict[PowerUpEffect, tuple[str, str, int | None, str]] = {
    PowerUpEffect.DOUBLE_XP: (
        "Double XP",
        "Double XP for the next session",
        60,
        "Double XP active for the next session!",
    ),
    PowerUpEffect.STREAK_FREEZE: (
        "Streak Freeze",
        "Protects your streak for one missed day",
        None,
        "Streak freeze applied - your streak is protected!",
    ),
    PowerUpEffect.MISTAKE_PROTECTION: (
        "Mistake Protection",
        "Errors won't count against you",
        30,
        "Mistake protection active - errors won't count against you!",
    ),
    PowerUpEffect.HINT_BOOST: (
        "Hint Boost",
        "Extra help when you need it",
        30,
        "Hint boost active - get extra help when needed!",
    ),
    PowerUpEffect.TIME_EXTENSION: (
        "Time Extension",
        "More time for timed exercises",
        15,
        "Time extension active - take your time!",
    ),
}


def grant_item(profile: GameProfile, item: str, now: datetime | None = None) -> PowerUp:
    """Add one use of a power-up item to the profile's inventory."""
    now = now or datetime.now()
    effect = PowerUpEffect(item)
    for power_up in profile.power_ups:
        if power_up.effect != effect:
            continue
        if power_up.expires_at is None or power_up.expires_at > now:
            power_up.uses_remaining += 1
            return power_up

    name, description, duration, _ = POWER_UP_CATALOG[effect]
    power_up = PowerUp(
        id=f"{effect.value}_{len(profile.power_ups) + 1}",
        name=name,
        description=description,
        effect=effect,
        duration_minutes=duration,
        uses_remaining=1,
    )
    profile.power_ups.append(power_up)
    return power_up


def activate_power_up(
    profile: GameProfile, power_up_id: str, now: datetime | None = None
) -> PowerUpActivation:
    """Consume one use of a power-up.

    Raises:
        NotFoundError: The profile has no power-up with this id.
        PreconditionError: No uses remain or the power-up has expired.
    """
    now = now or datetime.now()
    power_up = next((p for p in profile.power_ups if p.id == power_up_id), None)
    if power_up is None:
        raise NotFoundError(f"Power-up {power_up_id!r} not found")
    if power_up.uses_remaining <= 0:
        raise PreconditionError(f"Power-up {power_up_id!r} has no uses remaining")
    if power_up.expires_at is not None and power_up.expires_at <= now:
        raise PreconditionError(f"Power-up {power_up_id!r} has expired")

    power_up.uses_remaining -= 1
    logger.info(
        "power_up_used",
        user_id=profile.user_id,
        effect=power_up.effect.value,
        uses_remaining=power_up.uses_remaining,
    )
    return PowerUpActivation(
        power_up_id=power_up.id,
        effect=power_up.effect,
        duration_minutes=power_up.duration_minutes,
        uses_remaining=power_up.uses_remaining,
        message=POWER_UP_CATALOG[power_up.effect][3],
    )
