"""Mapping between cumulative XP and level."""

BASE_LEVEL_XP = 100
LEVEL_XP_INCREMENT = 50


def xp_threshold(level: int) -> int:
    """Cumulative XP at which ``level`` is reached.

    Level n requires 100 XP plus 50 more for every prior level, so the
    thresholds run 100, 250, 450, 700, ...
    """
    if level < 1:
        return 0
    return BASE_LEVEL_XP * level + LEVEL_XP_INCREMENT * level * (level - 1) // 2


def level_for_xp(total_xp: int) -> int:
    """Greatest level whose threshold is reached, never below 1."""
    level = 1
    while total_xp >= xp_threshold(level + 1):
        level += 1
    return level


def xp_to_next_level(total_xp: int) -> int:
    return xp_threshold(level_for_xp(total_xp) + 1) - total_xp
