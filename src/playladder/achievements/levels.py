from __future__ import annotations

_BASE_LEVELS = [1, 3, 5, 8, 10, 13, 15, 18, 20]


def default_achievement_levels(max_level: int = 200) -> list[int]:
    """1, 3, 5, 8, ... 20, then alternating +3/+2 steps up to ``max_level``."""

    levels: list[int] = []
    for level in _BASE_LEVELS:
        if level > max_level:
            return levels
        levels.append(level)

    current = levels[-1] if levels else 0
    add_three = True
    while current < max_level:
        current += 3 if add_three else 2
        add_three = not add_three
        if current > max_level:
            break
        levels.append(current)
    return levels


__all__ = ["default_achievement_levels"]
