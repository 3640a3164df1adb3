"""
Tier derivation from win/pick/ban rates.
"""

# (minimum performance score, tier), best first
TIER_THRESHOLDS = [
    (55.0, "S+"),
    (52.0, "S"),
    (50.0, "A"),
    (48.0, "B"),
    (46.0, "C"),
]

LOWEST_TIER = "D"

WIN_RATE_WEIGHT = 0.6
PICK_RATE_WEIGHT = 0.2
BAN_RATE_WEIGHT = 0.2


def performance_score(win_rate: float, pick_rate: float, ban_rate: float) -> float:
    """Weighted score; rates are percentages (0-100)."""
    return (
        win_rate * WIN_RATE_WEIGHT
        + pick_rate * PICK_RATE_WEIGHT
        + ban_rate * BAN_RATE_WEIGHT
    )


def calculate_tier(win_rate: float, pick_rate: float, ban_rate: float) -> str:
    """
    Map rates onto a tier letter.

    >>> calculate_tier(60.0, 50.0, 50.0)
    'S+'
    >>> calculate_tier(45.0, 1.0, 1.0)
    'D'
    """
    score = performance_score(win_rate, pick_rate, ban_rate)
    for minimum, tier in TIER_THRESHOLDS:
        if score >= minimum:
            return tier
    return LOWEST_TIER
