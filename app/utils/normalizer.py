"""Identifier normalization for stats cache keys."""

from typing import Optional

from app.utils.helpers import safe_strip


# Champions whose canonical id is not a simple capitalization
CHAMPION_ALIASES = {
    "khazix": "Khazix",
    "chogath": "Chogath",
    "drmundo": "DrMundo",
    "velkoz": "Velkoz",
    "kogmaw": "KogMaw",
    "reksai": "RekSai",
    "tahmkench": "TahmKench",
    "aurelionsol": "AurelionSol",
    "leesin": "LeeSin",
    "masteryi": "MasterYi",
    "missfortune": "MissFortune",
    "twistedfate": "TwistedFate",
    "xinzhao": "XinZhao",
    "jarvaniv": "JarvanIV",
    "wukong": "MonkeyKing",  # Upstream still calls him MonkeyKing
}

ROLES = ("TOP", "JUNGLE", "MIDDLE", "BOTTOM", "UTILITY")

ROLE_ALIASES = {
    "MID": "MIDDLE",
    "BOT": "BOTTOM",
    "ADC": "BOTTOM",
    "SUPPORT": "UTILITY",
}

DEFAULT_ROLE = "TOP"

# Placeholders for unspecified key parts
ANY = "*"
LATEST_PATCH = "latest"


def normalize(raw_id: Optional[str]) -> str:
    """
    Canonicalize a champion identifier.

    Known irregular ids come from CHAMPION_ALIASES, everything else gets
    its first letter capitalized. Never fails: an unknown champion is just
    an id upstream won't have data for.

    >>> normalize("khazix")
    'Khazix'
    >>> normalize("notachampion")
    'Notachampion'
    """
    text = safe_strip(raw_id)
    if not text:
        return ""

    alias = CHAMPION_ALIASES.get(text.lower())
    if alias:
        return alias

    return text[0].upper() + text[1:]


def normalize_role(raw_role: Optional[str]) -> str:
    """Map upstream/user role names onto the five lane positions."""
    role = safe_strip(raw_role).upper()
    if role in ROLES:
        return role
    return ROLE_ALIASES.get(role, DEFAULT_ROLE)


def normalize_rank(raw_rank: Optional[str]) -> str:
    return safe_strip(raw_rank).upper()


def normalize_region(raw_region: Optional[str]) -> str:
    return safe_strip(raw_region).lower()


def build_stats_key(
    rank: str,
    region: str,
    role: Optional[str] = None,
    champion_id: Optional[str] = None,
    patch: Optional[str] = None,
) -> str:
    """
    Build the canonical cache key for a stats lookup.

    Format: stats:{patch}:{rank}:{region}:{role}:{champion}, lower case,
    with "*" for an unspecified role or champion.
    """
    parts = [
        "stats",
        safe_strip(patch) or LATEST_PATCH,
        normalize_rank(rank),
        normalize_region(region),
        normalize_role(role) if safe_strip(role) else ANY,
        normalize(champion_id) if safe_strip(champion_id) else ANY,
    ]
    return ":".join(parts).lower()
