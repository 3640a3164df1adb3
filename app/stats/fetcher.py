"""
Single-combination stats fetcher.

Looks up one (patch, rank, region) payload through the tiered cache,
calling upstream at most once on a miss, and projects the result by
role and/or champion.
"""
import logging
from typing import Any, Dict, List, Optional

from app.api_client import UpstreamClient
from app.cache import DataCategory, TieredCache
from app.errors import ParseError
from app.utils.helpers import safe_float, safe_int, safe_strip
from app.utils.normalizer import (
    build_stats_key,
    normalize,
    normalize_rank,
    normalize_region,
    normalize_role,
)

from .models import ALL_ROLES, StatsPayload
from .tiers import calculate_tier

logger = logging.getLogger("stats.fetcher")

VERSIONS_CACHE_KEY = "meta:versions"

# Fields that mark a champion entry as a single aggregate rather than a role map
AGGREGATE_FIELDS = ("games", "wins", "winRate", "pickRate", "banRate")


def _parse_aggregate(champion_id: str, role: str, raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ParseError(f"Stats for {champion_id}/{role} is not an object")

    win_rate = safe_float(raw.get("winRate"))
    pick_rate = safe_float(raw.get("pickRate"))
    ban_rate = safe_float(raw.get("banRate"))
    kda = raw.get("kda")

    return {
        "games": safe_int(raw.get("games")),
        "wins": safe_int(raw.get("wins")),
        "kda": kda if isinstance(kda, dict) else safe_float(kda),
        "winRate": win_rate,
        "pickRate": pick_rate,
        "banRate": ban_rate,
        # Derived only when upstream leaves it out
        "tier": raw.get("tier") or calculate_tier(win_rate, pick_rate, ban_rate),
    }


def parse_stats_payload(data: Dict[str, Any]) -> StatsPayload:
    """
    Turn an upstream body into a StatsPayload.

    Champion ids and roles are normalized. A champion given as a flat
    aggregate is stored under the "ALL" role.

    Raises:
        ParseError: an entry is not an object
    """
    payload: StatsPayload = {}
    for raw_id, entry in data.items():
        champion_id = normalize(raw_id)
        if not isinstance(entry, dict):
            raise ParseError(f"Stats for {raw_id} is not an object")

        if any(name in entry for name in AGGREGATE_FIELDS):
            roles = {ALL_ROLES: _parse_aggregate(champion_id, ALL_ROLES, entry)}
        else:
            roles = {}
            for raw_role, aggregate in entry.items():
                role = ALL_ROLES if safe_strip(raw_role).upper() == ALL_ROLES else normalize_role(raw_role)
                roles[role] = _parse_aggregate(champion_id, role, aggregate)

        payload[champion_id] = roles
    return payload


def project_payload(
    payload: StatsPayload,
    role: Optional[str] = None,
    champion_id: Optional[str] = None,
) -> StatsPayload:
    """
    Sub-select a payload by champion and/or role.

    Returns a copy; unknown champions or roles give an empty mapping.
    """
    if safe_strip(champion_id):
        wanted = normalize(champion_id)
        champions = {wanted: payload[wanted]} if wanted in payload else {}
    else:
        champions = payload

    if not safe_strip(role):
        return {cid: {r: dict(agg) for r, agg in roles.items()} for cid, roles in champions.items()}

    wanted_role = normalize_role(role)
    return {
        cid: {wanted_role: dict(roles[wanted_role])}
        for cid, roles in champions.items()
        if wanted_role in roles
    }


class StatsFetcher:
    """
    Read-through access to champion stats.

    Side effects per lookup: one cache read, at most one upstream call,
    at most one cache write.
    """

    def __init__(self, client: UpstreamClient, cache: TieredCache):
        self.client = client
        self.cache = cache

    def fetch_stats(
        self,
        rank: str,
        region: str,
        role: Optional[str] = None,
        champion_id: Optional[str] = None,
        patch: Optional[str] = None,
    ) -> StatsPayload:
        """
        Get stats for one rank/region, optionally narrowed to a role/champion.

        The unfiltered payload is what gets cached, so every projection of
        the same rank/region shares one cache entry and one upstream call.

        Raises:
            UpstreamError: upstream unreachable or non-2xx
            ParseError: upstream body malformed
        """
        rank = normalize_rank(rank)
        region = normalize_region(region)
        patch = safe_strip(patch) or None
        cache_key = build_stats_key(rank, region, patch=patch)

        def fetch():
            logger.info(f"Fetching upstream stats: rank={rank}, region={region}, patch={patch or 'latest'}")
            return parse_stats_payload(self.client.fetch_stats(rank, region, patch=patch))

        payload = self.cache.get_or_fetch(cache_key, fetch, DataCategory.RANK_REGION_STATS)
        return project_payload(payload, role=role, champion_id=champion_id)

    def fetch_versions(self) -> List[str]:
        """Published versions, newest first (cached as meta data)."""
        return self.cache.get_or_fetch(
            VERSIONS_CACHE_KEY,
            self.client.fetch_versions,
            DataCategory.META,
        )
