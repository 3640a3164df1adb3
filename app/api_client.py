"""
Client for the upstream champion statistics provider.
Raw HTTP only: caching and projection live in app.stats.fetcher.
"""
import logging
from typing import Optional, List, Dict, Any

import requests
from dotenv import load_dotenv

from app.errors import ParseError, UpstreamError
from config.settings import settings

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("api_client")


class UpstreamClient:
    """
    Thin wrapper over the statistics and version-list endpoints.

    Every call makes exactly one HTTP request, bounded by `timeout`.
    Transport failures and non-2xx statuses raise UpstreamError,
    unreadable bodies raise ParseError.
    """

    def __init__(
        self,
        base_url: str = settings.stats_api_base_url,
        versions_url: str = settings.versions_url,
        api_key: Optional[str] = settings.riot_api_key,
        timeout: float = settings.upstream_timeout_seconds,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.versions_url = versions_url
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()

    def _get_headers(self) -> dict:
        """Get API authentication headers."""
        if not self.api_key:
            return {}
        return {"X-Riot-Token": self.api_key}

    def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        try:
            response = self._session.get(
                url,
                headers=self._get_headers(),
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Upstream request failed: {url} - {e}")
            raise UpstreamError(f"Upstream unreachable: {e}") from e

        if not response.ok:
            logger.error(f"Upstream returned {response.status_code}: {url} params={params}")
            raise UpstreamError(
                f"Upstream returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"Upstream body is not valid JSON: {e}") from e

    def fetch_stats(
        self,
        rank: str,
        region: str,
        patch: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Fetch raw champion statistics for one rank/region.

        Returns:
            Mapping championId -> aggregate (or role -> aggregate)
        """
        params = {"rank": rank, "region": region}
        if patch:
            params["patch"] = patch

        data = self._get_json(f"{self.base_url}/stats", params)
        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object of champion stats, got {type(data).__name__}")
        return data

    def fetch_versions(self) -> List[str]:
        """
        Fetch published game versions, newest first.
        """
        data = self._get_json(self.versions_url)
        if not isinstance(data, list) or not all(isinstance(v, str) for v in data):
            raise ParseError("Expected a JSON array of version strings")
        return data
