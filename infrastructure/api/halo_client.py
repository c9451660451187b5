"""Halo Waypoint stats, skill and profile API client."""
import logging
from typing import Any, Dict, List, Optional, Sequence
import httpx

from config import settings
from domain.exceptions import UpstreamError

logger = logging.getLogger(__name__)

SPARTAN_HEADER = "x-343-authorization-spartan"


class HaloStatsClient:
    """Asynchronous client for the stats services, bound to one spartan token.

    The client never retries: a non-2xx answer or a transport failure is
    raised as ``UpstreamError`` tagged with the resource that failed.
    An ``httpx.AsyncClient`` can be shared across requests by passing it
    in as ``session``; otherwise one is opened by ``__aenter__``.
    """

    def __init__(
        self,
        spartan_token: str,
        session: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.spartan_token = spartan_token
        self.session = session
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.last_status_code: Optional[int] = None
        self._owns_session = session is None

        self.stats_url   = settings.STATS_BASE_URL.rstrip("/")
        self.skill_url   = settings.SKILL_BASE_URL.rstrip("/")
        self.profile_url = settings.PROFILE_BASE_URL.rstrip("/")

    async def __aenter__(self):
        if self.session is None:
            self.session = httpx.AsyncClient(timeout=self.timeout)
            self._owns_session = True
        return self

    async def __aexit__(self, *_):
        if self.session and self._owns_session:
            await self.session.aclose()
            self.session = None

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            SPARTAN_HEADER: self.spartan_token,
            "Accept": "application/json",
        }

    async def _get_json(
        self,
        url: str,
        resource: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if self.session is None:
            raise RuntimeError("HaloStatsClient used outside 'async with'")

        try:
            response = await self.session.get(url, params=params, headers=self._headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error(f"Network error on {resource}: {exc}")
            raise UpstreamError(resource, f"transport error: {exc}") from exc

        self.last_status_code = response.status_code

        if response.status_code == 401:
            logger.error("401 Unauthorized: spartan token rejected or expired")
        elif response.status_code == 429:
            logger.warning(f"429 rate-limited on {resource}")

        if not response.is_success:
            raise UpstreamError(
                resource, f"HTTP {response.status_code}", status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(resource, "response body is not JSON") from exc

    # ── Stats API ──────────────────────────────────────────────────────

    async def get_matches(self, xuid: str, start: int, count: int) -> Dict[str, Any]:
        url = f"{self.stats_url}/hi/players/xuid({xuid})/matches"
        logger.debug(f"matches xuid={xuid} start={start} count={count}")
        return await self._get_json(url, "matches", params={"start": start, "count": count})

    async def get_match_stats(self, match_id: str) -> Dict[str, Any]:
        return await self._get_json(f"{self.stats_url}/hi/matches/{match_id}/stats", "match_stats")

    # ── Skill API ──────────────────────────────────────────────────────

    async def get_skill(self, match_id: str, player_ids: Sequence[str]) -> List[Dict[str, Any]]:
        """Skill rows for ``player_ids`` (bare xuids) in one match."""
        players = ",".join(f"xuid({p})" for p in player_ids)
        url = f"{self.skill_url}/hi/matches/{match_id}/skill?players={players}"
        logger.debug(f"skill match={match_id} players={len(player_ids)}")
        payload = await self._get_json(url, "skill")
        rows = payload.get("Value") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise UpstreamError("skill", "response has no Value list")
        return rows

    # ── Profile API ────────────────────────────────────────────────────

    async def get_profile(self, gamertag: str) -> Dict[str, Any]:
        return await self._get_json(f"{self.profile_url}/users/gt({gamertag})", "profile")
