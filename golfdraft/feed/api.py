import os
import logging
from urllib.parse import urljoin
from typing import Any, Mapping, Optional

import requests
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.sportsdata.io/golf/v2/json"


class ResultsFeedClient:
    """Thin HTTP client for the live tournament leaderboard feed."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        load_dotenv()
        self.base_url = (
            base_url or os.getenv("RESULTS_FEED_BASE_URL") or DEFAULT_BASE_URL
        ).rstrip("/")
        self.api_key = api_key or os.getenv("RESULTS_FEED_API_KEY")
        if not self.api_key:
            raise ValueError("Environment variable 'RESULTS_FEED_API_KEY' is not set")
        self.session = session or requests.Session()
        self.timeout = timeout

    # -------- headers --------
    @property
    def headers(self) -> Mapping[str, str]:
        return {"Accept": "application/json", "Ocp-Apim-Subscription-Key": self.api_key}

    # -------- core request --------
    def _request(self, method: str, path: str, *, params: Optional[dict] = None) -> Any:
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        # The key travels in a header; never log it.
        logger.debug(f"{method.upper()} {url}")
        r = self.session.request(
            method=method.upper(),
            url=url,
            headers=self.headers,
            params=params,
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json() if r.content else None

    # -------- API callers --------
    def get_leaderboard(self, tournament_external_id: str) -> list[dict]:
        """Return the raw per-player leaderboard entries of a tournament.

        The feed wraps players in a ``{"Tournament": ..., "Players": [...]}``
        document; a bare list is accepted as well.
        """
        payload = self._request("GET", f"/Leaderboard/{tournament_external_id}")
        if payload is None:
            return []
        if isinstance(payload, dict):
            players = payload.get("Players") or []
        else:
            players = payload
        if not isinstance(players, list):
            raise ValueError("Leaderboard payload does not contain a list of players")
        return players
