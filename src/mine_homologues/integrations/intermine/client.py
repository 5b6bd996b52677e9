"""HTTP client for InterMine query web services."""

from typing import cast

import httpx

from mine_homologues.integrations.intermine.query import PathQuery
from mine_homologues.platform.config import get_settings
from mine_homologues.platform.errors import MineServiceError
from mine_homologues.platform.logging import get_logger
from mine_homologues.platform.types import JSONObject

logger = get_logger(__name__)

RESULTS_PATH = "/query/results"


def normalize_service_root(root: str) -> str:
    """Return the web-service base URL for a mine root.

    Mines are registered by their webapp URL (``https://flymine.org/flymine``);
    the query API lives under ``/service`` beneath it.
    """
    base = root.strip().rstrip("/")
    if not base.endswith("/service"):
        base = f"{base}/service"
    return base


class MineServiceClient:
    """Client for one mine's structured gene query capability."""

    def __init__(
        self,
        root: str,
        timeout: float = 60.0,
        *,
        user_agent: str | None = None,
    ) -> None:
        self.root = root.rstrip("/")
        self.base_url = normalize_service_root(root)
        self.timeout = timeout
        self.user_agent = user_agent
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self.user_agent:
                headers["User-Agent"] = self.user_agent
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers=headers,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def records(self, query: PathQuery) -> list[JSONObject]:
        """Run ``query`` and return the matching records as nested objects."""
        client = await self._get_client()
        logger.debug(
            "Mine query", base_url=self.base_url, from_=query.from_, view=query.select
        )
        try:
            response = await client.post(
                RESULTS_PATH,
                data={"query": query.to_xml(), "format": "jsonobjects"},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Mine HTTP error",
                base_url=self.base_url,
                status_code=e.response.status_code,
                response_text=e.response.text[:500],
            )
            raise MineServiceError(
                f"{self.base_url} -> HTTP {e.response.status_code}: {e.response.text[:200]}",
                status=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.warning("Mine request error", base_url=self.base_url, error=str(e))
            raise MineServiceError(f"Request to {self.base_url} failed: {e}") from e
        except ValueError as e:
            raise MineServiceError(
                f"{self.base_url} returned a non-JSON body: {e}"
            ) from e

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise MineServiceError(f"{self.base_url} returned no results list")
        return [cast(JSONObject, r) for r in results if isinstance(r, dict)]


class MineClientPool:
    """Cache of per-mine clients keyed by normalised service root."""

    def __init__(self, timeout: float | None = None) -> None:
        settings = get_settings()
        self.timeout = (
            timeout if timeout is not None else settings.mine_request_timeout_seconds
        )
        self.user_agent = settings.user_agent
        self._clients: dict[str, MineServiceClient] = {}

    def get_client(self, root: str) -> MineServiceClient:
        """Get (or create) the client for a mine root."""
        key = normalize_service_root(root)
        if key not in self._clients:
            self._clients[key] = MineServiceClient(
                root, timeout=self.timeout, user_agent=self.user_agent
            )
        return self._clients[key]

    async def close_all(self) -> None:
        """Close all HTTP clients."""
        for client in self._clients.values():
            await client.close()
        self._clients.clear()


_pool: MineClientPool | None = None


def get_mine_client_pool() -> MineClientPool:
    """Get the global mine client pool."""
    global _pool
    if _pool is None:
        _pool = MineClientPool()
    return _pool
