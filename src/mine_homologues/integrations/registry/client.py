"""InterMine registry client: namespaces, instances and neighbour groups."""

from __future__ import annotations

import httpx

from mine_homologues.domain.homology.models import MineInstance
from mine_homologues.platform.config import get_settings
from mine_homologues.platform.errors import RegistryError, UnknownMineError
from mine_homologues.platform.logging import get_logger
from mine_homologues.platform.types import JSONObject, JSONValue

logger = get_logger(__name__)


def parse_instance(raw: JSONValue) -> MineInstance | None:
    """Build a MineInstance from one registry entry, or None if unusable."""
    if not isinstance(raw, dict):
        return None
    namespace = raw.get("namespace")
    url = raw.get("url")
    if not isinstance(namespace, str) or not namespace.strip():
        return None
    if not isinstance(url, str) or not url.strip():
        return None
    name = raw.get("name")
    neighbours_raw = raw.get("neighbours")
    neighbours = (
        frozenset(n for n in neighbours_raw if isinstance(n, str))
        if isinstance(neighbours_raw, list)
        else frozenset()
    )
    colors = raw.get("colors")
    return MineInstance(
        namespace=namespace.strip(),
        name=name if isinstance(name, str) and name else namespace.strip(),
        url=url.strip().rstrip("/"),
        neighbours=neighbours,
        colors=colors if isinstance(colors, dict) else None,
    )


class RegistryClient:
    """Client for the InterMine registry web service.

    The instance catalog is never cached: every call to :meth:`list_instances`
    (and the derived queries built on it) fetches a fresh snapshot.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.registry_url).rstrip("/")
        self.timeout = (
            timeout if timeout is not None else settings.registry_timeout_seconds
        )
        self.user_agent = settings.user_agent
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers={"Accept": "application/json", "User-Agent": self.user_agent},
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: dict[str, str] | None = None) -> JSONObject:
        client = await self._get_client()
        logger.debug("Registry request", path=path, base_url=self.base_url)
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Registry HTTP error",
                path=path,
                status_code=e.response.status_code,
                response_text=e.response.text[:500],
            )
            raise RegistryError(
                f"GET {path} -> HTTP {e.response.status_code}",
                status=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error("Registry request error", path=path, error=str(e))
            raise RegistryError(f"Request failed: {e}") from e
        except ValueError as e:
            raise RegistryError(f"GET {path} returned a non-JSON body") from e
        if not isinstance(payload, dict):
            raise RegistryError(f"GET {path} returned {type(payload).__name__}")
        return payload

    async def resolve_namespace(self, url: str) -> str:
        """Look up the namespace registered for a mine URL."""
        try:
            payload = await self._get("/namespace", params={"url": url})
        except RegistryError as e:
            if e.status == 404:
                raise UnknownMineError(f"No registry entry for {url}") from e
            raise
        namespace = payload.get("namespace")
        if not isinstance(namespace, str) or not namespace.strip():
            raise UnknownMineError(f"No registry entry for {url}")
        return namespace.strip()

    async def list_instances(self) -> list[MineInstance]:
        """Fetch the current instance catalog, in registry order."""
        payload = await self._get("/instances")
        raw_instances = payload.get("instances")
        if not isinstance(raw_instances, list):
            raise RegistryError("GET /instances returned no instances list")
        instances: list[MineInstance] = []
        for raw in raw_instances:
            instance = parse_instance(raw)
            if instance is None:
                logger.warning("Skipping malformed registry instance", entry=str(raw)[:200])
                continue
            instances.append(instance)
        return instances

    async def neighbour_groups_of(self, namespace: str) -> frozenset[str]:
        """Neighbour groups declared by the instance with ``namespace``."""
        for instance in await self.list_instances():
            if instance.namespace == namespace:
                return instance.neighbours
        raise UnknownMineError(f"Namespace {namespace!r} is not in the registry")

    async def instances_in_group(self, group: str) -> list[MineInstance]:
        """All catalog instances that belong to neighbour ``group``."""
        return [i for i in await self.list_instances() if i.in_group(group)]


_registry: RegistryClient | None = None


def get_registry_client() -> RegistryClient:
    """Get the global registry client."""
    global _registry
    if _registry is None:
        _registry = RegistryClient()
    return _registry
