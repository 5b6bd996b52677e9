"""In-memory stand-ins for mine query clients and the registry."""

from __future__ import annotations

from typing import TypeAlias

import asyncio
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from mine_homologues.domain.homology.models import MineInstance
from mine_homologues.integrations.intermine.query import PathQuery
from mine_homologues.platform.errors import UnknownMineError
from mine_homologues.platform.types import JSONObject


def gene_row(
    symbol: str | None,
    organism: str,
    *,
    primary: str | None = None,
    secondary: str | None = None,
    short_name: str | None = None,
) -> JSONObject:
    return {
        "class": "Gene",
        "symbol": symbol,
        "primaryIdentifier": primary,
        "secondaryIdentifier": secondary,
        "organism": {"name": organism, "shortName": short_name or organism},
    }


def make_instance(
    namespace: str,
    neighbours: Sequence[str] = (),
    *,
    name: str | None = None,
    color: str | None = None,
) -> MineInstance:
    return MineInstance(
        namespace=namespace,
        name=name or namespace.capitalize(),
        url=f"https://{namespace}.example.org/{namespace}",
        neighbours=frozenset(neighbours),
        colors={"header": {"main": color}} if color else None,
    )


Behaviour: TypeAlias = Sequence[JSONObject] | Exception | Callable[[PathQuery], object]


@dataclass
class FakeMineClient:
    """Answers gene-by-id lookups and homologue queries from fixed data."""

    root: str
    genes: Mapping[int, JSONObject] = field(default_factory=dict)
    homologues: Behaviour = ()
    gate: asyncio.Event | None = None
    queries: list[PathQuery] = field(default_factory=list)
    completed: int = 0
    finished: asyncio.Event = field(default_factory=asyncio.Event)

    async def records(self, query: PathQuery) -> list[JSONObject]:
        self.queries.append(query)
        try:
            return await self._answer(query)
        finally:
            self.finished.set()

    async def _answer(self, query: PathQuery) -> list[JSONObject]:
        # Held until the test opens the gate.
        if self.gate is not None:
            await self.gate.wait()
        constraint = query.where[0]
        if constraint.path == "id":
            row = self.genes.get(int(constraint.value))
            self.completed += 1
            return [row] if row is not None else []
        behaviour = self.homologues
        if isinstance(behaviour, Exception):
            raise behaviour
        if callable(behaviour):
            behaviour = behaviour(query)  # type: ignore[assignment]
        self.completed += 1
        return list(behaviour)  # type: ignore[arg-type]


class FakeClientPool:
    """MineClientPool lookalike keyed by mine URL."""

    def __init__(self, clients: Mapping[str, FakeMineClient]) -> None:
        self._clients = dict(clients)

    def get_client(self, root: str) -> FakeMineClient:
        return self._clients[root.rstrip("/")]

    async def close_all(self) -> None:
        return None


class FakeRegistry:
    """RegistryClient lookalike over a fixed catalog."""

    def __init__(
        self,
        instances: Sequence[MineInstance],
        *,
        namespaces: Mapping[str, str] | None = None,
        group_errors: Mapping[str, Exception] | None = None,
    ) -> None:
        self.instances = list(instances)
        self.namespaces = (
            dict(namespaces)
            if namespaces is not None
            else {i.url: i.namespace for i in self.instances}
        )
        self.group_errors = dict(group_errors or {})
        self.catalog_fetches = 0

    async def resolve_namespace(self, url: str) -> str:
        try:
            return self.namespaces[url]
        except KeyError:
            raise UnknownMineError(f"No registry entry for {url}") from None

    async def list_instances(self) -> list[MineInstance]:
        self.catalog_fetches += 1
        await asyncio.sleep(0)
        return list(self.instances)

    async def neighbour_groups_of(self, namespace: str) -> frozenset[str]:
        for instance in await self.list_instances():
            if instance.namespace == namespace:
                return instance.neighbours
        raise UnknownMineError(f"Namespace {namespace!r} is not in the registry")

    async def instances_in_group(self, group: str) -> list[MineInstance]:
        if group in self.group_errors:
            raise self.group_errors[group]
        return [i for i in await self.list_instances() if i.in_group(group)]
