"""End-to-end homologue lookup across neighbouring mines.

The pipeline runs: gene id -> symbol/organism -> caller namespace ->
neighbour groups -> instances per group -> one homologue fetch per instance.
Group discovery and fetches run concurrently on the event loop; each mine's
events are emitted as soon as that mine completes, in completion order.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from mine_homologues.domain.homology.events import (
    HomologueEvent,
    InstanceEmpty,
    InstanceLoaded,
    InstanceSelected,
    UnavailableNoteUpdated,
)
from mine_homologues.domain.homology.models import (
    GeneIdentity,
    HomologueRecord,
    InstanceResult,
    InstanceStatus,
    MineInstance,
)
from mine_homologues.integrations.intermine.client import (
    MineClientPool,
    get_mine_client_pool,
)
from mine_homologues.integrations.registry.client import RegistryClient
from mine_homologues.platform.config import get_settings
from mine_homologues.platform.context import service_root_ctx
from mine_homologues.platform.logging import get_logger
from mine_homologues.services.homology.display import truncate_homologues
from mine_homologues.services.homology.fetcher import HomologueFetcher
from mine_homologues.services.homology.symbols import resolve_gene_identity

logger = get_logger(__name__)


@dataclass
class AggregationState:
    """Per-invocation result cells, keyed by namespace in selection order."""

    identity: GeneIdentity | None = None
    namespace: str | None = None
    cells: dict[str, InstanceResult] = field(default_factory=dict)
    empty_names: list[str] = field(default_factory=list)

    def select(self, instance: MineInstance) -> InstanceResult | None:
        """Create a pending cell, or return None if the mine was already selected."""
        if instance.namespace in self.cells:
            return None
        cell = InstanceResult(instance=instance)
        self.cells[instance.namespace] = cell
        return cell

    def finalise(
        self, namespace: str, homologues: tuple[HomologueRecord, ...]
    ) -> InstanceStatus:
        cell = self.cells[namespace]
        status = cell.finalise(homologues)
        if status is InstanceStatus.EMPTY:
            self.empty_names.append(cell.instance.name)
        return status

    @property
    def pending(self) -> list[InstanceResult]:
        return [c for c in self.cells.values() if c.status is InstanceStatus.PENDING]

    @property
    def loaded(self) -> list[InstanceResult]:
        return [c for c in self.cells.values() if c.status is InstanceStatus.LOADED]

    @property
    def is_complete(self) -> bool:
        return not self.pending


class HomologueAggregator:
    """Drive a federated homologue lookup and stream its events."""

    def __init__(
        self,
        *,
        registry: RegistryClient,
        clients: MineClientPool | None = None,
        fetcher: HomologueFetcher | None = None,
        display_limit: int | None = None,
    ) -> None:
        self._registry = registry
        self._clients = clients or get_mine_client_pool()
        self._fetcher = fetcher or HomologueFetcher(self._clients)
        self.display_limit = (
            display_limit
            if display_limit is not None
            else get_settings().homologue_display_limit
        )
        if self.display_limit < 1:
            raise ValueError(
                f"display_limit must be at least 1, got {self.display_limit}"
            )

    async def stream(
        self,
        service_root: str,
        gene_id: int,
        *,
        state: AggregationState | None = None,
    ) -> AsyncIterator[HomologueEvent]:
        """Yield events for every mine queried for ``gene_id``'s homologues.

        Bootstrap failures (unknown gene, unknown mine, registry down) raise
        before the first event. Per-mine failures only ever show up as
        ``InstanceEmpty``.
        """
        state = state if state is not None else AggregationState()
        # Restored by value; aclose() may run in another context.
        previous_root = service_root_ctx.get()
        service_root_ctx.set(service_root)
        try:
            async with contextlib.aclosing(
                self._run(service_root, gene_id, state)
            ) as events:
                async for event in events:
                    yield event
        finally:
            service_root_ctx.set(previous_root)

    async def _run(
        self, service_root: str, gene_id: int, state: AggregationState
    ) -> AsyncIterator[HomologueEvent]:
        state.identity = await resolve_gene_identity(
            self._clients.get_client(service_root), gene_id
        )
        state.namespace = await self._registry.resolve_namespace(service_root)
        groups = await self._registry.neighbour_groups_of(state.namespace)
        logger.info(
            "Looking up homologues",
            gene_id=gene_id,
            symbol=state.identity.symbol,
            namespace=state.namespace,
            neighbour_groups=sorted(groups),
        )

        queue: asyncio.Queue[HomologueEvent | None] = asyncio.Queue()

        async def _produce_events() -> None:
            try:
                await asyncio.gather(
                    *(self._discover_group(group, state, queue) for group in groups)
                )
            finally:
                queue.put_nowait(None)

        producer = asyncio.create_task(_produce_events())
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
            await producer
        finally:
            if not producer.done():
                producer.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await producer

        logger.info(
            "Homologue lookup complete",
            namespace=state.namespace,
            instances=len(state.cells),
            loaded=len(state.loaded),
            empty=len(state.empty_names),
        )

    async def collect(self, service_root: str, gene_id: int) -> AggregationState:
        """Run the whole lookup and return the final state."""
        state = AggregationState()
        async for _ in self.stream(service_root, gene_id, state=state):
            pass
        return state

    async def _discover_group(
        self,
        group: str,
        state: AggregationState,
        queue: asyncio.Queue[HomologueEvent | None],
    ) -> None:
        try:
            instances = await self._registry.instances_in_group(group)
        except Exception as exc:
            logger.warning(
                "Neighbour group discovery failed", group=group, error=str(exc)
            )
            return

        selected: list[MineInstance] = []
        for instance in instances:
            if state.select(instance) is None:
                continue
            selected.append(instance)
            queue.put_nowait(InstanceSelected(instance))

        logger.debug(
            "Neighbour group discovered",
            group=group,
            instances=len(instances),
            selected=[i.namespace for i in selected],
        )
        await asyncio.gather(
            *(self._fetch_instance(instance, state, queue) for instance in selected)
        )

    async def _fetch_instance(
        self,
        instance: MineInstance,
        state: AggregationState,
        queue: asyncio.Queue[HomologueEvent | None],
    ) -> None:
        if state.identity is None or state.namespace is None:
            raise RuntimeError("Homologue fetch started before bootstrap finished")
        outcome = await self._fetcher.fetch(
            state.identity, instance, own_namespace=state.namespace
        )
        status = state.finalise(instance.namespace, outcome.homologues)
        if status is InstanceStatus.LOADED:
            queue.put_nowait(
                InstanceLoaded(
                    instance,
                    truncate_homologues(outcome.homologues, self.display_limit),
                )
            )
            return
        queue.put_nowait(InstanceEmpty(instance))
        queue.put_nowait(UnavailableNoteUpdated(tuple(state.empty_names)))
