"""Per-mine homologue queries with timeout and failure absorption."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from functools import partial
from typing import Literal

from mine_homologues.domain.homology.models import (
    GeneIdentity,
    HomologueRecord,
    MineInstance,
)
from mine_homologues.integrations.intermine.client import MineClientPool
from mine_homologues.integrations.intermine.query import homologues_query
from mine_homologues.platform.config import get_settings
from mine_homologues.platform.logging import get_logger
from mine_homologues.services.homology.filters import (
    homologue_filter,
    parse_homologue,
    sort_by_secondary_identifier,
)

logger = get_logger(__name__)

DEFAULT_HOMOLOGUE_PATH = "homologues.homologue"

# Mines whose data model names the homologue relationship differently.
# PhytoMine uses the American spelling and a different path.
HOMOLOGUE_PATHS: Mapping[str, str] = {
    "phytomine": "homolog.gene",
}

FailureReason = Literal["timeout", "error"]


@dataclass(frozen=True, slots=True)
class FetchFailure:
    reason: FailureReason
    detail: str


@dataclass(frozen=True, slots=True)
class FetchOutcome:
    """Result of one homologue fetch.

    A failed fetch carries no homologues; consumers treat it exactly like an
    empty result. ``failure`` exists for logging only.
    """

    homologues: tuple[HomologueRecord, ...] = ()
    failure: FetchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _discard_late_result(namespace: str, task: asyncio.Task[list[HomologueRecord]]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    logger.debug(
        "Discarded late homologue response",
        namespace=namespace,
        error=str(exc) if exc else None,
    )


class HomologueFetcher:
    """Query one mine for the homologues of a gene."""

    def __init__(
        self,
        clients: MineClientPool,
        *,
        timeout_seconds: float | None = None,
        path_overrides: Mapping[str, str] | None = None,
    ) -> None:
        settings = get_settings()
        self._clients = clients
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.homologue_query_timeout_seconds
        )
        overrides = (
            path_overrides
            if path_overrides is not None
            else settings.homologue_path_overrides
        )
        self._paths: dict[str, str] = {**HOMOLOGUE_PATHS, **overrides}

    def path_for(self, namespace: str) -> str:
        """Homologue field path in the query dialect of ``namespace``."""
        return self._paths.get(namespace, DEFAULT_HOMOLOGUE_PATH)

    async def _query(self, symbol: str, instance: MineInstance) -> list[HomologueRecord]:
        client = self._clients.get_client(instance.url)
        query = homologues_query(symbol, self.path_for(instance.namespace))
        rows = await client.records(query)
        parsed = (parse_homologue(row) for row in rows)
        return sort_by_secondary_identifier(h for h in parsed if h is not None)

    async def fetch(
        self,
        identity: GeneIdentity,
        instance: MineInstance,
        *,
        own_namespace: str,
    ) -> FetchOutcome:
        """Fetch, sort and filter the homologues of ``identity`` on ``instance``.

        Never raises for per-mine problems: a timeout or any query error
        yields an outcome with no homologues. The underlying request is not
        cancelled on timeout; its eventual result is discarded.
        """
        task = asyncio.ensure_future(self._query(identity.symbol, instance))
        try:
            homologues = await asyncio.wait_for(
                asyncio.shield(task), timeout=self.timeout_seconds
            )
        except TimeoutError:
            task.add_done_callback(partial(_discard_late_result, instance.namespace))
            logger.warning(
                "Homologue query timed out",
                namespace=instance.namespace,
                timeout_seconds=self.timeout_seconds,
            )
            return FetchOutcome(
                failure=FetchFailure(
                    reason="timeout",
                    detail=f"no response within {self.timeout_seconds}s",
                )
            )
        except asyncio.CancelledError:
            task.add_done_callback(partial(_discard_late_result, instance.namespace))
            raise
        except Exception as exc:
            logger.warning(
                "Homologue query failed",
                namespace=instance.namespace,
                error=str(exc),
                errorType=type(exc).__name__,
            )
            return FetchOutcome(failure=FetchFailure(reason="error", detail=str(exc)))

        keep = homologue_filter(
            instance, own_namespace=own_namespace, target_organism=identity.organism
        )
        kept = tuple(h for h in homologues if keep(h))
        logger.info(
            "Homologue query finished",
            namespace=instance.namespace,
            received=len(homologues),
            kept=len(kept),
        )
        return FetchOutcome(homologues=kept)
