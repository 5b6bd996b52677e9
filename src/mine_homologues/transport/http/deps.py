"""Dependency injection for HTTP routes."""

from typing import Annotated

from fastapi import Depends

from mine_homologues.integrations.intermine.client import get_mine_client_pool
from mine_homologues.integrations.registry.client import get_registry_client
from mine_homologues.services.homology import HomologueAggregator


def get_homologue_aggregator() -> HomologueAggregator:
    """Build an aggregator over the shared registry and mine clients."""
    return HomologueAggregator(
        registry=get_registry_client(),
        clients=get_mine_client_pool(),
    )


Aggregator = Annotated[HomologueAggregator, Depends(get_homologue_aggregator)]
