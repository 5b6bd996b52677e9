"""Lifecycle of the shared registry and mine clients."""

from __future__ import annotations

from mine_homologues.integrations.intermine.client import get_mine_client_pool
from mine_homologues.integrations.registry.client import get_registry_client


async def close_all_clients() -> None:
    """Close the registry client and every cached mine client."""
    await get_registry_client().close()
    await get_mine_client_pool().close_all()
