"""Homologue list normalisation and the cross-organism self-match policy."""

from __future__ import annotations

from typing import TypeAlias

from collections.abc import Callable, Iterable

from mine_homologues.domain.homology.models import (
    HomologueRecord,
    MineInstance,
    Organism,
)
from mine_homologues.platform.types import JSONObject
from mine_homologues.services.homology.symbols import clean_text, gene_to_symbol

HomologueFilter: TypeAlias = Callable[[HomologueRecord], bool]


def parse_homologue(record: JSONObject) -> HomologueRecord | None:
    """Normalise one mine record, or None when it has no usable identifier."""
    symbol = gene_to_symbol(record)
    if symbol is None:
        return None
    organism_raw = record.get("organism")
    organism = organism_raw if isinstance(organism_raw, dict) else {}
    return HomologueRecord(
        symbol=symbol,
        primary_identifier=clean_text(record.get("primaryIdentifier")),
        secondary_identifier=clean_text(record.get("secondaryIdentifier")),
        organism=Organism(
            name=clean_text(organism.get("name")) or "",
            short_name=clean_text(organism.get("shortName")) or "",
        ),
    )


def sort_by_secondary_identifier(
    homologues: Iterable[HomologueRecord],
) -> list[HomologueRecord]:
    """Ascending by secondary identifier; records without one go last."""
    return sorted(
        homologues,
        key=lambda h: (h.secondary_identifier is None, h.secondary_identifier or ""),
    )


def keep_homologue(
    homologue: HomologueRecord,
    *,
    instance: MineInstance,
    own_namespace: str,
    target_organism: str,
) -> bool:
    """Keep if queried on the caller's own mine, or from a different organism."""
    return (
        instance.namespace == own_namespace
        or homologue.organism.name != target_organism
    )


def homologue_filter(
    instance: MineInstance, *, own_namespace: str, target_organism: str
) -> HomologueFilter:
    """Partially apply :func:`keep_homologue` for one queried mine."""

    def _keep(homologue: HomologueRecord) -> bool:
        return keep_homologue(
            homologue,
            instance=instance,
            own_namespace=own_namespace,
            target_organism=target_organism,
        )

    return _keep
