"""Display truncation for homologue lists."""

from __future__ import annotations

from collections.abc import Sequence

from mine_homologues.domain.homology.events import HomologueDisplay
from mine_homologues.domain.homology.models import HomologueRecord
from mine_homologues.platform.config import get_settings


def truncate_homologues(
    homologues: Sequence[HomologueRecord], limit: int | None = None
) -> HomologueDisplay:
    """Cap a homologue list for display while keeping the full list addressable."""
    if limit is None:
        limit = get_settings().homologue_display_limit
    if limit < 1:
        raise ValueError(f"display limit must be at least 1, got {limit}")
    return HomologueDisplay(homologues=tuple(homologues), limit=limit)
