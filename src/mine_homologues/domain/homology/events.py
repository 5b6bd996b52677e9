"""Events emitted by the homologue aggregation stream.

Per selected mine the stream carries ``InstanceSelected`` followed by exactly
one of ``InstanceLoaded`` or ``InstanceEmpty``. Every ``InstanceEmpty`` is
followed by an ``UnavailableNoteUpdated`` carrying the complete current list
of empty mines.
"""

from __future__ import annotations

from typing import TypeAlias

from dataclasses import dataclass

from mine_homologues.domain.homology.models import HomologueRecord, MineInstance
from mine_homologues.platform.types import JSONObject

INSTANCE_SELECTED = "instance_selected"
INSTANCE_LOADED = "instance_loaded"
INSTANCE_EMPTY = "instance_empty"
UNAVAILABLE_NOTE = "unavailable_note"

UNAVAILABLE_NOTE_PREFIX = "No homologues available for: "


def _instance_data(instance: MineInstance) -> JSONObject:
    return {
        "namespace": instance.namespace,
        "name": instance.name,
        "url": instance.url,
        "color": instance.header_color,
    }


@dataclass(frozen=True, slots=True)
class HomologueDisplay:
    """Display-capped view of a homologue list.

    ``shown`` is the default payload; ``homologues`` keeps the full list so an
    expansion affordance can address every entry.
    """

    homologues: tuple[HomologueRecord, ...]
    limit: int

    @property
    def shown(self) -> tuple[HomologueRecord, ...]:
        return self.homologues[: self.limit]

    @property
    def total(self) -> int:
        return len(self.homologues)

    @property
    def has_more(self) -> bool:
        return self.total > self.limit


@dataclass(frozen=True, slots=True)
class InstanceSelected:
    instance: MineInstance

    type = INSTANCE_SELECTED

    def to_dict(self) -> JSONObject:
        return {"instance": _instance_data(self.instance)}


@dataclass(frozen=True, slots=True)
class InstanceLoaded:
    instance: MineInstance
    display: HomologueDisplay

    type = INSTANCE_LOADED

    @property
    def homologues(self) -> tuple[HomologueRecord, ...]:
        return self.display.homologues

    def to_dict(self) -> JSONObject:
        return {
            "instance": _instance_data(self.instance),
            "homologues": [h.to_dict() for h in self.display.shown],
            "allHomologues": [h.to_dict() for h in self.display.homologues],
            "total": self.display.total,
            "hasMore": self.display.has_more,
        }


@dataclass(frozen=True, slots=True)
class InstanceEmpty:
    instance: MineInstance

    type = INSTANCE_EMPTY

    def to_dict(self) -> JSONObject:
        return {"instance": _instance_data(self.instance)}


@dataclass(frozen=True, slots=True)
class UnavailableNoteUpdated:
    """Replacement content for the "no homologues available" note."""

    names: tuple[str, ...]

    type = UNAVAILABLE_NOTE

    @property
    def text(self) -> str:
        return UNAVAILABLE_NOTE_PREFIX + ", ".join(self.names)

    def to_dict(self) -> JSONObject:
        return {"names": list(self.names), "text": self.text}


HomologueEvent: TypeAlias = (
    InstanceSelected | InstanceLoaded | InstanceEmpty | UnavailableNoteUpdated
)
