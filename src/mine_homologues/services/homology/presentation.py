"""View model built from the homologue event stream.

Mirrors what the mine widget shows: one entry per mine in selection order
(name, header colour, loading marker, homologue links, optional "Show all"
link) and a single note listing the mines without homologues. Mines that end
up empty leave the entry list and appear only in the note.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mine_homologues.domain.homology.events import (
    HomologueEvent,
    InstanceEmpty,
    InstanceLoaded,
    InstanceSelected,
    UnavailableNoteUpdated,
)
from mine_homologues.domain.homology.models import MineInstance
from mine_homologues.platform.types import JSONObject
from mine_homologues.services.homology.links import create_portal_url


@dataclass(frozen=True, slots=True)
class Link:
    text: str
    href: str

    def to_dict(self) -> JSONObject:
        return {"text": self.text, "href": self.href}


@dataclass(slots=True)
class MineView:
    instance: MineInstance
    loading: bool = True
    links: list[Link] = field(default_factory=list)
    show_all: Link | None = None

    def to_dict(self) -> JSONObject:
        return {
            "namespace": self.instance.namespace,
            "name": self.instance.name,
            "color": self.instance.header_color,
            "loading": self.loading,
            "homologues": [link.to_dict() for link in self.links],
            "showAll": self.show_all.to_dict() if self.show_all else None,
        }


def loaded_view(event: InstanceLoaded) -> MineView:
    instance = event.instance
    display = event.display
    links = [
        Link(
            text=f"{h.symbol} ({h.organism.short_name})",
            href=create_portal_url(instance.url, h.symbol),
        )
        for h in display.shown
    ]
    show_all = None
    if display.has_more:
        show_all = Link(
            text=f"Show all ({display.total}+)",
            href=create_portal_url(instance.url, [h.symbol for h in display.homologues]),
        )
    return MineView(instance=instance, loading=False, links=links, show_all=show_all)


class HomologueView:
    """Incrementally updated display state for one lookup."""

    def __init__(self) -> None:
        self.mines: dict[str, MineView] = {}
        self.unavailable: tuple[str, ...] = ()
        self.note: str | None = None

    def apply(self, event: HomologueEvent) -> None:
        match event:
            case InstanceSelected(instance=instance):
                self.mines[instance.namespace] = MineView(instance=instance)
            case InstanceLoaded():
                self.mines[event.instance.namespace] = loaded_view(event)
            case InstanceEmpty(instance=instance):
                self.mines.pop(instance.namespace, None)
            case UnavailableNoteUpdated():
                self.unavailable = event.names
                self.note = event.text

    def to_dict(self) -> JSONObject:
        return {
            "mines": [view.to_dict() for view in self.mines.values()],
            "unavailable": list(self.unavailable),
            "note": self.note,
        }
