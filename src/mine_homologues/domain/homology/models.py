"""Data model for federated homologue lookups."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from mine_homologues.platform.types import JSONObject

DEFAULT_HEADER_COLOR = "#000"


@dataclass(frozen=True, slots=True)
class GeneIdentity:
    """Stable identity of the gene whose homologues are looked up."""

    symbol: str
    organism: str


@dataclass(frozen=True, slots=True)
class MineInstance:
    """One mine as published by the registry.

    Identity is the namespace; two instances with the same namespace are the
    same mine even if other registry fields changed between snapshots.
    """

    namespace: str
    name: str
    url: str
    neighbours: frozenset[str] = frozenset()
    colors: JSONObject | None = None

    @property
    def header_color(self) -> str:
        colors = self.colors if isinstance(self.colors, dict) else {}
        header = colors.get("header")
        main = header.get("main") if isinstance(header, dict) else None
        return main if isinstance(main, str) and main else DEFAULT_HEADER_COLOR

    def in_group(self, group: str) -> bool:
        return group in self.neighbours


@dataclass(frozen=True, slots=True)
class Organism:
    name: str
    short_name: str = ""


@dataclass(frozen=True, slots=True)
class HomologueRecord:
    """A gene reported as a homologue by one mine."""

    symbol: str
    primary_identifier: str | None
    secondary_identifier: str | None
    organism: Organism

    def to_dict(self) -> JSONObject:
        return {
            "symbol": self.symbol,
            "primaryIdentifier": self.primary_identifier,
            "secondaryIdentifier": self.secondary_identifier,
            "organism": {
                "name": self.organism.name,
                "shortName": self.organism.short_name,
            },
        }


class InstanceStatus(StrEnum):
    PENDING = "pending"
    LOADED = "loaded"
    EMPTY = "empty"

    @property
    def is_final(self) -> bool:
        return self is not InstanceStatus.PENDING


class CellAlreadyFinalError(RuntimeError):
    """Raised when a finalised InstanceResult is asked to transition again."""


@dataclass(slots=True)
class InstanceResult:
    """Aggregation cell for one queried mine.

    Created ``PENDING`` when the mine is selected, then finalised exactly once
    to ``LOADED`` (non-empty list) or ``EMPTY`` (empty list or absorbed
    failure).
    """

    instance: MineInstance
    status: InstanceStatus = InstanceStatus.PENDING
    homologues: tuple[HomologueRecord, ...] = field(default_factory=tuple)

    def finalise(self, homologues: tuple[HomologueRecord, ...]) -> InstanceStatus:
        if self.status.is_final:
            raise CellAlreadyFinalError(
                f"{self.instance.namespace} is already {self.status.value}"
            )
        self.homologues = homologues
        self.status = InstanceStatus.LOADED if homologues else InstanceStatus.EMPTY
        return self.status
