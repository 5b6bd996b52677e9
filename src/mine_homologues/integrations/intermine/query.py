"""Structured gene queries and their PathQuery XML encoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal
from xml.etree import ElementTree

SortDirection = Literal["ASC", "DESC"]

DEFAULT_MODEL = "genomic"


@dataclass(frozen=True, slots=True)
class Constraint:
    path: str
    op: str
    value: str
    code: str = "A"
    extra_value: str | None = None


@dataclass(frozen=True, slots=True)
class SortOrder:
    path: str
    direction: SortDirection = "ASC"


@dataclass(frozen=True, slots=True)
class PathQuery:
    """A ``from`` / ``select`` / ``where`` / ``orderBy`` query.

    Paths are relative to ``from_`` and get qualified with it when encoded,
    so ``organism.name`` on a ``Gene`` query becomes ``Gene.organism.name``.
    """

    from_: str
    select: tuple[str, ...]
    where: tuple[Constraint, ...] = field(default_factory=tuple)
    order_by: tuple[SortOrder, ...] = field(default_factory=tuple)
    model: str = DEFAULT_MODEL

    def qualify(self, path: str) -> str:
        if path == self.from_ or path.startswith(f"{self.from_}."):
            return path
        return f"{self.from_}.{path}"

    def to_xml(self) -> str:
        root = ElementTree.Element(
            "query",
            {
                "model": self.model,
                "view": " ".join(self.qualify(p) for p in self.select),
            },
        )
        if self.order_by:
            root.set(
                "sortOrder",
                " ".join(f"{self.qualify(s.path)} {s.direction}" for s in self.order_by),
            )
        for constraint in self.where:
            attrs = {
                "path": self.qualify(constraint.path),
                "op": constraint.op,
                "value": constraint.value,
                "code": constraint.code,
            }
            if constraint.extra_value is not None:
                attrs["extraValue"] = constraint.extra_value
            ElementTree.SubElement(root, "constraint", attrs)
        return ElementTree.tostring(root, encoding="unicode")


def gene_by_id_query(gene_id: int) -> PathQuery:
    """Single-record lookup of a gene by its internal object id."""
    return PathQuery(
        from_="Gene",
        select=("symbol", "primaryIdentifier", "secondaryIdentifier", "organism.name"),
        where=(Constraint(path="id", op="=", value=str(gene_id)),),
        order_by=(SortOrder("symbol"),),
    )


def homologues_query(symbol: str, homologue_path: str) -> PathQuery:
    """Genes that are homologues of ``symbol`` along ``homologue_path``."""
    return PathQuery(
        from_="Gene",
        select=(
            "secondaryIdentifier",
            "symbol",
            "primaryIdentifier",
            "organism.name",
            "organism.shortName",
        ),
        where=(
            Constraint(path=homologue_path, op="LOOKUP", value=symbol, extra_value=""),
        ),
        order_by=(SortOrder("secondaryIdentifier"),),
    )
