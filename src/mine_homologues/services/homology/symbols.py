"""Gene symbol resolution with identifier fallbacks."""

from __future__ import annotations

from collections.abc import Mapping

from mine_homologues.domain.homology.models import GeneIdentity
from mine_homologues.integrations.intermine.client import MineServiceClient
from mine_homologues.integrations.intermine.query import gene_by_id_query
from mine_homologues.platform.errors import GeneNotFoundError
from mine_homologues.platform.logging import get_logger

logger = get_logger(__name__)

SYMBOL_FIELDS = ("symbol", "primaryIdentifier", "secondaryIdentifier")


def clean_text(value: object) -> str | None:
    """Stripped string form of ``value``; None for None or blank."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def gene_to_symbol(record: Mapping[str, object]) -> str | None:
    """Pick the display symbol of a gene record.

    ``symbol`` wins, then ``primaryIdentifier``, then ``secondaryIdentifier``.
    Blank values count as missing.
    """
    for key in SYMBOL_FIELDS:
        text = clean_text(record.get(key))
        if text:
            return text
    return None


def organism_name(record: Mapping[str, object]) -> str:
    organism = record.get("organism")
    if isinstance(organism, Mapping):
        return clean_text(organism.get("name")) or ""
    return ""


async def resolve_gene_identity(
    client: MineServiceClient, gene_id: int
) -> GeneIdentity:
    """Resolve an internal gene id on ``client``'s mine to symbol and organism."""
    records = await client.records(gene_by_id_query(gene_id))
    if not records:
        raise GeneNotFoundError(gene_id, client.root)
    record = records[0]
    symbol = gene_to_symbol(record)
    if symbol is None:
        raise GeneNotFoundError(gene_id, client.root)
    identity = GeneIdentity(symbol=symbol, organism=organism_name(record))
    logger.info(
        "Resolved gene identity",
        gene_id=gene_id,
        symbol=identity.symbol,
        organism=identity.organism,
    )
    return identity
