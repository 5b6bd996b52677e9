"""Federated homologue lookup.

Resolves a gene on the calling mine, discovers neighbouring mines through the
InterMine registry and queries each of them concurrently. Results stream out
as events (see :mod:`mine_homologues.domain.homology.events`) in completion
order; slow or failing mines only ever show up as "no homologues".
"""

from .aggregator import AggregationState, HomologueAggregator
from .fetcher import HomologueFetcher
from .presentation import HomologueView
from .symbols import gene_to_symbol, resolve_gene_identity

__all__ = [
    "AggregationState",
    "HomologueAggregator",
    "HomologueFetcher",
    "HomologueView",
    "gene_to_symbol",
    "resolve_gene_identity",
]
