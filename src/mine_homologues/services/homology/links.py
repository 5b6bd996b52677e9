"""Portal deep links into a mine's web UI."""

from __future__ import annotations

from collections.abc import Sequence


def create_portal_url(mine_url: str, gene: str | Sequence[str]) -> str:
    """Link to one gene symbol, or to a list of symbols, on a mine's portal."""
    if isinstance(gene, str):
        exid = f"&externalid={gene}"
    else:
        exid = "&externalids=" + ",".join(gene)
    return f"{mine_url}/portal.do?class=Gene{exid}"
