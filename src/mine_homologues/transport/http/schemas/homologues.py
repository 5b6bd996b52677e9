"""Homologue lookup request/response DTOs."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GeneIdentityResponse(BaseModel):
    symbol: str
    organism: str


class LinkResponse(BaseModel):
    text: str
    href: str


class MineHomologuesResponse(BaseModel):
    """Homologues found on one mine (display-capped)."""

    namespace: str
    name: str
    color: str
    loading: bool = False
    homologues: list[LinkResponse] = Field(default_factory=list)
    show_all: LinkResponse | None = Field(default=None, alias="showAll")

    model_config = {"populate_by_name": True}


class HomologuesResponse(BaseModel):
    """Final state of a homologue lookup."""

    gene: GeneIdentityResponse
    namespace: str
    mines: list[MineHomologuesResponse] = Field(default_factory=list)
    unavailable: list[str] = Field(default_factory=list)
    note: str | None = None

    model_config = {"populate_by_name": True}
