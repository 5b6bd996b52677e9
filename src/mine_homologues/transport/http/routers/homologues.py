"""Homologue lookup endpoints (JSON and SSE)."""

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import StreamingResponse

from mine_homologues.platform.errors import AppError, problem_payload
from mine_homologues.platform.logging import get_logger
from mine_homologues.services.homology import AggregationState, HomologueView
from mine_homologues.transport.http.deps import Aggregator
from mine_homologues.transport.http.schemas.homologues import (
    GeneIdentityResponse,
    HomologuesResponse,
    MineHomologuesResponse,
)
from mine_homologues.transport.http.sse import sse_done, sse_error, sse_event

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["homologues"])

ServiceRoot = Annotated[
    str,
    Query(
        alias="serviceRoot",
        min_length=1,
        description="API root of the mine the gene belongs to.",
    ),
]
GeneId = Annotated[
    int, Query(alias="geneId", description="Internal gene object id on that mine.")
]


@router.get("/homologues", response_model=HomologuesResponse)
async def get_homologues(
    aggregator: Aggregator,
    service_root: ServiceRoot,
    gene_id: GeneId,
) -> HomologuesResponse:
    """Look up homologues on all neighbouring mines and return the final view."""
    state = AggregationState()
    view = HomologueView()
    async for event in aggregator.stream(service_root, gene_id, state=state):
        view.apply(event)

    identity = state.identity
    return HomologuesResponse(
        gene=GeneIdentityResponse(
            symbol=identity.symbol if identity else "",
            organism=identity.organism if identity else "",
        ),
        namespace=state.namespace or "",
        mines=[
            MineHomologuesResponse.model_validate(mine.to_dict())
            for mine in view.mines.values()
        ],
        unavailable=list(view.unavailable),
        note=view.note,
    )


@router.get(
    "/homologues/stream",
    response_class=StreamingResponse,
    responses={
        200: {
            "description": "Successful Response",
            "content": {
                "text/event-stream": {"schema": {"type": "string"}},
            },
        }
    },
)
async def stream_homologues(
    request: Request,
    aggregator: Aggregator,
    service_root: ServiceRoot,
    gene_id: GeneId,
) -> StreamingResponse:
    """Stream per-mine homologue events as Server-Sent Events."""

    async def _events() -> AsyncIterator[str]:
        try:
            async for event in aggregator.stream(service_root, gene_id):
                yield sse_event(event.type, event.to_dict())
        except AppError as exc:
            logger.warning(
                "Homologue stream aborted", code=exc.code.value, detail=exc.detail
            )
            yield sse_error(problem_payload(exc, str(request.url)))
            return
        yield sse_done()

    return StreamingResponse(
        _events(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
