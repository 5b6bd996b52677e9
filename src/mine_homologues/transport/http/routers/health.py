"""Liveness and readiness endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Response, status

from mine_homologues import __version__
from mine_homologues.integrations.registry.client import get_registry_client
from mine_homologues.platform.errors import RegistryError
from mine_homologues.platform.logging import get_logger
from mine_homologues.transport.http.schemas.health import (
    HealthResponse,
    ReadinessResponse,
)

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness: the process is up."""
    return HealthResponse(
        status="healthy", version=__version__, timestamp=datetime.now(UTC)
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(response: Response) -> ReadinessResponse:
    """Readiness: the registry answers, so lookups can bootstrap."""
    registry = get_registry_client()
    try:
        instances = await registry.list_instances()
    except RegistryError as exc:
        logger.warning("Registry not reachable", detail=exc.detail)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(
            status="unavailable",
            version=__version__,
            timestamp=datetime.now(UTC),
            registry_url=registry.base_url,
            detail=exc.detail,
        )
    return ReadinessResponse(
        status="ready",
        version=__version__,
        timestamp=datetime.now(UTC),
        registry_url=registry.base_url,
        registry_instances=len(instances),
    )
