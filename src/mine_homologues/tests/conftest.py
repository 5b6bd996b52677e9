import os
from collections.abc import AsyncGenerator, Generator

import httpx
import pytest
import respx
from fastapi import FastAPI


@pytest.fixture(scope="session", autouse=True)
def _test_env_defaults() -> None:
    # Keep tests deterministic and pointed at mocked hosts only.
    os.environ.setdefault("REGISTRY_URL", "https://registry.test/service")
    os.environ.setdefault("LOG_FORMAT", "console")
    os.environ.setdefault("HOMOLOGUE_QUERY_TIMEOUT_SECONDS", "30")
    os.environ.setdefault("HOMOLOGUE_DISPLAY_LIMIT", "5")


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None]:
    from mine_homologues.platform.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
async def _close_clients_after_test() -> AsyncGenerator[None]:
    """Close and forget shared httpx clients after each test.

    The registry client and the mine client pool cache httpx clients; reusing
    them on the next test's event loop fails once the old loop is gone.
    """
    yield
    import mine_homologues.integrations.intermine.client as mine_client
    import mine_homologues.integrations.registry.client as registry_client
    from mine_homologues.integrations.factory import close_all_clients

    await close_all_clients()
    mine_client._pool = None
    registry_client._registry = None


@pytest.fixture
def mock_http() -> Generator[respx.Router]:
    """respx router for outbound registry and mine requests."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def app() -> FastAPI:
    from mine_homologues.main import create_app

    return create_app()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
