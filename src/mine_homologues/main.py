"""FastAPI application entrypoint."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import cast
from uuid import uuid4

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response

from mine_homologues import __version__
from mine_homologues.integrations.factory import close_all_clients
from mine_homologues.platform.config import get_settings
from mine_homologues.platform.context import request_id_ctx
from mine_homologues.platform.errors import (
    AppError,
    app_error_handler,
    http_exception_handler,
    request_validation_handler,
)
from mine_homologues.platform.logging import get_logger, setup_logging
from mine_homologues.transport.http.routers import health, homologues

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan handler."""
    settings = get_settings()

    setup_logging()
    logger.info(
        "Starting mine-homologues API",
        version=__version__,
        env=settings.api_env,
        registry_url=settings.registry_url,
    )

    yield

    logger.info("Shutting down mine-homologues API")
    await close_all_clients()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="mine-homologues API",
        description="Homologue lookup across neighbouring InterMine instances",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.api_docs_enabled else None,
        redoc_url="/redoc" if settings.api_docs_enabled else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id(
        request: StarletteRequest,
        call_next: Callable[[StarletteRequest], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request_id_ctx.set(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_exception_handler(
        AppError,
        cast(
            Callable[[StarletteRequest, Exception], Awaitable[Response]],
            app_error_handler,
        ),
    )
    app.add_exception_handler(
        HTTPException,
        cast(
            Callable[[StarletteRequest, Exception], Awaitable[Response]],
            http_exception_handler,
        ),
    )
    app.add_exception_handler(
        RequestValidationError,
        cast(
            Callable[[StarletteRequest, Exception], Awaitable[Response]],
            request_validation_handler,
        ),
    )

    app.include_router(health.router)
    app.include_router(homologues.router)

    return app


app = create_app()


def main() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "mine_homologues.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=bool(settings.is_development),
    )


if __name__ == "__main__":
    main()
