"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from query_router.config import get_settings
from query_router.infrastructure.dependencies import get_query_service
from query_router.infrastructure.logging.log_config import setup_logging
from query_router.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: configure logging and load the lexicon before serving queries."""
    setup_logging()

    service = get_query_service()
    summary = service.lexicon.summary()
    logger.info(
        "Query router ready — lexicon=%s, corrections=%d, parts=%d, create=%d, contract=%d",
        summary["source"],
        summary["corrections"],
        summary["parts_keywords"],
        summary["create_keywords"],
        summary["contract_keywords"],
    )
    if not service.self_check():
        logger.warning("Pipeline self-check failed at startup")

    yield


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "query_router.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
