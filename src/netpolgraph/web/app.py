"""FastAPI application factory for the netpolgraph HTTP API."""

from __future__ import annotations

from fastapi import FastAPI

from netpolgraph import __version__
from netpolgraph.config import NetpolGraphConfig


def create_app(
    config: NetpolGraphConfig | None = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or NetpolGraphConfig.load()

    app = FastAPI(
        title="netpolgraph",
        version=__version__,
        docs_url="/api/docs",
    )
    app.state.config = config

    from netpolgraph.web.api.graph import router as graph_router
    from netpolgraph.web.api.policies import router as policies_router

    app.include_router(graph_router, prefix="/api")
    app.include_router(policies_router, prefix="/api")

    return app
