"""FastAPI application serving the awareness metrics."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.responses import HTMLResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from es_awareness_exporter.factory import Exporter

INDEX_PAGE = """<html>
    <head><title>ES Shard Allocation Awareness Exporter</title></head>
    <body>
    <h1>ElasticSearch shard allocation awareness exporter</h1>
    <p><a href='metrics'>Metrics</a></p>
    </body>
    </html>"""


def create_app(exporter: Exporter, run_refresh: bool = True) -> FastAPI:
    """
    Build the HTTP surface around an exporter.

    Args:
        exporter: Wired exporter from create_exporter().
        run_refresh: Start the refresh loop as a background task for the
            lifetime of the app. Tests that publish snapshots directly turn
            this off.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup/shutdown."""
        refresh_task: asyncio.Task | None = None
        if run_refresh:
            refresh_task = asyncio.create_task(exporter.loop.run())

        yield

        try:
            if refresh_task:
                exporter.loop.stop()
                refresh_task.cancel()
                try:
                    await refresh_task
                except asyncio.CancelledError:
                    pass
        finally:
            await exporter.client.http.aclose()

    app = FastAPI(
        title="ES Shard Allocation Awareness Exporter",
        description="Zone awareness of Elasticsearch shard placement as Prometheus metrics",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Render the current snapshot in Prometheus text exposition format."""
        return Response(
            content=generate_latest(exporter.registry),
            media_type=CONTENT_TYPE_LATEST,
        )

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def index() -> str:
        return INDEX_PAGE

    @app.get("/health")
    async def health_check():
        """Health check endpoint. Reports refresh loop progress, never fails."""
        snapshot = exporter.store.read()
        return {
            "status": "ok",
            "cluster": snapshot.cluster_name,
            "snapshot_age_seconds": exporter.store.age_seconds(),
            "cycles_completed": exporter.loop.cycles_completed,
            "cycles_failed": exporter.loop.cycles_failed,
            "last_error": exporter.loop.last_error,
        }

    return app
