"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from docextract.api.documents import documents_router
from docextract.api.errors import register_error_handlers
from docextract.bootstrap import Container, build_container
from docextract.config.settings import Settings
from docextract.logging.logger import Log


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Build the API. Tests pass a prebuilt container; production builds one from env."""
    if container is None:
        settings = Settings()
        Log.configure(settings.log_level)
        container = build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        container.start()
        try:
            yield
        finally:
            container.stop()

    app = FastAPI(
        title="docextract",
        description="Document upload and asynchronous content extraction",
        version="1.0.0",
        docs_url="/docs" if container.settings.app_env == "dev" else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.container = container

    register_error_handlers(app)
    app.include_router(documents_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
