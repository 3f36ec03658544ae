"""
FastAPI application entry point for the contact manager.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from contacthub import realtime
from contacthub.config import get_settings
from contacthub.dependencies import get_storage_client
from contacthub.routes import router
from contacthub.storage import LocalDiskStorageClient


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Contact Hub", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(realtime.router, prefix=settings.api_prefix)

    storage = get_storage_client()
    if isinstance(storage, LocalDiskStorageClient):
        Path(storage.directory).mkdir(parents=True, exist_ok=True)
        app.mount(
            storage.url_prefix,
            StaticFiles(directory=storage.directory),
            name="uploads",
        )
    return app


app = create_app()
