"""Configuration endpoint for pages and CLIs that build enrollment clients."""

from __future__ import annotations

import logging
from typing import Any
from dataclasses import asdict
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

from tsslink.state.settings import AppSettings
from tsslink.runtime.settings import load_settings
from tsslink.runtime.logging import configure_logging

logger = logging.getLogger(__name__)

configure_logging()


@asynccontextmanager
async def _lifespan(app: FastAPI):
    settings = load_settings()
    app.state.settings = settings
    logger.info(
        "endpoints: manager=%s devices=%d",
        settings.endpoints.manager_url,
        len(settings.endpoints.devices),
    )
    yield


app = FastAPI(default_response_class=ORJSONResponse, lifespan=_lifespan)


def _settings(request: Request) -> AppSettings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise RuntimeError("Settings are not initialized")
    return settings


@app.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/endpoints")
async def endpoints(request: Request) -> dict[str, Any]:
    settings = _settings(request)
    return {
        "manager": {"url": settings.endpoints.manager_url},
        "devices": [asdict(device) for device in settings.endpoints.devices],
        "workflow": asdict(settings.workflow),
    }


__all__ = ["app"]
