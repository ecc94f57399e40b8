# main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from adapters.external.database.adapter_registry_repository_mongodb import AdapterRegistryRepositoryMongoDB
from adapters.entry.http.views.adapters_view import router as adapters_router
from adapters.entry.http.views.networks_view import router as networks_router
from adapters.entry.http.views.admin.admin_adapters_view import router as admin_adapters_router
from config import get_settings

logger = logging.getLogger(__name__)


def init_mongo_indexes() -> None:
    """
    Make sure the adapter registry indexes (including the uniqueness
    constraints) exist before serving any request.
    """
    # __init__ already ensures its own indexes
    AdapterRegistryRepositoryMongoDB()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context.

    Runs once on startup (before the first request) and once on shutdown.
    A missing MongoDB only degrades the registry endpoints, so startup goes on.
    """
    try:
        init_mongo_indexes()
    except PyMongoError as exc:
        logger.warning("MongoDB unavailable at startup, registry indexes not ensured: %s", exc)
    yield


def create_app() -> FastAPI:
    """
    Application factory for the Swap Adapters API.
    """
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Swap Adapters API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(adapters_router, prefix="/api")
    app.include_router(networks_router, prefix="/api")
    app.include_router(admin_adapters_router, prefix="/api")

    return app


app = create_app()
