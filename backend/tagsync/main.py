from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import tagsync.models  # noqa: F401 — register SQLModel tables

from tagsync.config import get_settings
from tagsync.db import create_db_and_tables
from tagsync.routers import health, shared_tags, sync, tags


def configure_logging(level: str) -> None:
    """Send records to stderr and set the root level for every logger."""
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    create_db_and_tables()
    logging.getLogger(__name__).info("TagSync started (db=%s)", settings.db_url.split("://")[0])

    yield


app = FastAPI(
    title="TagSync",
    description="Multi-device tag storage with last-write-wins sync",
    version="0.1.0",
    lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[f"https://{settings.domain}", *settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(tags.router)
app.include_router(shared_tags.router)
app.include_router(sync.router)
