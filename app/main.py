"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_settings
from app.database import async_session, engine, init_db
from app.local_backend import LocalBackend
from app.routers import auth, bookmarks

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    await init_db(engine)
    app.state.backend = LocalBackend(async_session)
    yield


app = FastAPI(
    title="Smart Bookmarks",
    description="Save personal links and keep every open session in sync",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(auth.router)
app.include_router(bookmarks.router)


@app.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok"}
