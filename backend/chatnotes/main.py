"""chatnotes FastAPI application entry point."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatnotes.catalog.router import router as catalog_router
from chatnotes.catalog.store import StateStore
from chatnotes.importer.router import get_reconcile_service
from chatnotes.importer.router import router as import_router
from chatnotes.importer.service import ReconcileService
from chatnotes.storage.local import LocalVaultStorage


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Wire storage, state and the reconcile service."""
    # Load .env from backend/ directory
    load_dotenv(Path(__file__).resolve().parent.parent / ".env")

    storage = LocalVaultStorage(os.environ.get("CHATNOTES_VAULT_DIR", "vault"))
    state_store = StateStore(os.environ.get("CHATNOTES_STATE_FILE", "chatnotes.json"))

    service = ReconcileService(storage, state_store)
    await service.load()
    app.dependency_overrides[get_reconcile_service] = lambda: service

    app.state.service = service
    yield

    app.dependency_overrides.clear()


app = FastAPI(
    title="chatnotes",
    description="Reconciles exported chat archives into a markdown note vault",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(import_router)
app.include_router(catalog_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}
