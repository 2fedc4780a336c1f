"""Catalog and settings API routes."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from chatnotes.importer.router import get_reconcile_service
from chatnotes.importer.service import ReconcileService
from chatnotes.models import CatalogEntry, ImportSettings

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/catalog")
async def list_catalog(
    service: ReconcileService = Depends(get_reconcile_service),
) -> list[CatalogEntry]:
    return await service.list_catalog()


@router.delete("/catalog")
async def forget_note(
    path: str = Query(...),
    service: ReconcileService = Depends(get_reconcile_service),
) -> CatalogEntry:
    """Called by the host when a note was deleted outside the importer."""
    entry = await service.forget_note(path)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No catalogued note at: {path}")
    return entry


@router.post("/catalog/reset", status_code=status.HTTP_204_NO_CONTENT)
async def reset_catalogs(
    service: ReconcileService = Depends(get_reconcile_service),
) -> None:
    await service.reset()


@router.get("/settings")
async def get_settings(
    service: ReconcileService = Depends(get_reconcile_service),
) -> ImportSettings:
    return await service.get_settings()


@router.put("/settings")
async def update_settings(
    settings: ImportSettings,
    service: ReconcileService = Depends(get_reconcile_service),
) -> ImportSettings:
    return await service.update_settings(settings)
