"""Import API routes."""

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile

from chatnotes.importer.schemas import BatchOutcome
from chatnotes.importer.service import ArchiveUpload, ConfirmReimport, ReconcileService
from chatnotes.models import ImportedArchiveRecord

router = APIRouter(prefix="/api/import", tags=["import"])


def get_reconcile_service() -> ReconcileService:
    """Dependency placeholder, overridden at startup."""
    raise RuntimeError("ReconcileService not configured")


def _confirm(reprocess: bool) -> ConfirmReimport:
    async def confirm(display_name: str, previous: ImportedArchiveRecord) -> bool:
        return reprocess

    return confirm


@router.post("/archive")
async def import_archive(
    file: UploadFile,
    reprocess: bool = Query(False),
    service: ReconcileService = Depends(get_reconcile_service),
) -> BatchOutcome:
    """Reconcile one exported archive.

    An archive seen before is only processed again with ``reprocess=true``;
    otherwise the outcome comes back cancelled with ``already_imported`` set.
    """
    content = await file.read()
    return await service.reconcile_archive(
        content,
        file.filename or "unknown.zip",
        confirm_reimport=_confirm(reprocess),
    )


@router.post("/archives")
async def import_archives(
    files: list[UploadFile],
    reprocess: bool = Query(False),
    service: ReconcileService = Depends(get_reconcile_service),
) -> list[BatchOutcome]:
    """Reconcile several archives in file-name order.

    Export file names carry their export timestamp, so name order is export order.
    """
    uploads = []
    for file in files:
        name = file.filename or "unknown.zip"
        uploads.append(ArchiveUpload(content=await file.read(), display_name=name, order_key=name))
    return await service.reconcile_archives(uploads, confirm_reimport=_confirm(reprocess))


@router.post("/note")
async def import_note(
    file: UploadFile,
    service: ReconcileService = Depends(get_reconcile_service),
) -> BatchOutcome:
    """Import a standalone markdown conversation export."""
    content = await file.read()
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=422, detail=f"Note is not valid UTF-8: {e}") from e
    return await service.reconcile_single_note(text, file.filename or "unknown.md")
