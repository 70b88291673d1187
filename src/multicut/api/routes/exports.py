"""Export job endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import FileResponse

from multicut.api.dependencies import get_app_settings, get_job_store
from multicut.api.service import ExportJobService
from multicut.config import Settings
from multicut.storage.job_store import JobStore

router = APIRouter(prefix="/api/export", tags=["export"])


def get_service(
    store: JobStore = Depends(get_job_store),
    settings: Settings = Depends(get_app_settings),
) -> ExportJobService:
    return ExportJobService(store, settings)


@router.post("")
async def create_export(
    payload: Any = Body(...),
    service: ExportJobService = Depends(get_service),
):
    """Submit an export job descriptor."""
    record = service.create(payload)
    return {"jobId": record.job_id, "status": record.status.value, "message": record.message}


@router.post("/multicam")
async def create_multicam_export(
    payload: Any = Body(...),
    service: ExportJobService = Depends(get_service),
):
    """Compile a multicam clip into an export job and submit it."""
    record = service.create_from_multicam(payload)
    return {"jobId": record.job_id, "status": record.status.value, "message": record.message}


@router.get("/{job_id}/status")
async def get_export_status(job_id: str, service: ExportJobService = Depends(get_service)):
    """Return the job's status record as stored."""
    return service.status(job_id).to_wire()


@router.delete("/{job_id}")
async def cancel_export(job_id: str, service: ExportJobService = Depends(get_service)):
    """Cancel a job by removing its directory."""
    service.cancel(job_id)
    return {
        "jobId": job_id,
        "status": "cancelled",
        "message": "Export cancelled and files cleaned up",
    }


@router.get("/{job_id}/download")
async def download_export(job_id: str, service: ExportJobService = Depends(get_service)):
    """Stream the finished output file."""
    download = service.download(job_id)
    return FileResponse(
        path=download.path,
        media_type=download.media_type,
        filename=download.filename,
    )
