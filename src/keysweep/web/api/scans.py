"""REST API for starting scans and polling their progress and results."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from keysweep.errors import InvalidScanRequest, ScanNotFound
from keysweep.export import EXPORT_FORMATS
from keysweep.session.models import (
    GitHubScanRequest,
    UploadedFile,
    UploadScanRequest,
)

router = APIRouter(tags=["scans"])

_MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
}


class UploadedFileBody(BaseModel):
    name: str
    content: str


class ScanCreate(BaseModel):
    type: Literal["upload", "github"]
    files: list[UploadedFileBody] = []
    repo_url: str = ""
    max_files: int | None = None


def _not_found() -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"detail": "Scan not found"},
    )


@router.post("/scans")
async def create_scan(body: ScanCreate, request: Request):
    service = request.app.state.scan_service
    if body.type == "upload":
        scan_request = UploadScanRequest(
            files=tuple(UploadedFile(name=f.name, content=f.content) for f in body.files)
        )
    else:
        scan_request = GitHubScanRequest(repo_url=body.repo_url, max_files=body.max_files)

    try:
        scan_id = service.start_scan(scan_request)
    except InvalidScanRequest as e:
        return JSONResponse(status_code=400, content={"detail": str(e)})
    return {"scan_id": scan_id}


@router.get("/scans/{scan_id}/progress")
async def get_progress(scan_id: str, request: Request):
    try:
        progress = request.app.state.scan_service.get_progress(scan_id)
    except ScanNotFound:
        return _not_found()
    return progress.to_dict()


@router.get("/scans/{scan_id}/results")
async def get_results(scan_id: str, request: Request):
    try:
        report = request.app.state.scan_service.get_results(scan_id)
    except ScanNotFound:
        return _not_found()
    return report.to_dict()


@router.get("/scans/{scan_id}/export")
async def export_scan(scan_id: str, request: Request, format: str = "json"):
    if format not in EXPORT_FORMATS:
        return JSONResponse(
            status_code=400,
            content={"detail": f"Unsupported export format: {format}"},
        )
    try:
        body = request.app.state.scan_service.export_results(scan_id, format)
    except ScanNotFound:
        return _not_found()
    return Response(
        content=body,
        media_type=_MEDIA_TYPES[format],
        headers={
            "Content-Disposition": f'attachment; filename="{scan_id}.{format}"'
        },
    )
