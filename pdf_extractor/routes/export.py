from __future__ import annotations

import io

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from pdf_extractor.application import get_extraction_service
from pdf_extractor.core.schema import ExportRequest, SelectionRequest
from pdf_extractor.core.validation import NothingToExportError
from pdf_extractor.exporters import spreadsheet

router = APIRouter(prefix="/export", tags=["export"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _download(buffer: io.BytesIO, filename: str, media_type: str) -> Response:
    return Response(
        content=buffer.getvalue(),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("")
async def export_items(payload: ExportRequest) -> Response:
    service = get_extraction_service()
    buffer = io.BytesIO()
    try:
        service.export_items(buffer, payload.selected, payload.format)
    except NothingToExportError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    filename = spreadsheet.SELECTED_FILENAME if payload.selected is not None else spreadsheet.ALL_FILENAME
    if payload.format == "csv":
        return _download(buffer, filename.replace(".xlsx", ".csv"), "text/csv")
    return _download(buffer, filename, XLSX_MEDIA_TYPE)


@router.post("/summary")
async def export_summary(payload: SelectionRequest) -> Response:
    service = get_extraction_service()
    buffer = io.BytesIO()
    try:
        service.export_summary(buffer, payload.selected)
    except NothingToExportError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _download(buffer, spreadsheet.SUMMARY_FILENAME, XLSX_MEDIA_TYPE)
