from __future__ import annotations

from fastapi import APIRouter

from pdf_extractor.application import get_extraction_service
from pdf_extractor.core.schema import SelectionRequest, SummaryAnnotation, SummaryRowModel

router = APIRouter(prefix="/summary", tags=["summary"])


@router.post("")
async def build_summary(payload: SelectionRequest) -> dict:
    service = get_extraction_service()
    rows = [SummaryRowModel(**row).model_dump() for row in service.get_summary_rows(payload.selected)]
    return {"selected": payload.selected, "items": rows}


@router.put("/{key:path}/annotation")
async def annotate_summary(key: str, payload: SummaryAnnotation) -> dict:
    service = get_extraction_service()
    note = service.annotate(key, verified_total=payload.verified_total, notes=payload.notes)
    return {"key": key, **note}
