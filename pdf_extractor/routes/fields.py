from __future__ import annotations

from fastapi import APIRouter, HTTPException

from pdf_extractor.application import get_extraction_service
from pdf_extractor.core.schema import FieldAddRequest, FieldReorderRequest
from pdf_extractor.core.validation import FieldSetError

router = APIRouter(prefix="/fields", tags=["fields"])


@router.get("")
async def list_fields() -> dict:
    service = get_extraction_service()
    return {"items": service.list_fields()}


@router.post("")
async def add_field(payload: FieldAddRequest) -> dict:
    service = get_extraction_service()
    added = service.add_field(payload.name)
    return {"added": added, "items": service.list_fields()}


@router.put("")
async def reorder_fields(payload: FieldReorderRequest) -> dict:
    service = get_extraction_service()
    try:
        service.reorder_fields(payload.fields)
    except FieldSetError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"items": service.list_fields()}


@router.get("/templates")
async def list_templates() -> dict:
    service = get_extraction_service()
    return {"items": service.list_templates()}


@router.post("/templates/{template_id}")
async def apply_template(template_id: str) -> dict:
    service = get_extraction_service()
    try:
        fields = service.apply_template(template_id)
    except FieldSetError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"items": fields}


@router.delete("/{name}")
async def remove_field(name: str) -> dict:
    service = get_extraction_service()
    removed = service.remove_field(name)
    if not removed:
        raise HTTPException(status_code=404, detail="field not found")
    return {"removed": removed, "items": service.list_fields()}
