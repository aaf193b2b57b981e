from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, File, HTTPException, UploadFile

from pdf_extractor.application import get_extraction_service
from pdf_extractor.core.schema import BatchModel, ExtractionItemModel, ItemValueUpdate
from pdf_extractor.core.validation import BatchConfigurationError, ItemNotFoundError, ItemStateError
from pdf_extractor.domain import Document

router = APIRouter(tags=["extraction"])


@router.post("/extractions", response_model=BatchModel)
async def start_extraction(files: list[UploadFile] = File(...)) -> dict:
    """Upload documents and extract the configured fields from each of them."""

    documents: list[Document] = []
    seen: set[str] = set()
    for upload in files:
        try:
            if not upload.filename:
                raise HTTPException(status_code=400, detail="Uploaded file must have a filename")
            safe_name = Path(upload.filename).name
            if safe_name in seen:
                continue
            seen.add(safe_name)
            content = await upload.read()
            documents.append(
                Document(
                    filename=safe_name,
                    content=content,
                    content_type=upload.content_type or "application/pdf",
                )
            )
        finally:
            await upload.close()

    service = get_extraction_service()
    try:
        await service.run_batch(documents)
    except BatchConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return service.get_batch_overview()


@router.get("/extractions", response_model=BatchModel)
async def get_extraction() -> dict:
    service = get_extraction_service()
    return service.get_batch_overview()


@router.delete("/extractions", response_model=BatchModel)
async def clear_extraction() -> dict:
    service = get_extraction_service()
    service.clear_batch()
    return service.get_batch_overview()


@router.get("/items/{item_id}", response_model=ExtractionItemModel)
async def get_item(item_id: str) -> dict:
    service = get_extraction_service()
    try:
        item = service.get_item(item_id)
    except ItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail="item not found") from exc
    return item.as_dict()


@router.patch("/items/{item_id}", response_model=ExtractionItemModel)
async def update_item(item_id: str, payload: ItemValueUpdate) -> dict:
    service = get_extraction_service()
    try:
        item = service.update_item_value(item_id, payload.field, payload.value)
    except ItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail="item not found") from exc
    except ItemStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return item.as_dict()
