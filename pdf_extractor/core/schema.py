from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, Field

FieldValueModel = Union[str, int, float, None]


class ExtractionItemModel(BaseModel):
    id: str
    file_name: str
    status: Literal["pending", "processing", "success", "error"]
    data: dict[str, FieldValueModel] | None = None
    error: str | None = None


class BatchModel(BaseModel):
    generation: int
    status: Literal["idle", "extracting", "completed"]
    fields: list[str] = Field(default_factory=list)
    items: list[ExtractionItemModel] = Field(default_factory=list)


class FieldAddRequest(BaseModel):
    name: str


class FieldReorderRequest(BaseModel):
    fields: list[str]


class ItemValueUpdate(BaseModel):
    field: str
    value: FieldValueModel = None


class SelectionRequest(BaseModel):
    selected: list[str] = Field(default_factory=list)


class ExportRequest(BaseModel):
    selected: list[str] | None = None
    format: Literal["xlsx", "csv"] = "xlsx"


class SummaryAnnotation(BaseModel):
    verified_total: str = ""
    notes: str = ""


class SummaryRowModel(BaseModel):
    key: str
    customer_name: str
    job_nos: str
    advance_total: str
    payment_terms: str
    invoice_date: str
    grand_total: str
    file_count: int
    ids: list[str] = Field(default_factory=list)
    file_names: list[str] = Field(default_factory=list)
    verified_total: str = ""
    notes: str = ""
