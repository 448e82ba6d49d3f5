"""Pydantic request/response schemas for the ItemSight API."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, Field

from itemsight.vision.models import NamedColor


class ClassifyImageResponse(BaseModel):
    """Best object and its dominant color for an uploaded frame."""

    item_label: str = Field(description="Canonical detector label, or 'Unknown'")
    color_name: NamedColor
    confidence: float = Field(ge=0.0, le=1.0)
    low_confidence: bool = Field(description="True when the user should be asked to recapture")
    display_label: str = Field(description="Label localized for the requested locale")
    display_color: str = Field(description="Color localized for the requested locale")


class CatalogItemCreate(BaseModel):
    """A user-confirmed detection to store."""

    item_label: str = Field(min_length=1)
    color_name: str
    category: str = ""
    description: str = ""


class CatalogItem(BaseModel):
    """A stored catalog record."""

    id: str
    item_label: str
    color_name: str
    category: str
    description: str
    date_added: datetime


class ColorInfo(BaseModel):
    name: NamedColor
    display_name: str


class PipelineCounters(BaseModel):
    frames: int
    fallbacks: int
    low_confidence: int
    colors: dict[str, int]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    gpu: bool
    detector_ready: bool
    models_loaded: list[str]
    concurrent_requests: int
    queue_depth: int
    pipeline: PipelineCounters


class ModelInfo(BaseModel):
    """Information about an available detector model."""

    name: str
    architecture: str
    status: str = Field(description="Model status: 'active' or 'available'")
    license: str


class ModelsResponse(BaseModel):
    models: list[ModelInfo]


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
