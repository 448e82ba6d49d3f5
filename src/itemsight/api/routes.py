"""API route definitions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, UploadFile, status

from itemsight.api.middleware import verify_api_key
from itemsight.api.schemas import (
    CatalogItem,
    CatalogItemCreate,
    ClassifyImageResponse,
    ColorInfo,
    ErrorResponse,
    HealthResponse,
    ModelInfo,
    ModelsResponse,
    PipelineCounters,
)
from itemsight.ml.model_manager import MODEL_REGISTRY
from itemsight.ml.preprocessing import ImageTooLargeError
from itemsight.vision.models import NamedColor

if TYPE_CHECKING:
    from itemsight.catalog.store import CatalogRecord, CatalogStore
    from itemsight.config import Settings
    from itemsight.i18n.translations import Translator
    from itemsight.ml.inference import InferencePool
    from itemsight.ml.model_manager import ModelManager
    from itemsight.ml.preprocessing import ImageDecoder
    from itemsight.vision.models import DetectionResult
    from itemsight.vision.pipeline import DetectionPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", dependencies=[Depends(verify_api_key)])

LocaleQuery = Annotated[str | None, Query(description="Display locale ('en' or 'vi')")]


def _settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def _catalog(request: Request) -> CatalogStore:
    catalog: CatalogStore = request.app.state.catalog
    return catalog


def _decode_and_classify(
    decoder: ImageDecoder, pipeline: DetectionPipeline, image_bytes: bytes, live_capture: bool
) -> DetectionResult:
    bitmap = decoder.decode(image_bytes)
    return pipeline.detect_and_classify(bitmap, live_capture)


def _to_catalog_item(record: CatalogRecord) -> CatalogItem:
    return CatalogItem(
        id=record.id,
        item_label=record.item_label,
        color_name=record.color_name,
        category=record.category,
        description=record.description,
        date_added=record.date_added,
    )


@router.post(
    "/classify-image",
    response_model=ClassifyImageResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_413_CONTENT_TOO_LARGE: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
    summary="Detect the main object in an image and name its color",
)
async def classify_image(
    request: Request,
    file: UploadFile,
    live_capture: Annotated[bool, Query(description="Frame comes from a handheld camera")] = False,
    locale: LocaleQuery = None,
) -> ClassifyImageResponse:
    """Classify an uploaded still frame."""
    settings = _settings(request)
    pool: InferencePool = request.app.state.inference_pool
    pipeline: DetectionPipeline = request.app.state.pipeline
    decoder: ImageDecoder = request.app.state.decoder
    translator: Translator = request.app.state.translator

    image_bytes = await file.read()
    try:
        result = await pool.run(_decode_and_classify, decoder, pipeline, image_bytes, live_capture)
    except ImageTooLargeError as exc:
        raise HTTPException(status_code=status.HTTP_413_CONTENT_TOO_LARGE, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except TimeoutError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Server busy, try again later",
        ) from exc
    except (KeyError, RuntimeError) as exc:
        logger.exception("Detector unavailable")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Detector unavailable: {exc}",
        ) from exc

    return ClassifyImageResponse(
        item_label=result.item_label,
        color_name=result.color_name,
        confidence=result.confidence,
        low_confidence=result.is_low_confidence(settings.low_confidence_threshold),
        display_label=translator.label(result.item_label, locale),
        display_color=translator.color(result.color_name, locale),
    )


@router.get("/catalog/items", response_model=list[CatalogItem], summary="List or search catalog items")
def list_catalog_items(
    request: Request,
    q: Annotated[str | None, Query(description="Case-insensitive label substring")] = None,
) -> list[CatalogItem]:
    catalog = _catalog(request)
    records = catalog.list_all() if q is None else catalog.search(q)
    return [_to_catalog_item(record) for record in records]


@router.post(
    "/catalog/items",
    response_model=CatalogItem,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
    summary="Store a confirmed item",
)
def create_catalog_item(request: Request, item: CatalogItemCreate) -> CatalogItem:
    try:
        record = _catalog(request).add_record(
            item_label=item.item_label,
            color_name=item.color_name,
            category=item.category,
            description=item.description,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_catalog_item(record)


@router.delete(
    "/catalog/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Delete a catalog item",
)
def delete_catalog_item(request: Request, item_id: str) -> Response:
    try:
        _catalog(request).delete(item_id)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Catalog item not found") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/colors", response_model=list[ColorInfo], summary="List the color palette")
async def list_colors(request: Request, locale: LocaleQuery = None) -> list[ColorInfo]:
    translator: Translator = request.app.state.translator
    return [ColorInfo(name=color, display_name=translator.color(color, locale)) for color in NamedColor]


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    settings = _settings(request)
    pool: InferencePool = request.app.state.inference_pool
    model_manager: ModelManager = request.app.state.model_manager
    pipeline: DetectionPipeline = request.app.state.pipeline

    loaded = model_manager.get_loaded_models()
    load = pool.load()
    stats = pipeline.stats.snapshot()
    return HealthResponse(
        status="ok",
        gpu=settings.device == "cuda",
        detector_ready=settings.detector_model in loaded,
        models_loaded=loaded,
        concurrent_requests=load.active,
        queue_depth=load.waiting,
        pipeline=PipelineCounters(
            frames=stats.frames,
            fallbacks=stats.fallbacks,
            low_confidence=stats.low_confidence,
            colors=stats.colors,
        ),
    )


@router.get("/models", response_model=ModelsResponse, summary="List available detector models")
async def list_models(request: Request) -> ModelsResponse:
    settings = _settings(request)
    return ModelsResponse(
        models=[
            ModelInfo(
                name=spec.name,
                architecture=spec.architecture,
                status="active" if spec.name == settings.detector_model else "available",
                license=spec.license,
            )
            for spec in MODEL_REGISTRY.values()
        ]
    )
