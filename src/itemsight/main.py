"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from itemsight.config import Settings
    from itemsight.ml.detector import Detector

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from itemsight.api.routes import router
from itemsight.catalog.store import JsonCatalogStore
from itemsight.config import get_settings
from itemsight.i18n.translations import Translator
from itemsight.ml.inference import InferencePool
from itemsight.ml.model_manager import MAX_EVICTION_INTERVAL, OnnxModelManager, run_idle_eviction
from itemsight.ml.preprocessing import ImageDecoder
from itemsight.ml.ssd_detector import SsdObjectDetector
from itemsight.vision.pipeline import DetectionPipeline, PipelineStats
from itemsight.vision.ranker import DetectionRanker

logger = logging.getLogger(__name__)


def build_pipeline(settings: Settings, detector: Detector | None) -> DetectionPipeline:
    """Wire the detector and the configured thresholds into a pipeline."""
    return DetectionPipeline(
        detector,
        ranker=DetectionRanker(
            live_threshold=settings.live_confidence_threshold,
            static_threshold=settings.static_confidence_threshold,
        ),
        max_results=settings.max_results,
        stats=PipelineStats(low_confidence_threshold=settings.low_confidence_threshold),
    )


def init_state(app: FastAPI, settings: Settings) -> None:
    """Attach settings and service objects to ``app.state``."""
    model_manager = OnnxModelManager(settings)
    detector = SsdObjectDetector(model_manager, settings.detector_model)
    catalog = JsonCatalogStore(settings.catalog_path)

    app.state.settings = settings
    app.state.model_manager = model_manager
    app.state.detector = detector
    app.state.pipeline = build_pipeline(settings, detector)
    app.state.decoder = ImageDecoder.from_settings(settings)
    app.state.translator = Translator(settings.default_locale)
    app.state.catalog = catalog
    app.state.inference_pool = InferencePool(settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting ItemSight (device=%s, max_concurrent=%s, detector=%s, catalog=%s)",
        settings.device,
        settings.max_concurrent,
        settings.detector_model,
        settings.catalog_path,
    )

    init_state(app, settings)

    if settings.seed_catalog:
        app.state.catalog.seed_sample_data()
    if settings.preload_model:
        app.state.detector.warm_up()

    evictor: asyncio.Task[None] | None = None
    if settings.model_ttl > 0:
        interval = min(float(settings.model_ttl), MAX_EVICTION_INTERVAL)
        evictor = asyncio.create_task(run_idle_eviction(app.state.model_manager, interval))

    logger.info("ItemSight ready")
    yield

    logger.info("Shutting down ItemSight")
    if evictor is not None:
        evictor.cancel()
        with suppress(asyncio.CancelledError):
            await evictor
    app.state.inference_pool.shutdown()
    app.state.model_manager.shutdown()
    logger.info("ItemSight shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="ItemSight",
        description="Object label and dominant color recognition for household item catalogs",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run("itemsight.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
