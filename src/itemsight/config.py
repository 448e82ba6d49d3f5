"""Environment-based configuration for ItemSight."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from ITEMSIGHT_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ITEMSIGHT_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8083
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Authentication (None = disabled)
    api_key: str | None = None

    # ML device
    device: Literal["cpu", "cuda", "openvino"] = "cpu"

    # Detector model
    detector_model: str = "ssd_mobilenet_v1"
    model_repo_id: str = "itemsight/detector-models"
    models_dir: str = "models"
    preload_model: bool = False

    # ONNX Runtime threading
    intra_op_threads: int = Field(default=0, ge=0)
    inter_op_threads: int = Field(default=1, ge=1)

    # Concurrency
    max_concurrent: int = Field(default=2, ge=1)

    # Input limits
    max_image_pixels: int = Field(default=16_777_216, ge=1)
    max_file_size: int = Field(default=52_428_800, ge=1)

    # Model management
    model_ttl: int = Field(default=300, ge=0)
    gpu_mem_limit: int = Field(default=2_147_483_648, ge=0)

    # Detection policy
    max_results: int = Field(default=10, ge=1)
    live_confidence_threshold: float = Field(default=0.15, ge=0.0, le=1.0)
    static_confidence_threshold: float = Field(default=0.25, ge=0.0, le=1.0)
    low_confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)

    # Catalog
    catalog_path: str = "catalog.json"
    seed_catalog: bool = False

    # Presentation
    default_locale: Literal["en", "vi"] = "en"


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
