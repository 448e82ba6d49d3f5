"""Model manager: download, load, cache, and evict detector ONNX models.

Detector graphs are fetched from a HuggingFace repository on first use and
reused from ``models_dir`` afterwards. Every new session is checked against
the I/O layout its architecture promises before it is cached, so a wrong or
truncated export fails at load time instead of inside a request. Sessions
idle for longer than ``model_ttl`` are dropped by ``run_idle_eviction``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from huggingface_hub import hf_hub_download
from onnxruntime import GraphOptimizationLevel, InferenceSession, SessionOptions
from onnxruntime.capi.onnxruntime_pybind11_state import ExecutionMode

if TYPE_CHECKING:
    from itemsight.config import Settings

logger = logging.getLogger(__name__)


class ModelManager(Protocol):
    """Protocol for model lifecycle management."""

    def ensure_downloaded(self, model_name: str) -> Path: ...

    def get_session(self, model_name: str) -> InferenceSession: ...

    def get_loaded_models(self) -> list[str]: ...

    def unload_idle_models(self) -> list[str]: ...

    def shutdown(self) -> None: ...


# ---------------------------------------------------------------------------
# Model registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModelSpec:
    """Static metadata for a single detector graph."""

    name: str
    filename: str
    subfolder: str | None
    architecture: str
    license: str


MODEL_REGISTRY: dict[str, ModelSpec] = {
    "ssd_mobilenet_v1": ModelSpec(
        name="ssd_mobilenet_v1",
        filename="ssd_mobilenet_v1_12.onnx",
        subfolder="ssd",
        architecture="ssd",
        license="Apache-2.0",
    ),
    "ssdlite_mobilenet_v2": ModelSpec(
        name="ssdlite_mobilenet_v2",
        filename="ssdlite_mobilenet_v2.onnx",
        subfolder="ssd",
        architecture="ssd",
        license="Apache-2.0",
    ),
    "ssd_resnet50_fpn": ModelSpec(
        name="ssd_resnet50_fpn",
        filename="ssd_resnet50_v1_fpn_640x640.onnx",
        subfolder="ssd",
        architecture="ssd",
        license="Apache-2.0",
    ),
}


def get_model_spec(model_name: str) -> ModelSpec:
    try:
        return MODEL_REGISTRY[model_name]
    except KeyError:
        raise KeyError(f"Unknown model: {model_name}") from None


# ---------------------------------------------------------------------------
# Graph signatures
# ---------------------------------------------------------------------------

SSD_OUTPUTS = ("boxes", "classes", "scores", "num_detections")


def check_ssd_signature(model_name: str, session: InferenceSession) -> None:
    """Reject graphs that do not take one uint8 NHWC image and return four tensors.

    Raises:
        RuntimeError: If the session's inputs or outputs do not match.
    """
    inputs = session.get_inputs()
    if len(inputs) != 1:
        raise RuntimeError(f"Model '{model_name}' has {len(inputs)} inputs, expected a single image tensor")

    image = inputs[0]
    shape = list(image.shape)
    if image.type != "tensor(uint8)" or len(shape) != 4 or shape[-1] != 3:
        raise RuntimeError(
            f"Model '{model_name}' input '{image.name}' is {image.type} {shape}, expected uint8 NHWC with 3 channels"
        )

    outputs = session.get_outputs()
    if len(outputs) != len(SSD_OUTPUTS):
        raise RuntimeError(
            f"Model '{model_name}' has {len(outputs)} outputs, expected {len(SSD_OUTPUTS)} ({', '.join(SSD_OUTPUTS)})"
        )


_SIGNATURE_CHECKS = {"ssd": check_ssd_signature}


# ---------------------------------------------------------------------------
# Concrete implementation
# ---------------------------------------------------------------------------

MAX_EVICTION_INTERVAL = 60.0


@dataclass
class _CachedSession:
    session: InferenceSession
    last_used: float


class OnnxModelManager:
    """Keeps one validated InferenceSession per detector model."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._models_dir = Path(settings.models_dir)
        self._models_dir.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self._sessions: dict[str, _CachedSession] = {}

        self._providers = self._build_providers()
        self._session_options = self._build_session_options()

    def local_path(self, model_name: str) -> Path:
        """Where ``hf_hub_download`` places the model inside ``models_dir``."""
        spec = get_model_spec(model_name)
        folder = self._models_dir / spec.subfolder if spec.subfolder else self._models_dir
        return folder / spec.filename

    def ensure_downloaded(self, model_name: str) -> Path:
        """Return the model file, fetching it from the model repo when it is not on disk yet."""
        local = self.local_path(model_name)
        if local.is_file():
            return local

        spec = get_model_spec(model_name)
        try:
            downloaded = hf_hub_download(
                repo_id=self._settings.model_repo_id,
                filename=spec.filename,
                subfolder=spec.subfolder,
                local_dir=str(self._models_dir),
            )
        except OSError as exc:
            raise RuntimeError(f"Unable to download model '{model_name}'") from exc

        logger.info("Downloaded %s to %s", model_name, downloaded)
        return Path(downloaded)

    def get_session(self, model_name: str) -> InferenceSession:
        """Return the cached session for ``model_name``, loading and validating it on first use.

        Raises:
            KeyError: If the model is not registered.
            RuntimeError: If the download fails or the graph has the wrong signature.
        """
        with self._lock:
            cached = self._sessions.get(model_name)
            if cached is not None:
                cached.last_used = time.monotonic()
                return cached.session

        session = self._load_session(model_name)

        with self._lock:
            cached = self._sessions.setdefault(model_name, _CachedSession(session, time.monotonic()))
            cached.last_used = time.monotonic()
        if cached.session is session:
            logger.info("Loaded session for %s (providers=%s)", model_name, session.get_providers())
        return cached.session

    def get_loaded_models(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def unload_idle_models(self) -> list[str]:
        """Drop sessions unused for more than ``model_ttl`` seconds and return their names."""
        ttl = self._settings.model_ttl
        if ttl == 0:
            return []

        cutoff = time.monotonic() - ttl
        with self._lock:
            idle = [name for name, cached in self._sessions.items() if cached.last_used < cutoff]
            for name in idle:
                del self._sessions[name]
        for name in idle:
            logger.info("Evicted idle session for %s", name)
        return idle

    def shutdown(self) -> None:
        with self._lock:
            self._sessions.clear()
        logger.info("All model sessions cleared")

    def _load_session(self, model_name: str) -> InferenceSession:
        spec = get_model_spec(model_name)
        model_path = self.ensure_downloaded(model_name)
        session = InferenceSession(str(model_path), sess_options=self._session_options, providers=self._providers)
        check = _SIGNATURE_CHECKS.get(spec.architecture)
        if check is not None:
            check(model_name, session)
        return session

    def _build_providers(self) -> list[str | tuple[str, dict[str, object]]]:
        device = self._settings.device
        if device == "cuda":
            cuda_options: dict[str, object] = {
                "device_id": 0,
                "gpu_mem_limit": self._settings.gpu_mem_limit,
                "arena_extend_strategy": "kSameAsRequested",
            }
            return [("CUDAExecutionProvider", cuda_options), "CPUExecutionProvider"]
        if device == "openvino":
            return [("OpenVINOExecutionProvider", {"device_type": "CPU"}), "CPUExecutionProvider"]
        return ["CPUExecutionProvider"]

    def _build_session_options(self) -> SessionOptions:
        opts = SessionOptions()
        opts.intra_op_num_threads = self._settings.intra_op_threads
        opts.inter_op_num_threads = self._settings.inter_op_threads
        opts.execution_mode = ExecutionMode.ORT_SEQUENTIAL
        if self._settings.device == "openvino":
            opts.graph_optimization_level = GraphOptimizationLevel.ORT_DISABLE_ALL
        return opts


async def run_idle_eviction(model_manager: ModelManager, interval: float) -> None:
    """Evict idle sessions every ``interval`` seconds until the task is cancelled."""
    logger.info("Idle model eviction running every %.0fs", interval)
    while True:
        await asyncio.sleep(interval)
        model_manager.unload_idle_models()
