"""Bounded worker pool for decode, detection and classification work.

Architecture:
    FastAPI (async) -> asyncio.Semaphore(N) -> ThreadPoolExecutor(N) -> pipeline

A request that cannot get a slot within the acquire timeout raises
TimeoutError, which the API turns into a 503.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from itemsight.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

ACQUIRE_TIMEOUT_SECONDS: float = 5.0


@dataclass(frozen=True)
class PoolLoad:
    active: int
    waiting: int


class InferencePool:
    """Runs blocking frame work off the event loop, at most N jobs at a time."""

    def __init__(self, settings: Settings, acquire_timeout: float = ACQUIRE_TIMEOUT_SECONDS) -> None:
        self._slots = asyncio.Semaphore(settings.max_concurrent)
        self._acquire_timeout = acquire_timeout
        self._executor = ThreadPoolExecutor(
            max_workers=settings.max_concurrent,
            thread_name_prefix="frame-worker",
        )
        self._active = 0
        self._waiting = 0
        self._load_lock = threading.Lock()

    def _adjust(self, *, active: int = 0, waiting: int = 0) -> None:
        with self._load_lock:
            self._active += active
            self._waiting += waiting

    async def run(self, func: Callable[..., T], *args: object) -> T:
        """Run ``func(*args)`` in the executor once a slot is free.

        Raises:
            TimeoutError: If no slot frees up within the acquire timeout.
        """
        self._adjust(waiting=1)
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=self._acquire_timeout)
        except TimeoutError:
            logger.warning("No worker slot free after %.1fs", self._acquire_timeout)
            raise
        finally:
            self._adjust(waiting=-1)

        self._adjust(active=1)
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, func, *args)
        finally:
            self._slots.release()
            self._adjust(active=-1)

    def load(self) -> PoolLoad:
        with self._load_lock:
            return PoolLoad(active=self._active, waiting=self._waiting)

    @property
    def active_count(self) -> int:
        return self.load().active

    @property
    def queue_depth(self) -> int:
        return self.load().waiting

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
