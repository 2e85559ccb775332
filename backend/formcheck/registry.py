"""In-memory registry of engine handles for the HTTP adapter."""

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Dict, Iterator, List, Optional

from formcheck.config import get_settings
from formcheck.engine import FormAnalysisEngine

logger = logging.getLogger(__name__)


class AnalyzerNotFoundError(KeyError):
    """No analyzer is registered under the given id."""


class RegistryFullError(RuntimeError):
    """The registry already holds max_analyzers handles."""


@dataclass
class AnalyzerHandle:
    """An engine plus the lock that serializes frame processing for it."""
    analyzer_id: str
    engine: FormAnalysisEngine
    last_used: float = 0.0  # Registry clock, seconds
    timestamp_source: Optional[str] = None  # "client" or "server" for the running session
    lock: threading.Lock = field(default_factory=threading.Lock)


class AnalyzerRegistry:
    """
    Maps analyzer ids to engines.

    Each engine is single-threaded; acquire() holds the handle's lock so two
    requests for the same analyzer never run the pipeline concurrently.
    Handles not acquired for idle_timeout_s seconds are evicted the next time
    an analyzer is created, so abandoned clients cannot exhaust the registry.
    """

    def __init__(
        self,
        max_analyzers: int,
        idle_timeout_s: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_analyzers = max_analyzers
        self.idle_timeout_s = idle_timeout_s
        self._clock = clock
        self._handles: Dict[str, AnalyzerHandle] = {}
        self._lock = threading.Lock()

    def create(self) -> AnalyzerHandle:
        with self._lock:
            evicted = self._pop_idle()
            if len(self._handles) >= self.max_analyzers:
                raise RegistryFullError(f"Analyzer limit of {self.max_analyzers} reached")
            handle = AnalyzerHandle(
                analyzer_id=str(uuid.uuid4()),
                engine=FormAnalysisEngine(),
                last_used=self._clock(),
            )
            self._handles[handle.analyzer_id] = handle

        for stale in evicted:
            with stale.lock:
                stale.engine.stop_session()
            logger.info(f"Evicted idle analyzer {stale.analyzer_id}")

        logger.info(f"Created analyzer {handle.analyzer_id}")
        return handle

    def _pop_idle(self) -> List[AnalyzerHandle]:
        # Caller holds self._lock
        if self.idle_timeout_s is None:
            return []
        now = self._clock()
        stale = [
            handle for handle in self._handles.values()
            if now - handle.last_used >= self.idle_timeout_s and not handle.lock.locked()
        ]
        for handle in stale:
            del self._handles[handle.analyzer_id]
        return stale

    def remove(self, analyzer_id: str) -> None:
        with self._lock:
            handle = self._handles.pop(analyzer_id, None)
        if handle is None:
            raise AnalyzerNotFoundError(analyzer_id)
        with handle.lock:
            handle.engine.stop_session()
        logger.info(f"Removed analyzer {analyzer_id}")

    @contextmanager
    def acquire(self, analyzer_id: str) -> Iterator[AnalyzerHandle]:
        """Lock an analyzer's handle for the duration of the block."""
        with self._lock:
            handle = self._handles.get(analyzer_id)
            if handle is not None:
                handle.last_used = self._clock()
        if handle is None:
            raise AnalyzerNotFoundError(analyzer_id)
        with handle.lock:
            yield handle

    def __len__(self) -> int:
        return len(self._handles)


@lru_cache
def get_registry() -> AnalyzerRegistry:
    """Dependency for the process-wide analyzer registry."""
    settings = get_settings()
    return AnalyzerRegistry(
        max_analyzers=settings.max_analyzers,
        idle_timeout_s=settings.analyzer_idle_timeout_s,
    )
