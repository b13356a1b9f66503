"""Time-bounded cache of pricing reference data."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from b2b_pricing.core.config import Settings, get_settings
from b2b_pricing.core.models import PricingContext

logger = logging.getLogger(__name__)

ContextLoader = Callable[[str | None], PricingContext]


class ReferenceDataError(Exception):
    """Raised when reference data cannot be loaded and nothing is cached."""

    def __init__(self, message: str, destination: str | None = None) -> None:
        super().__init__(message)
        self.destination = destination


@dataclass
class _CacheEntry:
    context: PricingContext
    loaded_at: float


class ReferenceDataCache:
    """Caches one PricingContext per destination for a fixed TTL.

    Reference rows change rarely, so a context a few minutes old is still
    valid for in-flight calculations. When a refresh fails and a stale entry
    exists, the stale context is served and the error is logged.
    """

    def __init__(
        self,
        loader: ContextLoader,
        ttl_seconds: int = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str | None, _CacheEntry] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls, loader: ContextLoader, settings: Settings | None = None
    ) -> "ReferenceDataCache":
        """Create a cache with the configured TTL. A disabled cache reloads on every call."""
        settings = settings or get_settings()
        ttl = settings.cache.reference_ttl_seconds if settings.cache.enabled else 0
        return cls(loader, ttl_seconds=ttl)

    def get(self, destination: str | None = None) -> PricingContext:
        """Get a context for a destination, loading it when missing or stale."""
        key = destination.upper() if destination else None
        now = self._clock()

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and now - entry.loaded_at < self._ttl_seconds:
                return entry.context

        try:
            context = self._loader(destination)
        except Exception as e:
            if entry is not None:
                logger.warning(f"Reference data refresh failed, serving stale context: {e}")
                return entry.context
            raise ReferenceDataError(
                f"Failed to load reference data: {e}", destination=destination
            ) from e

        with self._lock:
            self._entries[key] = _CacheEntry(context=context, loaded_at=now)
        return context

    def invalidate(self, destination: str | None = None) -> None:
        """Drop one cached destination."""
        key = destination.upper() if destination else None
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every cached context."""
        with self._lock:
            self._entries.clear()
