import time
from threading import Lock
from typing import Callable, Dict, List, Optional

from product_importer.schemas.catalog import CatalogItem


class CatalogCache:
    """
    Read-through cache for the catalog list call. Entries may be stale
    for up to ttl_seconds.

    metrics is the app.state.metrics dict; hits/misses are counted there.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: Optional[List[CatalogItem]] = None
        self._loaded_at = 0.0
        self._lock = Lock()

    def get(self, loader: Callable[[], List[CatalogItem]], metrics: Optional[Dict] = None) -> List[CatalogItem]:
        with self._lock:
            if self._items is not None and self._clock() - self._loaded_at < self.ttl_seconds:
                self._count(metrics, "cache_hits")
                return self._items

            self._count(metrics, "cache_misses")
            # a failing loader leaves the previous entry untouched
            items = loader()
            self._items = items
            self._loaded_at = self._clock()
            return items

    def invalidate(self) -> None:
        with self._lock:
            self._items = None

    @staticmethod
    def _count(metrics: Optional[Dict], key: str) -> None:
        if metrics is not None:
            metrics[key] = metrics.get(key, 0) + 1
