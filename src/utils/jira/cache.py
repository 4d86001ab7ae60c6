import copy
import json
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 10 * 60
DEFAULT_MAX_ENTRIES = 100

# Field order of the serialized cache key
KEY_FIELDS = (
    "users",
    "startDate",
    "endDate",
    "projectKeys",
    "aggregateBy",
    "includeCorrelation",
    "cloudId",
)


def derive_cache_key(operation: str, params: Dict[str, Any]) -> str:
    """
    Build a stable cache key for an analytics request.

    List parameters are sorted (on copies) so that the same logical request
    always maps to the same key regardless of argument order. Missing
    aggregateBy/includeCorrelation fall back to "user"/False.
    """
    users = params.get("users")
    project_keys = params.get("projectKeys")

    normalized = {
        "users": sorted(users) if users is not None else None,
        "startDate": params.get("startDate"),
        "endDate": params.get("endDate"),
        "projectKeys": sorted(project_keys) if project_keys is not None else None,
        "aggregateBy": params.get("aggregateBy") or "user",
        "includeCorrelation": bool(params.get("includeCorrelation", False)),
        "cloudId": params.get("cloudId"),
    }
    return f"{operation}_{json.dumps({k: normalized[k] for k in KEY_FIELDS})}"


class BulkCache:
    """
    In-memory store for assembled analytics reports.

    Entries expire after ``ttl`` seconds and are removed lazily when looked
    up. When ``max_entries`` is reached the oldest inserted entry is evicted
    before a new key is stored. One lock guards every read-modify-write.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, tuple]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def _is_valid_locked(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        _, timestamp = entry
        if self._clock() - timestamp < self.ttl:
            return True
        del self._entries[key]
        logger.debug(f"Cache entry expired: {key}")
        return False

    def is_valid(self, key: str) -> bool:
        """True if ``key`` holds a live entry. Expired entries are dropped."""
        with self._lock:
            return self._is_valid_locked(key)

    def get(self, key: str) -> Optional[Any]:
        """Return a deep copy of the cached payload, or None on a miss."""
        with self._lock:
            if not self._is_valid_locked(key):
                return None
            payload, _ = self._entries[key]
            return copy.deepcopy(payload)

    def put(self, key: str, payload: Any) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache full, evicted: {evicted}")
            self._entries[key] = (copy.deepcopy(payload), self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
