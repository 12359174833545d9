"""Process-wide TTL cache with single-flight computation per key."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple

from terminal_ai.api.config import CACHE_DEFAULT_TTL_SECS, CACHE_MAX_SIZE

logger = logging.getLogger(__name__)

_MOTD_BUCKET_SECS = 5 * 60


# ----------------------------
# Key helpers
# ----------------------------

def _md5(text: str) -> str:
    return hashlib.md5((text or "").encode("utf-8")).hexdigest()


def command_key(command: str, args: Sequence[str] = ()) -> str:
    return f"cmd_{command}_{'_'.join(args)}"


def motd_key(language: str = "en", now: Optional[float] = None) -> str:
    """One key per language per five-minute window."""
    ts = time.time() if now is None else now
    return f"motd_{language}_{int(ts // _MOTD_BUCKET_SECS)}"


def ai_key(prompt: str, kind: str = "general") -> str:
    return f"ai_{kind}_{_md5(prompt)}"


def network_key(hostname: str, command: str) -> str:
    return f"network_{command}_{_md5(hostname)}"


# ----------------------------
# Cache
# ----------------------------

class _PendingComputation:
    __slots__ = ("task", "waiters")

    def __init__(self, task: "asyncio.Task[Any]") -> None:
        self.task = task
        self.waiters = 0


class TTLCache:
    def __init__(self, max_size: int = CACHE_MAX_SIZE, default_ttl: float = CACHE_DEFAULT_TTL_SECS):
        # === Configuration ===
        self._max_size = max_size
        self._default_ttl = default_ttl

        # === Internal State ===
        self._lock = threading.Lock()
        self._data: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._pending: Dict[str, _PendingComputation] = {}
        self._hits = 0
        self._misses = 0

    def _now(self) -> float:
        return time.monotonic()

    def _enforce_size(self) -> None:
        if self._max_size <= 0:
            self._data.clear()
            return

        while len(self._data) > self._max_size:
            self._data.popitem(last=False)

    def _lookup(self, key: str) -> Tuple[bool, Any]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                self._misses += 1
                return False, None

            expires_at, value = entry
            if self._now() >= expires_at:
                # Lazy expiry: stale entries are dropped when touched.
                self._data.pop(key, None)
                self._misses += 1
                return False, None

            self._hits += 1
            self._data.move_to_end(key)
            return True, value

    def get(self, key: str) -> Any:
        _found, value = self._lookup(key)
        return value

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._data.get(key)
            return entry is not None and self._now() < entry[0]

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._data.pop(key, None)
            self._data[key] = (self._now() + ttl, value)
            self._enforce_size()
        logger.debug("cache_set", extra={"key": key, "ttl_secs": ttl})

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._data),
                "in_flight": len(self._pending),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 2) if total > 0 else 0.0,
                "max_size": self._max_size,
                "default_ttl_secs": self._default_ttl,
            }

    async def _compute_and_store(
        self, key: str, compute: Callable[[], Awaitable[Any]], ttl_seconds: Optional[float]
    ) -> Any:
        value = await compute()
        if value is not None:
            self.set(key, value, ttl_seconds)
        return value

    async def get_or_set(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
        ttl_seconds: Optional[float] = None,
    ) -> Any:
        """
        Return the cached value for key, computing it at most once concurrently.

        Callers arriving while a computation for the same key is running await
        that computation instead of starting their own. If every waiter is
        cancelled, the computation is cancelled too.
        """
        found, value = self._lookup(key)
        if found:
            logger.debug("cache_hit", extra={"key": key})
            return value

        pending = self._pending.get(key)
        if pending is None:
            logger.debug("cache_miss", extra={"key": key})
            task = asyncio.ensure_future(self._compute_and_store(key, compute, ttl_seconds))
            pending = _PendingComputation(task)
            self._pending[key] = pending
            task.add_done_callback(lambda _t, k=key, p=pending: self._release(k, p))
        else:
            logger.debug("cache_join_in_flight", extra={"key": key})

        pending.waiters += 1
        try:
            return await asyncio.shield(pending.task)
        except asyncio.CancelledError:
            if pending.waiters == 1 and not pending.task.done():
                # Unlink first so a caller arriving before the task settles starts afresh.
                if self._pending.get(key) is pending:
                    del self._pending[key]
                pending.task.cancel()
            raise
        finally:
            pending.waiters -= 1

    def _release(self, key: str, pending: _PendingComputation) -> None:
        if self._pending.get(key) is pending:
            del self._pending[key]
        task = pending.task
        if not task.cancelled() and task.exception() is not None:
            logger.warning(
                "cache_compute_failed",
                extra={"key": key, "error": str(task.exception())},
            )


cache = TTLCache()
