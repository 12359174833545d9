from __future__ import annotations

import logging
import threading
import time
from collections import Counter, deque
from dataclasses import asdict, dataclass
from typing import Any, Deque, Dict, List, Protocol

from terminal_ai.api.config import REQUEST_LOG_MAX_SIZE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestRecord:
    kind: str
    query: str
    response: str
    created_at: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RequestSink(Protocol):
    def record(self, kind: str, query: str, response: str) -> None:
        ...


class InMemoryRequestSink:
    """Bounded, thread-safe log of completed query/response pairs."""

    def __init__(self, max_size: int = REQUEST_LOG_MAX_SIZE):
        self._lock = threading.Lock()
        self._records: Deque[RequestRecord] = deque(maxlen=max(1, max_size))
        self._counts: Counter[str] = Counter()

    def record(self, kind: str, query: str, response: str) -> None:
        rec = RequestRecord(kind=kind, query=query, response=response, created_at=time.time())
        with self._lock:
            self._records.append(rec)
            self._counts[kind] += 1

    def recent(self, limit: int = 20) -> List[RequestRecord]:
        """Newest first."""
        with self._lock:
            items = list(self._records)
        items.reverse()
        return items[: max(0, limit)]

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "total": sum(self._counts.values()),
                "retained": len(self._records),
                "by_kind": dict(self._counts),
            }

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._counts.clear()


def record_safely(sink: RequestSink, kind: str, query: str, response: str) -> None:
    """A failing sink never fails the request that produced the response."""
    try:
        sink.record(kind, query, response)
    except Exception as exc:
        logger.warning("request_sink_failed", extra={"kind": kind, "error": str(exc)})


request_sink = InMemoryRequestSink()
