"""In-memory query cache.

Addresses results by an ordered key tuple ``(namespace, operation, *params)``,
keeps each value with its insertion time and TTL, and shares one in-flight
load between concurrent callers of the same key.

Query outcomes are represented by QueryResult, a tagged variant whose
IDLE state means "not requested" (a gated query that never ran).
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from hfsnext.shared.constants import CacheConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

CacheKey = tuple[Hashable, ...]


class QueryKeys:
    """Cache key factory. Every key starts with the root namespace."""

    @staticmethod
    def all() -> CacheKey:
        return (CacheConfig.ROOT_KEY,)

    @classmethod
    def exam_list(cls) -> CacheKey:
        return (*cls.all(), "examList")

    @classmethod
    def user_snapshot(cls) -> CacheKey:
        return (*cls.all(), "userSnapshot")

    @classmethod
    def last_exam_overview(cls) -> CacheKey:
        return (*cls.all(), "lastExamOverview")

    @classmethod
    def exam_overview(cls, exam_id: Hashable) -> CacheKey:
        return (*cls.all(), "examOverview", exam_id)

    @classmethod
    def exam_overview_v4(cls, exam_id: Hashable) -> CacheKey:
        return (*cls.all(), "examOverviewV4", exam_id)

    @classmethod
    def exam_rank_info(cls, exam_id: Hashable) -> CacheKey:
        return (*cls.all(), "examRankInfo", exam_id)

    @classmethod
    def answer_picture(cls, exam_id: Hashable, paper_id: Hashable, pid: Hashable) -> CacheKey:
        return (*cls.all(), "answerPicture", exam_id, paper_id, pid)

    @classmethod
    def paper_rank_info(cls, exam_id: Hashable, paper_id: Hashable) -> CacheKey:
        return (*cls.all(), "paperRankInfo", exam_id, paper_id)


class QueryStatus(str, Enum):
    """State of a query."""

    IDLE = "idle"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Outcome of a query invocation.

    Attributes:
        key: Cache key the query is addressed by
        status: IDLE (gated, nothing requested), SUCCESS or ERROR
        data: Result value when SUCCESS
        error: The raised exception when ERROR, unchanged
        fetched_at: Clock reading of the cache entry when SUCCESS
    """

    key: CacheKey
    status: QueryStatus
    data: T | None = None
    error: BaseException | None = None
    fetched_at: float | None = None

    @classmethod
    def idle(cls, key: CacheKey) -> QueryResult[Any]:
        return cls(key=key, status=QueryStatus.IDLE)

    @classmethod
    def success(cls, key: CacheKey, data: T, fetched_at: float | None = None) -> QueryResult[T]:
        return cls(key=key, status=QueryStatus.SUCCESS, data=data, fetched_at=fetched_at)

    @classmethod
    def failure(cls, key: CacheKey, error: BaseException) -> QueryResult[Any]:
        return cls(key=key, status=QueryStatus.ERROR, error=error)

    @property
    def is_idle(self) -> bool:
        return self.status is QueryStatus.IDLE

    @property
    def is_success(self) -> bool:
        return self.status is QueryStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is QueryStatus.ERROR

    def unwrap(self) -> T | None:
        """Return the data, re-raise the stored error, or None when idle."""
        if self.error is not None:
            raise self.error
        return self.data


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with its insertion time and freshness window (seconds)."""

    value: Any
    inserted_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.inserted_at < self.ttl


class QueryCache:
    """TTL cache with in-flight request sharing.

    Failed loads are never cached. Entries beyond ``max_entries`` are
    evicted oldest-first. All methods must be called from the event loop
    that runs the loads.

    Args:
        clock: Monotonic clock returning seconds
        max_entries: Upper bound on stored entries
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = CacheConfig.MAX_ENTRIES,
    ) -> None:
        if max_entries < 1:
            msg = f"max_entries must be at least 1, got {max_entries}"
            raise ValueError(msg)

        self._clock = clock
        self._max_entries = max_entries
        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()
        self._inflight: dict[CacheKey, asyncio.Future[Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, tuple) and self.get(key) is not None

    def get(self, key: CacheKey) -> CacheEntry | None:
        """Return the fresh entry for ``key``; stale entries are dropped."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock()):
            del self._entries[key]
            return None
        return entry

    def set(self, key: CacheKey, value: Any, ttl: float) -> CacheEntry:
        """Store ``value`` under ``key``. A TTL of zero stores nothing."""
        entry = CacheEntry(value=value, inserted_at=self._clock(), ttl=ttl)
        if ttl <= 0:
            return entry

        self._entries.pop(key, None)
        self._entries[key] = entry
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %s", evicted)
        return entry

    async def fetch(
        self,
        key: CacheKey,
        loader: Callable[[], Awaitable[T]],
        ttl: float,
    ) -> CacheEntry:
        """Return the fresh entry for ``key``, loading it on a miss.

        Concurrent calls for the same key await a single ``loader()`` call.
        Exceptions raised by the loader propagate to every waiter. If the
        caller running the load is cancelled, waiters start a new load.
        """
        while True:
            entry = self.get(key)
            if entry is not None:
                logger.debug("Cache hit for %s", key)
                return entry

            pending = self._inflight.get(key)
            if pending is None:
                break

            logger.debug("Joining in-flight load for %s", key)
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                if not pending.cancelled():
                    raise
                logger.debug("Shared load for %s was cancelled, retrying", key)

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await loader()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Consumed here so a lone caller leaves no "never retrieved" warning
            future.exception()
            raise
        else:
            entry = self.set(key, value, ttl)
            future.set_result(entry)
            return entry
        finally:
            self._inflight.pop(key, None)

    def invalidate(self, prefix: CacheKey = ()) -> int:
        """Remove every entry whose key starts with ``prefix``.

        Returns:
            Number of entries removed
        """
        doomed = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in doomed:
            del self._entries[key]
        if doomed:
            logger.debug("Invalidated %d cache entries under %s", len(doomed), prefix)
        return len(doomed)
