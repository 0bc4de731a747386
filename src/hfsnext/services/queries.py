"""Gated, cached queries over the HFS API.

Each query binds one operation to a cache key and a freshness window. A
query whose token or required parameters are missing is not attempted:
it returns an IDLE result without any I/O. Otherwise the result comes from
the cache or a fresh load; a failed load yields an ERROR result holding
the raised exception unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from hfsnext.config.models.cache_settings import CacheSettings
from hfsnext.services.aggregator import ExamListAggregator
from hfsnext.services.cache import CacheKey, QueryCache, QueryKeys, QueryResult
from hfsnext.services.hfs_api import HFSApi
from hfsnext.services.models import ExamSummary
from hfsnext.shared.errors import HFSError
from hfsnext.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _present(*values: Any) -> bool:
    return all(value is not None and value != "" for value in values)


class HFSQueries:
    """Query entry points used by the presentation layer.

    Args:
        api: Backend API
        aggregator: Exam list aggregator bound to the same API
        cache: Query cache shared by every query
        cache_settings: Freshness windows
    """

    def __init__(
        self,
        api: HFSApi,
        aggregator: ExamListAggregator | None = None,
        cache: QueryCache | None = None,
        cache_settings: CacheSettings | None = None,
    ) -> None:
        self.api = api
        self.cache_settings = cache_settings or CacheSettings()
        self.aggregator = aggregator or ExamListAggregator(
            api,
            concurrency=api.transport.settings.concurrent_requests,
        )
        self.cache = cache if cache is not None else QueryCache(
            max_entries=self.cache_settings.max_entries,
        )

    async def _run(
        self,
        key: CacheKey,
        enabled: bool,
        loader: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> QueryResult[T]:
        if not enabled:
            logger.debug("Query %s not attempted: missing token or parameters", key)
            return QueryResult.idle(key)

        try:
            entry = await self.cache.fetch(
                key,
                loader,
                self.cache_settings.default_ttl if ttl is None else ttl,
            )
        except HFSError as e:
            log_operation_error(logger, e, operation=str(key[1]))
            return QueryResult.failure(key, e)
        return QueryResult.success(key, entry.value, entry.inserted_at)

    async def exam_list(self, token: str | None) -> QueryResult[list[ExamSummary]]:
        """All exams, newest first, with scores (sentinel where unavailable)."""
        return await self._run(
            QueryKeys.exam_list(),
            _present(token),
            lambda: self.aggregator.aggregate(token),
            self.cache_settings.exam_list_ttl,
        )

    async def user_snapshot(self, token: str | None) -> QueryResult[Any]:
        return await self._run(
            QueryKeys.user_snapshot(),
            _present(token),
            lambda: self.api.fetch_user_snapshot(token),
            self.cache_settings.user_snapshot_ttl,
        )

    async def exam_overview(self, token: str | None, exam_id: str | int | None) -> QueryResult[Any]:
        return await self._run(
            QueryKeys.exam_overview(exam_id),
            _present(token, exam_id),
            lambda: self.api.fetch_exam_overview(token, exam_id),
        )

    async def exam_overview_v4(
        self,
        token: str | None,
        exam_id: str | int | None,
    ) -> QueryResult[Any]:
        return await self._run(
            QueryKeys.exam_overview_v4(exam_id),
            _present(token, exam_id),
            lambda: self.api.fetch_exam_overview_v4(token, exam_id),
        )

    async def last_exam_overview(self, token: str | None) -> QueryResult[Any]:
        return await self._run(
            QueryKeys.last_exam_overview(),
            _present(token),
            lambda: self.api.fetch_last_exam_overview(token),
        )

    async def exam_rank_info(self, token: str | None, exam_id: str | int | None) -> QueryResult[Any]:
        return await self._run(
            QueryKeys.exam_rank_info(exam_id),
            _present(token, exam_id),
            lambda: self.api.fetch_exam_rank_info(token, exam_id),
        )

    async def paper_rank_info(
        self,
        token: str | None,
        exam_id: str | int | None,
        paper_id: str | None,
    ) -> QueryResult[Any]:
        return await self._run(
            QueryKeys.paper_rank_info(exam_id, paper_id),
            _present(token, exam_id, paper_id),
            lambda: self.api.fetch_paper_rank_info(token, exam_id, paper_id),
        )

    async def answer_pictures(
        self,
        token: str | None,
        exam_id: str | int | None,
        paper_id: str | None,
        pid: str | None,
    ) -> QueryResult[list[str]]:
        return await self._run(
            QueryKeys.answer_picture(exam_id, paper_id, pid),
            _present(token, exam_id, paper_id, pid),
            lambda: self.api.fetch_answer_pictures(token, exam_id, paper_id, pid),
        )

    def invalidate(self, prefix: CacheKey | None = None) -> int:
        """Drop cached results under ``prefix`` (default: everything)."""
        return self.cache.invalidate(prefix if prefix is not None else QueryKeys.all())
