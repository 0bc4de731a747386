"""Tests for the query cache, cache keys and query results."""

import asyncio

import pytest

from hfsnext.services.cache import (
    CacheEntry,
    QueryCache,
    QueryKeys,
    QueryResult,
    QueryStatus,
)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> QueryCache:
    return QueryCache(clock=clock, max_entries=3)


class TestQueryKeys:
    def test_namespace_prefix(self) -> None:
        assert QueryKeys.all() == ("hfsnext",)
        assert QueryKeys.exam_list() == ("hfsnext", "examList")

    def test_parameters_are_part_of_the_key(self) -> None:
        assert QueryKeys.exam_overview(1) == ("hfsnext", "examOverview", 1)
        assert QueryKeys.exam_overview(1) != QueryKeys.exam_overview(2)
        assert QueryKeys.answer_picture(1, "p", "s") == ("hfsnext", "answerPicture", 1, "p", "s")
        assert QueryKeys.paper_rank_info(1, "p") == ("hfsnext", "paperRankInfo", 1, "p")

    def test_keys_compare_by_all_components(self) -> None:
        assert QueryKeys.exam_rank_info("1") == QueryKeys.exam_rank_info("1")
        assert QueryKeys.exam_rank_info("1") != QueryKeys.exam_overview("1")


class TestQueryResult:
    def test_idle(self) -> None:
        result = QueryResult.idle(("k",))

        assert result.status is QueryStatus.IDLE
        assert result.is_idle
        assert result.unwrap() is None

    def test_success(self) -> None:
        result = QueryResult.success(("k",), [1, 2], fetched_at=5.0)

        assert result.is_success
        assert result.unwrap() == [1, 2]
        assert result.fetched_at == 5.0

    def test_failure_reraises_unchanged(self) -> None:
        error = RuntimeError("boom")
        result = QueryResult.failure(("k",), error)

        assert result.is_error
        with pytest.raises(RuntimeError) as exc_info:
            result.unwrap()
        assert exc_info.value is error


class TestCacheEntry:
    def test_freshness_window(self) -> None:
        entry = CacheEntry(value=1, inserted_at=100.0, ttl=10.0)

        assert entry.is_fresh(109.9)
        assert not entry.is_fresh(110.0)


class TestQueryCache:
    def test_set_and_get(self, cache: QueryCache) -> None:
        cache.set(("a",), "value", ttl=60)

        entry = cache.get(("a",))
        assert entry is not None
        assert entry.value == "value"
        assert entry.inserted_at == 1000.0
        assert ("a",) in cache

    def test_expired_entry_is_dropped(self, cache: QueryCache, clock: FakeClock) -> None:
        cache.set(("a",), "value", ttl=60)
        clock.advance(60)

        assert cache.get(("a",)) is None
        assert len(cache) == 0

    def test_zero_ttl_is_not_stored(self, cache: QueryCache) -> None:
        entry = cache.set(("a",), "value", ttl=0)

        assert entry.value == "value"
        assert len(cache) == 0

    def test_oldest_entry_evicted(self, cache: QueryCache) -> None:
        for name in ("a", "b", "c", "d"):
            cache.set((name,), name, ttl=60)

        assert len(cache) == 3
        assert ("a",) not in cache
        assert ("d",) in cache

    def test_invalid_max_entries(self) -> None:
        with pytest.raises(ValueError):
            QueryCache(max_entries=0)

    def test_invalidate_by_prefix(self, cache: QueryCache) -> None:
        cache.set(QueryKeys.exam_overview(1), 1, ttl=60)
        cache.set(QueryKeys.exam_overview(2), 2, ttl=60)
        cache.set(QueryKeys.exam_list(), [], ttl=60)

        removed = cache.invalidate((*QueryKeys.all(), "examOverview"))

        assert removed == 2
        assert QueryKeys.exam_list() in cache

    def test_invalidate_everything(self, cache: QueryCache) -> None:
        cache.set(("a",), 1, ttl=60)
        cache.set(("b",), 2, ttl=60)

        assert cache.invalidate() == 2
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_fetch_loads_on_miss_and_caches(self, cache: QueryCache) -> None:
        calls = 0

        async def loader() -> str:
            nonlocal calls
            calls += 1
            return "loaded"

        first = await cache.fetch(("a",), loader, ttl=60)
        second = await cache.fetch(("a",), loader, ttl=60)

        assert first.value == second.value == "loaded"
        assert calls == 1

    @pytest.mark.asyncio
    async def test_fetch_reloads_after_expiry(self, cache: QueryCache, clock: FakeClock) -> None:
        values = iter(["old", "new"])

        async def loader() -> str:
            return next(values)

        await cache.fetch(("a",), loader, ttl=10)
        clock.advance(11)
        entry = await cache.fetch(("a",), loader, ttl=10)

        assert entry.value == "new"

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self, cache: QueryCache) -> None:
        attempts = 0

        async def loader() -> str:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise ValueError("first attempt fails")
            return "ok"

        with pytest.raises(ValueError):
            await cache.fetch(("a",), loader, ttl=60)

        entry = await cache.fetch(("a",), loader, ttl=60)
        assert entry.value == "ok"
        assert attempts == 2

    @pytest.mark.asyncio
    async def test_concurrent_fetches_share_one_load(self, cache: QueryCache) -> None:
        calls = 0
        release = asyncio.Event()

        async def loader() -> str:
            nonlocal calls
            calls += 1
            await release.wait()
            return "shared"

        tasks = [asyncio.create_task(cache.fetch(("a",), loader, ttl=0)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        entries = await asyncio.gather(*tasks)

        assert calls == 1
        assert [entry.value for entry in entries] == ["shared"] * 3

    @pytest.mark.asyncio
    async def test_concurrent_waiters_see_the_failure(self, cache: QueryCache) -> None:
        release = asyncio.Event()

        async def loader() -> str:
            await release.wait()
            raise ValueError("backend down")

        tasks = [asyncio.create_task(cache.fetch(("a",), loader, ttl=60)) for _ in range(2)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(result, ValueError) for result in results)

    @pytest.mark.asyncio
    async def test_waiter_reloads_when_the_loading_caller_is_cancelled(
        self, cache: QueryCache
    ) -> None:
        calls = 0
        never = asyncio.Event()

        async def loader() -> str:
            nonlocal calls
            calls += 1
            if calls == 1:
                await never.wait()
            return "fresh"

        leader = asyncio.create_task(cache.fetch(("a",), loader, ttl=60))
        await asyncio.sleep(0)
        waiter = asyncio.create_task(cache.fetch(("a",), loader, ttl=60))
        await asyncio.sleep(0)

        leader.cancel()
        entry = await waiter

        assert entry.value == "fresh"
        assert calls == 2
        with pytest.raises(asyncio.CancelledError):
            await leader

    @pytest.mark.asyncio
    async def test_cancelled_waiter_leaves_the_load_running(self, cache: QueryCache) -> None:
        release = asyncio.Event()

        async def loader() -> str:
            await release.wait()
            return "shared"

        leader = asyncio.create_task(cache.fetch(("a",), loader, ttl=60))
        await asyncio.sleep(0)
        waiter = asyncio.create_task(cache.fetch(("a",), loader, ttl=60))
        await asyncio.sleep(0)

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        release.set()

        assert (await leader).value == "shared"
