"""HFS client facade.

Wires transport, endpoint registry, API, aggregator, cache and queries
together from Settings and manages the transport's lifetime.
"""

from __future__ import annotations

import logging
from typing import Any

from hfsnext.config.loader import get_config
from hfsnext.config.models.settings import Settings
from hfsnext.services.aggregator import ExamListAggregator, make_timestamp_formatter
from hfsnext.services.cache import QueryCache
from hfsnext.services.endpoints import EndpointRegistry
from hfsnext.services.hfs_api import HFSApi
from hfsnext.services.queries import HFSQueries
from hfsnext.services.transport import HFSTransport

logger = logging.getLogger(__name__)


class HFSClient:
    """Entry point bundling every data-layer component.

    Example:
        >>> async with create_hfs_client() as client:
        ...     result = await client.queries.exam_list(token)
    """

    def __init__(self, settings: Settings, transport: HFSTransport | None = None) -> None:
        self.settings = settings
        self.transport = transport or HFSTransport(settings.api)
        self.registry = EndpointRegistry(settings.api.base_url)
        self.api = HFSApi(self.transport, self.registry)
        self.aggregator = ExamListAggregator(
            self.api,
            concurrency=settings.api.concurrent_requests,
            formatter=make_timestamp_formatter(settings.display),
        )
        self.cache = QueryCache(max_entries=settings.cache.max_entries)
        self.queries = HFSQueries(
            self.api,
            aggregator=self.aggregator,
            cache=self.cache,
            cache_settings=settings.cache,
        )
        logger.debug("HFSClient initialized for %s", settings.api.base_url)

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> HFSClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


def create_hfs_client(settings: Settings | None = None) -> HFSClient:
    """Create a client, loading the global settings when none are given."""
    return HFSClient(settings or get_config())
