"""Query cache configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from hfsnext.shared.constants import CacheConfig


class CacheSettings(BaseModel):
    """Freshness windows (seconds) handed to the query cache."""

    exam_list_ttl: float = Field(default=CacheConfig.EXAM_LIST_TTL, ge=0)
    user_snapshot_ttl: float = Field(default=CacheConfig.USER_SNAPSHOT_TTL, ge=0)
    default_ttl: float = Field(
        default=CacheConfig.DEFAULT_TTL,
        ge=0,
        description="TTL for every query without its own window",
    )
    max_entries: int = Field(default=CacheConfig.MAX_ENTRIES, gt=0)
