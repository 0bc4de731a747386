"""
Query Cache Constants
"""

from .system import BASE_HOUR


class CacheConfig:
    """Cache namespace and freshness windows (seconds)."""

    ROOT_KEY = "hfsnext"

    EXAM_LIST_TTL = 1 * BASE_HOUR
    USER_SNAPSHOT_TTL = 4 * BASE_HOUR
    # Zero means every request refetches, the cache only shares in-flight work
    DEFAULT_TTL = 0

    MAX_ENTRIES = 256
