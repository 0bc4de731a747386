"""API configuration models.

Settings for the HFS backend transport: base URL, timeouts and the
concurrency bound of the per-exam fan-out.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from hfsnext.shared.constants import APIConfig


class APISettings(BaseModel):
    """HFS backend transport configuration.

    No retry policy is configurable: every request is attempted once.
    """

    base_url: str = Field(
        default=APIConfig.BASE_URL,
        description="Scheme and host every endpoint template is joined to",
    )
    timeout: float = Field(
        default=APIConfig.DEFAULT_TIMEOUT,
        gt=0,
        description="Total request timeout in seconds",
    )
    connect_timeout: float = Field(
        default=APIConfig.CONNECT_TIMEOUT,
        gt=0,
        description="Connection timeout in seconds",
    )
    concurrent_requests: int = Field(
        default=APIConfig.DEFAULT_CONCURRENT_REQUESTS,
        gt=0,
        description="Maximum number of detail fetches in flight at once",
    )
    user_agent: str = Field(
        default=APIConfig.USER_AGENT,
        description="User-Agent header sent with every request",
    )
