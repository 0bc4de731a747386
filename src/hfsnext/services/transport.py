"""Async HTTP transport for the HFS backend.

Owns the aiohttp.ClientSession used for every request, sends the auth
token, enforces explicit timeouts and turns responses into ApiEnvelope
objects. Transport problems are mapped onto HFSNetworkError and
undecodable bodies onto HFSParsingError. No request is retried.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

import aiohttp
from pydantic import ValidationError

from hfsnext.config.models.api_settings import APISettings
from hfsnext.services.models import ApiEnvelope
from hfsnext.shared.constants import APIConfig, BASE_MILLISECOND
from hfsnext.shared.errors import (
    ErrorCode,
    ErrorContext,
    HFSNetworkError,
    HFSParsingError,
)
from hfsnext.shared.logging import log_api_call

logger = logging.getLogger(__name__)


class HFSTransport:
    """Issues authenticated GET requests and returns parsed envelopes.

    The session is created lazily on first use and shared by every
    request, including the concurrent ones of the exam-list fan-out.

    Args:
        settings: Transport settings (base URL, timeouts, user agent)
        session: Optional externally managed session. It is not closed by
            close().
    """

    def __init__(
        self,
        settings: APISettings | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.settings = settings or APISettings()
        self._session = session
        self._owns_session = session is None
        self._session_lock = asyncio.Lock()

    @property
    def timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(
            total=self.settings.timeout,
            connect=self.settings.connect_timeout,
        )

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create the HTTP session."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    timeout=self.timeout,
                    headers={
                        "User-Agent": self.settings.user_agent,
                        "Accept": APIConfig.ACCEPT_JSON,
                    },
                )
                self._owns_session = True
                logger.debug("aiohttp.ClientSession created")
            return self._session

    @staticmethod
    def auth_headers(token: str) -> dict[str, str]:
        return {APIConfig.AUTH_HEADER: f"{APIConfig.AUTH_SCHEME} {token}"}

    async def get_envelope(
        self,
        url: str,
        token: str,
        operation: str | None = None,
    ) -> ApiEnvelope:
        """GET ``url`` with the token and parse the response envelope.

        Args:
            url: Fully resolved URL
            token: Auth token sent as a bearer credential
            operation: Operation name, used for logging and error context

        Returns:
            The parsed envelope. ``ok`` is not checked here.

        Raises:
            HFSNetworkError: On connection errors, timeouts, or an HTTP error
                status whose body is not an envelope
            HFSParsingError: If a successful response is not a JSON envelope
        """
        context = ErrorContext(operation=operation, url=url)
        session = await self.get_session()
        start = time.perf_counter()

        try:
            async with session.get(
                url,
                headers=self.auth_headers(token),
                timeout=self.timeout,
            ) as response:
                status = response.status
                body = await response.read()
        except asyncio.TimeoutError as e:
            raise HFSNetworkError(
                ErrorCode.API_TIMEOUT,
                f"Request timed out after {self.settings.timeout}s",
                context,
                original_error=e,
            ) from e
        except aiohttp.ClientError as e:
            raise HFSNetworkError(
                ErrorCode.NETWORK_ERROR,
                f"Request failed: {e}",
                context,
                original_error=e,
            ) from e

        duration_ms = (time.perf_counter() - start) * BASE_MILLISECOND
        log_api_call(
            logger,
            endpoint=operation or url,
            status_code=status,
            duration_ms=duration_ms,
        )

        try:
            return self.parse_envelope(body, context)
        except HFSParsingError as e:
            if status >= 400:
                raise HFSNetworkError(
                    ErrorCode.API_SERVER_ERROR,
                    f"HTTP {status} from backend",
                    context,
                    original_error=e,
                    status=status,
                ) from e
            raise

    @staticmethod
    def parse_envelope(body: bytes | str, context: ErrorContext | None = None) -> ApiEnvelope:
        """Decode a response body into an ApiEnvelope.

        Raises:
            HFSParsingError: If the body is not UTF-8 JSON or lacks the ``ok`` flag
        """
        try:
            text = body.decode("utf-8") if isinstance(body, bytes) else body
        except UnicodeDecodeError as e:
            raise HFSParsingError(
                ErrorCode.INVALID_RESPONSE,
                "Response body is not valid UTF-8",
                context,
                original_error=e,
            ) from e

        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as e:
            raise HFSParsingError(
                ErrorCode.INVALID_RESPONSE,
                "Response body is not valid JSON",
                context,
                original_error=e,
            ) from e

        try:
            return ApiEnvelope.model_validate(data)
        except ValidationError as e:
            raise HFSParsingError(
                ErrorCode.INVALID_RESPONSE,
                "Response body is not an API envelope",
                context,
                original_error=e,
            ) from e

    async def close(self) -> None:
        """Close the session if this transport created it."""
        if self._session is not None and not self._session.closed and self._owns_session:
            await self._session.close()
            logger.debug("aiohttp.ClientSession closed")
        self._session = None

    async def __aenter__(self) -> HFSTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
