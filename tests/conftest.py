"""
Pytest configuration and shared fixtures for hfsnext tests.

The FakeBackend stands in for HFSTransport.get_envelope: it answers each
resolved URL with a canned envelope (or raises a canned error) and
records every call.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from hfsnext.config.models.api_settings import APISettings
from hfsnext.services.hfs_api import HFSApi
from hfsnext.services.models import ApiEnvelope
from hfsnext.services.transport import HFSTransport

BASE_URL = "https://hfs.test"


@dataclass
class FakeBackend:
    """Routes URLs (by path suffix) to envelopes or exceptions."""

    routes: dict[str, ApiEnvelope | BaseException] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    delay: float = 0.0

    def route(self, path: str, response: ApiEnvelope | BaseException) -> None:
        self.routes[path] = response

    async def __call__(self, url: str, token: str, operation: str | None = None) -> ApiEnvelope:
        self.calls.append((url, token))
        if self.delay:
            await asyncio.sleep(self.delay)
        path = url[len(BASE_URL):]
        if path not in self.routes:
            msg = f"No route for {path}"
            raise AssertionError(msg)
        response = self.routes[path]
        if isinstance(response, BaseException):
            raise response
        return response

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def transport(backend: FakeBackend) -> HFSTransport:
    """Transport whose network call is replaced by the fake backend."""
    transport = HFSTransport(APISettings(base_url=BASE_URL))
    transport.get_envelope = backend  # type: ignore[method-assign]
    return transport


@pytest.fixture
def api(transport: HFSTransport) -> HFSApi:
    return HFSApi(transport)


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Run in an empty directory with a private copy of the environment."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(os, "environ", dict(os.environ))
    for name in ("HFS_TOKEN", "HFSNEXT_API__TIMEOUT", "HFSNEXT_API__BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    yield tmp_path


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def ok():
    """Factory for successful envelopes."""

    def make(payload: Any) -> ApiEnvelope:
        return ApiEnvelope(ok=True, payload=payload)

    return make


@pytest.fixture
def failed():
    """Factory for ``ok: false`` envelopes."""

    def make(err_msg: str | None = None) -> ApiEnvelope:
        return ApiEnvelope(ok=False, payload=None, errMsg=err_msg)

    return make
