"""
Shared pytest fixtures for Coverity MCP tests.

This module provides common fixtures including:
- FakeCoverityAPI: route-based stand-in for Coverity Connect behind httpx.MockTransport
- Coverity configuration and client fixtures
- A recording host for registry tests
"""

import asyncio
import json
import os
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
import pytest_asyncio

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from coverity_mcp.config import CoverityConfig
from coverity_mcp.modules.client import CoverityClient


# =============================================================================
# Coverity API Mocking Infrastructure
# =============================================================================

Payload = Union[Dict[str, Any], Callable[[httpx.Request], Dict[str, Any]]]


@dataclass
class Route:
    """A canned response for one (method, path) pair."""
    payload: Optional[Payload] = None
    status: int = 200
    delay: float = 0.0
    raw: Optional[bytes] = None
    error: Optional[Exception] = None
    gate: Optional[asyncio.Event] = None
    signal: Optional[asyncio.Event] = None


@dataclass
class RecordedRequest:
    method: str
    path: str
    params: Dict[str, str]
    headers: Dict[str, str]
    body: Any = None
    raw_path: bytes = b""


class FakeCoverityAPI:
    """
    Fake Coverity Connect server for httpx.MockTransport.

    Usage:
        def test_projects(coverity_api, coverity_client):
            coverity_api.register("GET", "/api/v2/projects", {"projects": []})
            projects = await coverity_client.list_projects()
            assert coverity_api.was_called("/api/v2/projects")
    """

    def __init__(self):
        self._routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[RecordedRequest] = []

    def register(
        self,
        method: str,
        path: str,
        payload: Optional[Payload] = None,
        status: int = 200,
        delay: float = 0.0,
        raw: Optional[bytes] = None,
        error: Optional[Exception] = None,
        gate: Optional[asyncio.Event] = None,
        signal: Optional[asyncio.Event] = None,
    ) -> "FakeCoverityAPI":
        """
        Register a response for a route.

        Args:
            payload: JSON body, or a callable building it from the request
            status: HTTP status code
            delay: Seconds to sleep before answering
            raw: Raw body bytes (overrides payload), e.g. malformed JSON
            error: Exception raised instead of answering (transport failure)
            gate: Event awaited before answering
            signal: Event set as soon as the request arrives

        Returns:
            self for chaining
        """
        self._routes[(method.upper(), path)] = Route(
            payload=payload,
            status=status,
            delay=delay,
            raw=raw,
            error=error,
            gate=gate,
            signal=signal,
        )
        return self

    async def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=request.url.path,
                params=dict(request.url.params),
                headers=dict(request.headers),
                body=body,
                raw_path=request.url.raw_path,
            )
        )

        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.url.path}"})

        if route.signal is not None:
            route.signal.set()
        if route.gate is not None:
            await route.gate.wait()
        if route.delay:
            await asyncio.sleep(route.delay)
        if route.error is not None:
            raise route.error
        if route.raw is not None:
            return httpx.Response(route.status, content=route.raw)

        payload = route.payload(request) if callable(route.payload) else route.payload
        return httpx.Response(route.status, json=payload if payload is not None else {})

    def calls_to(self, path: str) -> List[RecordedRequest]:
        return [r for r in self.requests if r.path == path]

    def was_called(self, path: str) -> bool:
        return bool(self.calls_to(path))


@pytest.fixture
def coverity_api():
    """Fresh fake Coverity API with no routes registered."""
    return FakeCoverityAPI()


@pytest.fixture
def coverity_config():
    """Connection settings used by client fixtures."""
    return CoverityConfig(
        host="coverity.example.com",
        port=8443,
        ssl=True,
        user="alice",
        auth_key="secret-key",
        project="proj",
    )


@pytest_asyncio.fixture
async def coverity_client(coverity_api, coverity_config):
    """CoverityClient wired to the fake API."""
    client = CoverityClient(coverity_config, transport=httpx.MockTransport(coverity_api.handle))
    yield client
    await client.aclose()


@pytest.fixture
def coverity_env(monkeypatch):
    """Complete Coverity environment; individual tests delete what they need to."""
    for key in (
        "COVERITY_PORT",
        "COVERITY_SSL",
        "COVERITY_PROJECT",
        "COVERITY_TRIAGE_STORE",
        "COVERITY_DEBUG",
        "TRANSPORT",
        "HTTP_HOST",
        "PORT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("COVERITY_HOST", "coverity.example.com")
    monkeypatch.setenv("COVERITY_USER", "alice")
    monkeypatch.setenv("COVERITY_AUTH_KEY", "secret-key")
    return monkeypatch


# =============================================================================
# Registry Helpers
# =============================================================================


class RecordingHost:
    """Minimal host that records registrations made by capability units."""

    def __init__(self):
        self.registered: List[str] = []

    def register_tool(self, name, **kwargs):
        self.registered.append(name)

    def register_resource(self, uri, **kwargs):
        self.registered.append(uri)

    def register_prompt(self, name, **kwargs):
        self.registered.append(name)


@pytest.fixture
def recording_host():
    return RecordingHost()


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests exercising several modules together"
    )
