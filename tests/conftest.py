# tests/conftest.py
import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from picaloco_docs.config import ServiceConfig
from picaloco_docs.services.spec_fetcher import SpecFetcher

SUPABASE_URL = "https://demo-project.supabase.co"
ANON_KEY = "anon-key-1234567890"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config():
    return ServiceConfig(supabase_url=SUPABASE_URL, supabase_anon_key=ANON_KEY)


class FakeClock:
    """Controllable replacement for SpecCache's clocks.

    Calling it gives monotonic seconds; `wall()` gives the display time.
    """

    def __init__(self):
        self.monotonic = 1000.0
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.monotonic

    def wall(self):
        return self.now

    def advance(self, seconds: float):
        self.monotonic += seconds
        self.now += timedelta(seconds=seconds)

    def step_wall(self, seconds: float):
        """Move only the wall clock, like an NTP correction."""
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


class StubFetcher:
    """Stands in for SpecFetcher: returns canned outcomes and counts calls."""

    def __init__(self, *outcomes, gate: asyncio.Event = None, connected: bool = True):
        self.outcomes = list(outcomes)
        self.calls = 0
        self.gate = gate
        self.connected = connected

    async def fetch(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        return self.outcomes[min(self.calls, len(self.outcomes)) - 1]

    async def check_connection(self):
        return self.connected


@pytest.fixture
def make_fetcher(config):
    """Build a real SpecFetcher whose HTTP traffic goes to `handler`."""
    def _make(handler):
        return SpecFetcher(config, transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def stub_fetcher():
    return StubFetcher
