"""
Shared fixtures for fetch_facade tests.
"""
import asyncio
from typing import Any, Callable, List, Optional, Union

import pytest

from fetch_facade.adapters.base import AdapterPort
from fetch_facade.cache.stores.memory import MemoryCacheStore
from fetch_facade.config import ClientConfig
from fetch_facade.core.client import HttpClient
from fetch_facade.errors import create_status_error
from fetch_facade.types import HttpResponse, RequestConfig

Outcome = Union[int, tuple, HttpResponse, BaseException, Callable[[RequestConfig], Any]]


class ScriptedAdapter(AdapterPort):
    """
    Transport double that replays a script of outcomes.

    Each outcome is one of: a status code, a ``(status, data)`` tuple, an
    ``HttpResponse``, an exception to raise, or a callable receiving the
    config. The last outcome repeats once the script runs out. Non-2xx
    statuses raise the same ``HttpError`` a real adapter would.
    """

    def __init__(self, *outcomes: Outcome, gate: Optional[asyncio.Event] = None) -> None:
        self.outcomes: List[Outcome] = list(outcomes) or [200]
        self.calls: List[RequestConfig] = []
        self.cancelled: List[Optional[str]] = []
        self.gate = gate
        self.closed = False

    @property
    def name(self) -> str:
        return "scripted"

    def _next(self) -> Outcome:
        if len(self.outcomes) > 1:
            return self.outcomes.pop(0)
        return self.outcomes[0]

    async def request(self, config: RequestConfig) -> HttpResponse[Any]:
        self.calls.append(config)
        outcome = self._next()

        if self.gate is not None:
            token = config.cancel_token
            if token is None:
                await self.gate.wait()
            else:
                opened = asyncio.ensure_future(self.gate.wait())
                aborted = asyncio.ensure_future(token.wait(config))
                try:
                    done, _ = await asyncio.wait(
                        {opened, aborted}, return_when=asyncio.FIRST_COMPLETED
                    )
                    if aborted in done:
                        aborted.result()
                finally:
                    for task in (opened, aborted):
                        if not task.done():
                            task.cancel()

        if callable(outcome) and not isinstance(outcome, BaseException):
            outcome = outcome(config)
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, HttpResponse):
            response = outcome
        elif isinstance(outcome, tuple):
            status, data = outcome
            response = HttpResponse(data=data, status=status, config=config)
        else:
            response = HttpResponse(data=None, status=outcome, config=config)

        if not response.ok:
            raise create_status_error(response)
        return response

    def cancel(self, request_id: Optional[str] = None) -> None:
        self.cancelled.append(request_id)

    async def close(self) -> None:
        self.closed = True

    @property
    def call_count(self) -> int:
        return len(self.calls)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Async sleep double that records requested delays and returns at once."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


@pytest.fixture
def adapter():
    """Scripted adapter answering 200 with no body."""
    return ScriptedAdapter()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def make_client(clock, sleeps):
    """Build an HttpClient bound to a scripted adapter and fake time."""

    def _make(adapter: AdapterPort, **options: Any) -> HttpClient:
        config = ClientConfig(adapter=adapter, base_url="https://api.example.com", **options)
        return HttpClient(config, cache_store=MemoryCacheStore(clock=clock), sleep=sleeps)

    return _make


@pytest.fixture
def client(make_client, adapter):
    """HttpClient over the default scripted adapter."""
    return make_client(adapter)


@pytest.fixture
def sample_request_config():
    """Sample RequestConfig for testing."""
    return RequestConfig(
        url="/users",
        method="GET",
        base_url="https://api.example.com",
        headers={"X-Custom": "value"},
        params={"page": 1},
    )
