"""Shared test doubles: a controllable clock, a scripted transport and a
recording sleep."""

import asyncio
from typing import Any, Callable, List, Union

import pytest

from carbon_enrichment.models.cache import CacheConfig
from carbon_enrichment.models.request import RequestDescriptor, TransportResponse
from carbon_enrichment.services.cache_service import CacheStore
from carbon_enrichment.services.transport import Transport

Step = Union[TransportResponse, BaseException, Callable[[RequestDescriptor], Any]]


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedTransport(Transport):
    """Replays a script of responses/exceptions; the last step repeats."""

    def __init__(self, *steps: Step):
        self.steps: List[Step] = list(steps)
        self.requests: List[RequestDescriptor] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def send(self, descriptor: RequestDescriptor) -> TransportResponse:
        self.requests.append(descriptor)
        index = min(len(self.requests), len(self.steps)) - 1
        step = self.steps[index]

        if isinstance(step, BaseException):
            raise step
        if callable(step):
            result = step(descriptor)
            if asyncio.iscoroutine(result):
                result = await result
            return result
        return step


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def ok(body: Any) -> TransportResponse:
    return TransportResponse(status=200, body=body, reason="OK")


def status(code: int, reason: str = "") -> TransportResponse:
    return TransportResponse(status=code, reason=reason)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_store(clock):
    return CacheStore(CacheConfig(default_ttl_seconds=60), clock=clock)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()
