"""Transports that carry a RequestDescriptor to an upstream registry.

The executor owns timeouts, retries and caching; a transport only performs
one attempt and reports the raw status and body.

- AiohttpTransport: real HTTP(S) with JSON bodies
- StaticRegistryTransport: in-process registry serving a bundled EPD table,
  used for offline runs and tests
"""

import asyncio
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp
import structlog

from carbon_enrichment.models.request import RequestDescriptor, TransportResponse
from carbon_enrichment.utils.exceptions import InvalidResponseError, TransientError

logger = structlog.get_logger()


class Transport(ABC):
    """Single-attempt request sender"""

    @abstractmethod
    async def send(self, descriptor: RequestDescriptor) -> TransportResponse:
        """Send one request

        Returns:
            TransportResponse with status and decoded body

        Raises:
            TransientError: Connection-level failure
        """
        pass

    async def close(self) -> None:
        return None


class AiohttpTransport(Transport):
    """Send requests with aiohttp

    One session is shared by every request until close(); it is created on
    first use so the transport can be built outside an event loop.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def send(self, descriptor: RequestDescriptor) -> TransportResponse:
        session = await self._get_session()
        return await self._send(session, descriptor)

    async def _send(
        self, session: aiohttp.ClientSession, descriptor: RequestDescriptor
    ) -> TransportResponse:
        try:
            async with session.request(
                descriptor.method.value,
                descriptor.url,
                params=self._encode_params(descriptor.params),
                headers=descriptor.headers,
                json=descriptor.body,
            ) as response:
                if 200 <= response.status < 300:
                    if response.status == 204:
                        body: Any = None
                    else:
                        try:
                            body = await response.json(content_type=None)
                        except ValueError as e:
                            raise InvalidResponseError(
                                f"Response from {descriptor.url} is not JSON"
                            ) from e
                else:
                    body = await response.text()

                return TransportResponse(
                    status=response.status,
                    body=body,
                    reason=response.reason or "",
                )

        except aiohttp.ClientError as e:
            logger.warning(
                "transport_connection_error", url=descriptor.url, error=str(e)
            )
            raise TransientError(f"Connection error: {e}") from e

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    @staticmethod
    def _encode_params(params: Dict[str, Any]) -> Dict[str, str]:
        """Drop unset params and stringify the rest for the query string"""
        encoded = {}
        for name, value in params.items():
            if value is None:
                continue
            if isinstance(value, bool):
                encoded[name] = "true" if value else "false"
            else:
                encoded[name] = str(value)
        return encoded


# EC3-style records served by the static registry
SAMPLE_EPDS: Dict[str, Dict[str, Any]] = {
    "ready_mix_25mpa": {
        "carbon_rate": 365,
        "unit": "kg/m3",
        "confidence": 0.95,
        "epd_id": "EC3_CONC_001",
    },
    "steel_rebar_12mm": {
        "carbon_rate": 1.65,
        "unit": "kg/kg",
        "confidence": 0.98,
        "epd_id": "EC3_STEEL_001",
    },
    "clay_brick_standard": {
        "carbon_rate": 0.22,
        "unit": "kg/each",
        "confidence": 0.92,
        "epd_id": "EC3_BRICK_001",
    },
    "glasswool_batts_r25": {
        "carbon_rate": 1.1,
        "unit": "kg/m2",
        "confidence": 0.90,
        "epd_id": "EC3_INSUL_001",
    },
    "pine_framing_90x45": {
        "carbon_rate": 0.35,
        "unit": "kg/kg",
        "confidence": 0.88,
        "epd_id": "EC3_TIMBER_001",
    },
}

GENERIC_EPD: Dict[str, Any] = {
    "carbon_rate": 2.5,
    "unit": "kg/unit",
    "confidence": 0.75,
    "epd_id": "EC3_GENERIC_001",
}

_MATERIAL_PATH = re.compile(r"/materials/(?P<material_id>[^/?]+)$")


class StaticRegistryTransport(Transport):
    """In-process material registry

    Answers ``GET .../materials/{id}`` from a fixed table (unknown ids get a
    generic record) and ``GET .../materials`` with the matching records.
    Everything else is a 404.
    """

    def __init__(
        self,
        records: Optional[Dict[str, Dict[str, Any]]] = None,
        latency_seconds: float = 0.0,
    ):
        self.records = dict(records) if records is not None else dict(SAMPLE_EPDS)
        self.latency_seconds = latency_seconds
        self.calls = 0

    async def send(self, descriptor: RequestDescriptor) -> TransportResponse:
        self.calls += 1
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        if descriptor.method.value != "GET":
            return TransportResponse(status=405, reason="Method Not Allowed")

        match = _MATERIAL_PATH.search(descriptor.url)
        if match:
            material_id = match.group("material_id")
            record = self.records.get(material_id, GENERIC_EPD)
            return TransportResponse(
                status=200, body={"material_id": material_id, **record}
            )

        if descriptor.url.rstrip("/").endswith("/materials"):
            keyword = str(descriptor.params.get("keyword") or "")
            matches = [
                {"material_id": material_id, **record}
                for material_id, record in sorted(self.records.items())
                if keyword.lower() in material_id.lower()
            ]
            return TransportResponse(status=200, body=matches)

        return TransportResponse(status=404, reason="Not Found")
