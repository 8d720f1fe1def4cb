"""Unit tests for aiohttp and static registry transports"""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from carbon_enrichment.models.request import HttpMethod, RequestDescriptor
from carbon_enrichment.services.transport import (
    GENERIC_EPD,
    AiohttpTransport,
    StaticRegistryTransport,
)
from carbon_enrichment.utils.exceptions import InvalidResponseError, TransientError


def mock_session(status=200, json_body=None, text_body="", reason="OK"):
    """Session whose request() yields a canned response"""
    response = MagicMock()
    response.status = status
    response.reason = reason
    response.json = AsyncMock(return_value=json_body)
    response.text = AsyncMock(return_value=text_body)

    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    session.request.return_value.__aenter__.return_value = response
    session.request.return_value.__aexit__.return_value = False
    return session, response


class TestAiohttpTransport:
    """Tests for AiohttpTransport."""

    @pytest.mark.asyncio
    async def test_json_response(self):
        session, _ = mock_session(json_body={"carbon_rate": 1.65})
        transport = AiohttpTransport(session=session)
        descriptor = RequestDescriptor(
            url="https://registry.test/materials",
            params={"keyword": "steel", "valid": True, "page": 2},
            headers={"Authorization": "Bearer k"},
        )

        response = await transport.send(descriptor)

        assert response.status == 200
        assert response.body == {"carbon_rate": 1.65}
        session.request.assert_called_once_with(
            "GET",
            "https://registry.test/materials",
            params={"keyword": "steel", "valid": "true", "page": "2"},
            headers={"Authorization": "Bearer k"},
            json=None,
        )

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self):
        session, _ = mock_session(status=201, json_body={"id": "p1"})
        transport = AiohttpTransport(session=session)
        descriptor = RequestDescriptor(
            method=HttpMethod.POST, url="https://backend.test/projects", body={"n": 1}
        )

        response = await transport.send(descriptor)

        assert response.body == {"id": "p1"}
        assert session.request.call_args.kwargs["json"] == {"n": 1}

    @pytest.mark.asyncio
    async def test_no_content(self):
        session, response = mock_session(status=204)
        transport = AiohttpTransport(session=session)

        result = await transport.send(RequestDescriptor(url="https://backend.test/x"))

        assert result.ok
        assert result.body is None
        response.json.assert_not_called()

    @pytest.mark.asyncio
    async def test_error_status_reads_text(self):
        session, _ = mock_session(
            status=503, text_body="maintenance", reason="Service Unavailable"
        )
        transport = AiohttpTransport(session=session)

        result = await transport.send(RequestDescriptor(url="https://registry.test/x"))

        assert result.status == 503
        assert result.body == "maintenance"
        assert result.reason == "Service Unavailable"

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        session, response = mock_session()
        response.json.side_effect = ValueError("Expecting value")
        transport = AiohttpTransport(session=session)

        with pytest.raises(InvalidResponseError):
            await transport.send(RequestDescriptor(url="https://registry.test/x"))

    @pytest.mark.asyncio
    async def test_connection_error_is_transient(self):
        session = MagicMock(closed=False)
        session.request.side_effect = aiohttp.ClientConnectionError("refused")
        transport = AiohttpTransport(session=session)

        with pytest.raises(TransientError):
            await transport.send(RequestDescriptor(url="https://registry.test/x"))

    @pytest.mark.asyncio
    async def test_lazy_session_is_reused_across_requests(self):
        session, _ = mock_session(json_body=[])
        with patch("aiohttp.ClientSession", return_value=session) as session_cls:
            transport = AiohttpTransport()

            first = await transport.send(RequestDescriptor(url="https://registry.test/x"))
            second = await transport.send(RequestDescriptor(url="https://registry.test/y"))
            await transport.close()

        assert first.body == []
        assert second.body == []
        session_cls.assert_called_once()
        assert session.request.call_count == 2
        session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_closed_session_is_replaced(self):
        stale, _ = mock_session()
        stale.closed = True
        fresh, _ = mock_session(json_body={"ok": True})
        with patch("aiohttp.ClientSession", return_value=fresh) as session_cls:
            transport = AiohttpTransport(session=stale)

            result = await transport.send(RequestDescriptor(url="https://registry.test/x"))

        assert result.body == {"ok": True}
        session_cls.assert_called_once()
        stale.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_close_without_session_is_noop(self):
        with patch("aiohttp.ClientSession") as session_cls:
            await AiohttpTransport().close()

        session_cls.assert_not_called()


class TestStaticRegistryTransport:
    """Tests for the offline registry."""

    @pytest.mark.asyncio
    async def test_known_material(self):
        transport = StaticRegistryTransport()

        response = await transport.send(
            RequestDescriptor(url="https://registry.test/api/materials/steel_rebar_12mm")
        )

        assert response.status == 200
        assert response.body["carbon_rate"] == 1.65
        assert response.body["material_id"] == "steel_rebar_12mm"
        assert transport.calls == 1

    @pytest.mark.asyncio
    async def test_unknown_material_gets_generic_record(self):
        transport = StaticRegistryTransport()

        response = await transport.send(
            RequestDescriptor(url="https://registry.test/api/materials/mystery")
        )

        assert response.body["carbon_rate"] == GENERIC_EPD["carbon_rate"]
        assert response.body["epd_id"] == "EC3_GENERIC_001"

    @pytest.mark.asyncio
    async def test_search_by_keyword(self):
        transport = StaticRegistryTransport()

        response = await transport.send(
            RequestDescriptor(
                url="https://registry.test/api/materials", params={"keyword": "pine"}
            )
        )

        assert [r["material_id"] for r in response.body] == ["pine_framing_90x45"]

    @pytest.mark.asyncio
    async def test_writes_and_unknown_paths(self):
        transport = StaticRegistryTransport()

        post = await transport.send(
            RequestDescriptor(method=HttpMethod.POST, url="https://registry.test/api/materials")
        )
        other = await transport.send(RequestDescriptor(url="https://registry.test/api/epds"))

        assert post.status == 405
        assert other.status == 404
