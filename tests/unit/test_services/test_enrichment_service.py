"""Unit tests for the enrichment service facade"""

import pytest
from conftest import ScriptedTransport, ok, status

from carbon_enrichment.models.config import EnrichmentConfig, RegistrySettings
from carbon_enrichment.models.request import CallSource, RetryConfig
from carbon_enrichment.services.enrichment_service import EnrichmentService
from carbon_enrichment.services.transport import StaticRegistryTransport


@pytest.fixture
def config():
    return EnrichmentConfig(retry=RetryConfig(retry_attempts=2, retry_delay_seconds=0))


@pytest.mark.asyncio
async def test_run_batch_accepts_dicts(config, cache_store):
    async with EnrichmentService(
        config=config, cache=cache_store, transport=StaticRegistryTransport()
    ) as service:
        result = await service.run_batch(
            [{"material_id": "ready_mix_25mpa", "region_id": "brisbane"}]
        )

    assert result.successes[0].adjusted_carbon_rate == 370


@pytest.mark.asyncio
async def test_clear_cache_forces_live_lookups(config, cache_store):
    transport = StaticRegistryTransport()
    service = EnrichmentService(config=config, cache=cache_store, transport=transport)
    query = [{"material_id": "steel_rebar_12mm", "region_id": "sydney"}]

    await service.run_batch(query)
    service.clear_cache()
    result = await service.run_batch(query)

    assert result.call_log[0].source == CallSource.LIVE
    assert transport.calls == 2
    await service.close()


@pytest.mark.asyncio
async def test_cache_stats(config, cache_store):
    service = EnrichmentService(
        config=config, cache=cache_store, transport=StaticRegistryTransport()
    )
    query = [{"material_id": "steel_rebar_12mm", "region_id": "sydney"}]

    await service.run_batch(query)
    await service.run_batch(query)

    stats = service.get_cache_stats()
    assert stats.size == 1
    assert stats.hits == 1
    await service.close()


@pytest.mark.asyncio
async def test_emission_factors_fall_back(config, cache_store):
    service = EnrichmentService(
        config=config, cache=cache_store, transport=ScriptedTransport(status(503))
    )

    table = await service.get_emission_factors("QLD")

    assert table.used_fallback is True
    await service.close()


def test_backend_only_built_when_configured(cache_store):
    without = EnrichmentService(cache=cache_store, transport=StaticRegistryTransport())
    assert without.backend is None
    assert without.is_configured()["project_backend"] is False

    config = EnrichmentConfig()
    config.registries.project_backend = RegistrySettings(base_url="https://backend.test")
    with_backend = EnrichmentService(
        config=config, cache=cache_store, transport=StaticRegistryTransport()
    )
    assert with_backend.backend is not None
    assert with_backend.is_configured()["project_backend"] is True


@pytest.mark.asyncio
async def test_material_data_searches_both_registries(config, cache_store):
    def route(descriptor):
        if "/epds/search" in descriptor.url:
            return ok([{"epd_id": "EPD-AU-7", "product": "pine"}])
        return ok({"data": [{"material_id": "pine_framing_90x45"}]})

    transport = ScriptedTransport(route)
    async with EnrichmentService(
        config=config, cache=cache_store, transport=transport
    ) as service:
        result = await service.get_material_data(keyword="pine", manufacturer="Hyne")

    assert result.material_registry == [{"material_id": "pine_framing_90x45"}]
    assert result.epd_register == [{"epd_id": "EPD-AU-7", "product": "pine"}]
    assert result.errors == {}
    epd_request = next(r for r in transport.requests if "/epds/search" in r.url)
    assert epd_request.params["manufacturer"] == "Hyne"


@pytest.mark.asyncio
async def test_material_data_reports_failed_source(config, cache_store):
    """The offline registry has no EPD register, so only that source fails"""
    async with EnrichmentService(
        config=config, cache=cache_store, transport=StaticRegistryTransport()
    ) as service:
        result = await service.get_material_data(keyword="pine")

    assert [m["material_id"] for m in result.material_registry] == [
        "pine_framing_90x45"
    ]
    assert result.epd_register is None
    assert "404" in result.errors["epd_register"]
    assert "material_registry" not in result.errors
