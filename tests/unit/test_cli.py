"""Tests for CLI commands."""

import json
import logging
from unittest.mock import AsyncMock, patch

import pytest
import structlog
from typer.testing import CliRunner

from carbon_enrichment.cli import app
from carbon_enrichment.models.cache import CacheBackend, CacheConfig
from carbon_enrichment.models.emission_factors import EmissionFactorTable
from carbon_enrichment.services.cache_service import CacheStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    """Silence structlog so command output is all that reaches stdout."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL)
    )
    with patch("carbon_enrichment.cli.utils.configure_logging"):
        yield
    structlog.reset_defaults()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "enrichment_config.yaml"
    path.write_text(
        "retry:\n"
        "  retry_attempts: 1\n"
        "  retry_delay_seconds: 0\n"
        "cache:\n"
        "  backend: disk\n"
        f"  cache_dir: {tmp_path / 'cache'}\n"
    )
    return path


def test_run_offline():
    result = runner.invoke(
        app, ["run", "ready_mix_25mpa", "steel_rebar_12mm", "--offline"]
    )

    assert result.exit_code == 0
    assert "Enriched 2/2 materials for brisbane" in result.stdout
    assert "365.0 + 5.0 = 370 kg/m3" in result.stdout
    assert "Boral Pinkenba" in result.stdout


def test_run_offline_json():
    result = runner.invoke(
        app, ["run", "pine_framing_90x45", "--offline", "--json", "-r", "melbourne"]
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    item = payload["results"][0]
    assert item["region_id"] == "melbourne"
    assert item["material_class"] == "timber"
    assert item["suppliers"] == ["Generic Supplier"]
    assert payload["stats"] == {"hits": 0, "misses": 1, "efficiency_ratio": 0.0}


def test_run_with_metrics():
    result = runner.invoke(app, ["run", "clay_brick_standard", "--offline", "--metrics"])

    assert result.exit_code == 0
    assert "carbon_enrich_batch_queries_total" in result.stdout


def test_run_missing_config(tmp_path):
    result = runner.invoke(
        app, ["run", "x", "--offline", "--config", str(tmp_path / "absent.yaml")]
    )

    assert result.exit_code == 1
    assert "Configuration Error" in result.stdout


def test_validate_valid(config_file):
    result = runner.invoke(app, ["validate", str(config_file)])

    assert result.exit_code == 0
    assert "Configuration is valid" in result.stdout
    assert "brisbane, melbourne, sydney" in result.stdout


def test_validate_invalid(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("batch:\n  batch_size: -1\n")

    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 1
    assert "Validation failed" in result.stdout


def test_factors_reports_fallback():
    with patch(
        "carbon_enrichment.services.enrichment_service.EnrichmentService.get_emission_factors",
        new_callable=AsyncMock,
        return_value=EmissionFactorTable.fallback("QLD"),
    ):
        result = runner.invoke(app, ["factors", "QLD"])

    assert result.exit_code == 0
    assert "Emission factors for QLD" in result.stdout
    assert "fallback dataset nger-2023" in result.stdout


def test_cache_stats_and_clear(config_file):
    stats = runner.invoke(app, ["cache", "stats", "--config", str(config_file)])
    cleared = runner.invoke(app, ["cache", "clear", "--config", str(config_file)])

    assert stats.exit_code == 0
    assert "Cached entries: 0" in stats.stdout
    assert cleared.exit_code == 0
    assert "Cache cleared" in cleared.stdout


def test_cache_invalidate_by_pattern(config_file, tmp_path):
    store = CacheStore(
        CacheConfig(backend=CacheBackend.DISK, cache_dir=str(tmp_path / "cache"))
    )
    store.put("k1", 1, label="GET https://registry.test/materials/steel_rebar_12mm")
    store.put("k2", 2, label="GET https://registry.test/epds/EPD-1")
    store.close()

    result = runner.invoke(
        app, ["cache", "invalidate", "/materials/", "--config", str(config_file)]
    )

    assert result.exit_code == 0
    assert "Invalidated 1 cached responses" in result.stdout
