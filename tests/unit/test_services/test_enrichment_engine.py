"""Unit tests for the regional enrichment engine"""

from datetime import datetime, timezone

import pytest

from carbon_enrichment.models.material import (
    GENERIC_SUPPLIER,
    ClimateAdjustments,
    MaterialClass,
    MaterialRecord,
    RegionContext,
)
from carbon_enrichment.services.enrichment_engine import (
    classify_material,
    enrich,
    transport_penalty_for,
)

STAMP = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def brisbane():
    return RegionContext(
        region_id="brisbane",
        transport_penalty_by_material_class={
            MaterialClass.STEEL: 0.15,
            MaterialClass.CONCRETE: 5,
            MaterialClass.TIMBER: 0.02,
        },
        supplier_directory={
            "ready_mix_25mpa": ["Boral Pinkenba", "Holcim Eagle Farm"],
            "steel_rebar_12mm": ["InfraBuild Brisbane", "Smorgon Steel"],
        },
        climate_adjustments=ClimateAdjustments(
            insulation_multiplier=1.0, hazard_flags=frozenset({"cyclone_rating"})
        ),
    )


def record(material_id, carbon_rate, unit="kg/kg"):
    return MaterialRecord(
        material_id=material_id,
        carbon_rate=carbon_rate,
        unit=unit,
        confidence_score=0.9,
        source_id="EPD-1",
    )


@pytest.mark.parametrize(
    "material_id, expected",
    [
        ("steel_rebar_12mm", MaterialClass.STEEL),
        ("STEEL_BEAM", MaterialClass.STEEL),
        ("ready_mix_25mpa", MaterialClass.CONCRETE),
        ("precast_concrete_panel", MaterialClass.CONCRETE),
        ("pine_framing_90x45", MaterialClass.TIMBER),
        ("timber_cladding", MaterialClass.TIMBER),
        ("clay_brick_standard", MaterialClass.OTHER),
        ("glasswool_batts_r25", MaterialClass.OTHER),
    ],
)
def test_classify_material(material_id, expected):
    assert classify_material(material_id) == expected


def test_first_matching_class_wins():
    assert classify_material("steel_reinforced_concrete") == MaterialClass.STEEL


def test_other_class_has_no_penalty(brisbane):
    assert transport_penalty_for(MaterialClass.OTHER, brisbane) == 0.0


def test_missing_class_penalty_defaults_to_zero():
    region = RegionContext(region_id="hobart")
    assert transport_penalty_for(MaterialClass.STEEL, region) == 0.0


class TestEnrich:
    """Tests for the enrichment overlay."""

    def test_concrete_in_brisbane(self, brisbane):
        result = enrich(record("ready_mix_25mpa", 365, "kg/m3"), brisbane, STAMP)

        assert result.material_class == MaterialClass.CONCRETE
        assert result.transport_penalty == 5
        assert result.adjusted_carbon_rate == 370
        assert result.suppliers == ["Boral Pinkenba", "Holcim Eagle Farm"]
        assert result.region_id == "brisbane"
        assert result.material_record.unit == "kg/m3"

    def test_steel_in_brisbane(self, brisbane):
        result = enrich(record("steel_rebar_12mm", 1.65), brisbane, STAMP)

        assert result.adjusted_carbon_rate == pytest.approx(1.80)
        assert result.suppliers == ["InfraBuild Brisbane", "Smorgon Steel"]

    def test_unlisted_material_gets_generic_supplier(self, brisbane):
        result = enrich(record("clay_brick_standard", 0.22), brisbane, STAMP)

        assert result.transport_penalty == 0.0
        assert result.adjusted_carbon_rate == 0.22
        assert result.suppliers == [GENERIC_SUPPLIER]

    def test_climate_passthrough(self, brisbane):
        result = enrich(record("steel_rebar_12mm", 1.65), brisbane, STAMP)

        assert result.climate_factors == brisbane.climate_adjustments
        assert "cyclone_rating" in result.climate_factors.hazard_flags

    def test_idempotent(self, brisbane):
        raw = record("steel_rebar_12mm", 1.65)

        first = enrich(raw, brisbane, STAMP)
        second = enrich(raw, brisbane, STAMP)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_does_not_mutate_inputs(self, brisbane):
        raw = record("ready_mix_25mpa", 365)
        before = raw.model_dump()

        result = enrich(raw, brisbane, STAMP)
        result.suppliers.append("Someone Else")

        assert raw.model_dump() == before
        assert brisbane.supplier_directory["ready_mix_25mpa"] == [
            "Boral Pinkenba",
            "Holcim Eagle Farm",
        ]

    def test_defaults_timestamp_to_now(self, brisbane):
        result = enrich(record("steel_rebar_12mm", 1.65), brisbane)

        assert result.enriched_at.tzinfo is not None
