"""Regional enrichment engine.

Overlays region-specific data onto a raw material record:
- Transport penalty by material class
- Local supplier list
- Climate adjustments (passthrough)

Pure and deterministic: identical inputs always produce equal results, and
missing lookups degrade to documented defaults instead of raising.
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from carbon_enrichment.models.material import (
    GENERIC_SUPPLIER,
    EnrichedMaterialResult,
    MaterialClass,
    MaterialRecord,
    RegionContext,
)

# Checked in order; first keyword found in the material id wins
MATERIAL_CLASS_KEYWORDS: List[Tuple[MaterialClass, Tuple[str, ...]]] = [
    (MaterialClass.STEEL, ("steel",)),
    (MaterialClass.CONCRETE, ("concrete", "ready_mix")),
    (MaterialClass.TIMBER, ("timber", "pine")),
]


def classify_material(material_id: str) -> MaterialClass:
    """Map a material id onto its transport class"""
    normalized = material_id.lower()
    for material_class, keywords in MATERIAL_CLASS_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return material_class
    return MaterialClass.OTHER


def transport_penalty_for(
    material_class: MaterialClass, region: RegionContext
) -> float:
    if material_class == MaterialClass.OTHER:
        return 0.0
    return float(region.transport_penalty_by_material_class.get(material_class, 0.0))


def enrich(
    record: MaterialRecord,
    region: RegionContext,
    enriched_at: Optional[datetime] = None,
) -> EnrichedMaterialResult:
    """Apply the regional overlay to a material record.

    Args:
        record: Raw registry record
        region: Region reference data
        enriched_at: Timestamp to stamp on the result (now when omitted)

    Returns:
        EnrichedMaterialResult with adjusted carbon rate
    """
    material_class = classify_material(record.material_id)
    penalty = transport_penalty_for(material_class, region)
    suppliers = region.supplier_directory.get(record.material_id) or [
        GENERIC_SUPPLIER
    ]

    return EnrichedMaterialResult(
        material_record=record,
        region_id=region.region_id,
        material_class=material_class,
        transport_penalty=penalty,
        adjusted_carbon_rate=record.carbon_rate + penalty,
        suppliers=list(suppliers),
        climate_factors=region.climate_adjustments,
        enriched_at=enriched_at or datetime.now(timezone.utc),
    )
