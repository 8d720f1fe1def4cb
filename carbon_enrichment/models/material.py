"""Material and region models.

MaterialRecord is the raw registry record; RegionContext is static
reference data loaded once per process; EnrichedMaterialResult is the
derived value returned to callers.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from carbon_enrichment.models.request import CallSource

GENERIC_SUPPLIER = "Generic Supplier"


class MaterialClass(str, Enum):
    STEEL = "steel"
    CONCRETE = "concrete"
    TIMBER = "timber"
    OTHER = "other"


class MaterialRecord(BaseModel):
    """Raw carbon coefficient record from a material registry"""

    model_config = ConfigDict(frozen=True)

    material_id: str = Field(..., min_length=1)
    carbon_rate: float = Field(..., description="kg CO2-e per declared unit")
    unit: str
    confidence_score: float = Field(..., ge=0.0, le=1.0)
    source_id: str


class MaterialLookup(BaseModel):
    """A fetched material record and where it was served from"""

    model_config = ConfigDict(frozen=True)

    record: MaterialRecord
    source: CallSource


class ClimateAdjustments(BaseModel):
    model_config = ConfigDict(frozen=True)

    insulation_multiplier: float = Field(default=1.0, gt=0)
    hazard_flags: FrozenSet[str] = frozenset()


class RegionContext(BaseModel):
    """Region-specific overlay data"""

    model_config = ConfigDict(frozen=True)

    region_id: str
    transport_penalty_by_material_class: Dict[MaterialClass, float] = Field(
        default_factory=dict
    )
    supplier_directory: Dict[str, List[str]] = Field(default_factory=dict)
    climate_adjustments: ClimateAdjustments = Field(
        default_factory=ClimateAdjustments
    )


class EnrichedMaterialResult(BaseModel):
    """Material record with the regional overlay applied"""

    model_config = ConfigDict(frozen=True)

    material_record: MaterialRecord
    region_id: str
    material_class: MaterialClass
    transport_penalty: float
    adjusted_carbon_rate: float
    suppliers: List[str]
    climate_factors: ClimateAdjustments
    enriched_at: datetime

    @property
    def material_id(self) -> str:
        return self.material_record.material_id


class MaterialSearchResult(BaseModel):
    """Combined search across material registries

    A source that failed has no results and an entry in ``errors``.
    """

    material_registry: Optional[List[Dict[str, Any]]] = None
    epd_register: Optional[Any] = None
    errors: Dict[str, str] = Field(default_factory=dict)
