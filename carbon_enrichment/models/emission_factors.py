"""National emission-factor models and the shipped fallback dataset."""

from datetime import date
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# Published NGER factors the fallback table was taken from
FALLBACK_DATASET_VERSION = "nger-2023"
FALLBACK_AS_OF = date(2023, 12, 31)

FALLBACK_ELECTRICITY_FACTORS: Dict[str, float] = {
    "NSW": 0.76,
    "VIC": 0.98,
    "QLD": 0.81,
    "SA": 0.44,
    "WA": 0.68,
    "TAS": 0.15,
    "NT": 0.55,
    "ACT": 0.76,
}
DEFAULT_ELECTRICITY_FACTOR = 0.76

FALLBACK_FUEL_FACTORS: Dict[str, float] = {
    "natural_gas": 2.00,
    "diesel": 2.68,
    "petrol": 2.31,
}


class EmissionFactorTable(BaseModel):
    """Emission factors (kg CO2-e per unit) for one state"""

    model_config = ConfigDict(frozen=True)

    state: str
    electricity: float = Field(..., ge=0)
    natural_gas: float = Field(..., ge=0)
    diesel: float = Field(..., ge=0)
    petrol: float = Field(..., ge=0)

    used_fallback: bool = False
    dataset_version: Optional[str] = None
    as_of: Optional[date] = None

    def age_days(self, today: Optional[date] = None) -> Optional[int]:
        """Days since the dataset was published, if known"""
        if self.as_of is None:
            return None
        return ((today or date.today()) - self.as_of).days

    @classmethod
    def fallback(cls, state: str) -> "EmissionFactorTable":
        """Versioned shipped defaults, flagged as degraded"""
        return cls(
            state=state,
            electricity=FALLBACK_ELECTRICITY_FACTORS.get(
                state.upper(), DEFAULT_ELECTRICITY_FACTOR
            ),
            natural_gas=FALLBACK_FUEL_FACTORS["natural_gas"],
            diesel=FALLBACK_FUEL_FACTORS["diesel"],
            petrol=FALLBACK_FUEL_FACTORS["petrol"],
            used_fallback=True,
            dataset_version=FALLBACK_DATASET_VERSION,
            as_of=FALLBACK_AS_OF,
        )
