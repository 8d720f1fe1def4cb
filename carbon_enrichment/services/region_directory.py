"""Region reference data, loaded once and read-only afterwards."""

from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import structlog
import yaml
from pydantic import ValidationError

from carbon_enrichment.models.material import (
    ClimateAdjustments,
    MaterialClass,
    RegionContext,
)
from carbon_enrichment.utils.exceptions import ConfigValidationError

logger = structlog.get_logger()

BUNDLED_REGIONS = "regions.yaml"


class RegionDirectory:
    """Lookup of RegionContext by region id

    Unknown regions resolve to a neutral context (no transport penalties,
    no suppliers, multiplier 1.0) so enrichment still succeeds.
    """

    def __init__(self, regions: Iterable[RegionContext]):
        self._regions: Dict[str, RegionContext] = {
            region.region_id.lower(): region for region in regions
        }

    def get(self, region_id: str) -> RegionContext:
        region = self._regions.get(region_id.lower())
        if region is None:
            logger.warning("unknown_region", region_id=region_id)
            return RegionContext(region_id=region_id)
        return region

    def __contains__(self, region_id: object) -> bool:
        return isinstance(region_id, str) and region_id.lower() in self._regions

    @property
    def region_ids(self) -> List[str]:
        return sorted(self._regions)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "RegionDirectory":
        """Build from the ``regions:`` document layout"""
        raw_regions = (data or {}).get("regions") or {}
        if not isinstance(raw_regions, dict):
            raise ConfigValidationError("'regions' must be a mapping of region ids")

        regions = []
        for region_id, entry in raw_regions.items():
            entry = entry or {}
            try:
                climate = entry.get("climate") or {}
                regions.append(
                    RegionContext(
                        region_id=str(region_id),
                        transport_penalty_by_material_class={
                            MaterialClass(name): float(value)
                            for name, value in (
                                entry.get("transport_penalties") or {}
                            ).items()
                        },
                        supplier_directory={
                            str(material_id): list(names)
                            for material_id, names in (
                                entry.get("suppliers") or {}
                            ).items()
                        },
                        climate_adjustments=ClimateAdjustments(
                            insulation_multiplier=climate.get(
                                "insulation_multiplier", 1.0
                            ),
                            hazard_flags=frozenset(climate.get("hazard_flags") or []),
                        ),
                    )
                )
            except (ValueError, TypeError, ValidationError) as e:
                raise ConfigValidationError(f"Invalid region '{region_id}': {e}")

        logger.info("regions_loaded", regions=len(regions))
        return cls(regions)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "RegionDirectory":
        """Load from a YAML file, or the bundled data when path is None"""
        try:
            if path is None:
                raw = (
                    resources.files("carbon_enrichment.data")
                    .joinpath(BUNDLED_REGIONS)
                    .read_text(encoding="utf-8")
                )
            else:
                raw = Path(path).read_text(encoding="utf-8")
            data = yaml.safe_load(raw)
        except FileNotFoundError:
            raise
        except (OSError, yaml.YAMLError) as e:
            raise ConfigValidationError(f"Failed to read region data: {e}")

        return cls.from_mapping(data)
