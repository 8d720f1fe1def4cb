from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from carbon_enrichment.models.material import MaterialLookup, MaterialRecord
from carbon_enrichment.models.request import HttpMethod
from carbon_enrichment.services.clients.base import MaterialSource, RegistryClient
from carbon_enrichment.utils.exceptions import InvalidResponseError

logger = structlog.get_logger()


class MaterialRegistryClient(RegistryClient, MaterialSource):
    """EPD material registry (EC3-style); records change over hours"""

    @property
    def name(self) -> str:
        return "material_registry"

    async def search_materials(
        self,
        category: Optional[str] = None,
        jurisdiction: str = "AU",
        keyword: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Search the registry for materials"""
        data = await self._get(
            "/materials",
            {"category": category, "jurisdiction": jurisdiction, "keyword": keyword},
        )
        return self._as_list(data)

    async def get_material_epd(self, epd_id: str) -> Dict[str, Any]:
        return await self._get(f"/epds/{epd_id}")

    async def get_australian_epds(self, category: str) -> List[Dict[str, Any]]:
        data = await self._get(
            "/epds", {"jurisdiction": "AU", "category": category, "valid": True}
        )
        return self._as_list(data)

    async def fetch_material(self, material_id: str) -> MaterialLookup:
        """Fetch a material record, reporting whether it came from cache"""
        result = await self.executor.execute(
            self.build_request(HttpMethod.GET, f"/materials/{material_id}"),
            client=self.name,
            validate=lambda data: self.parse_record(material_id, data),
        )
        record = self.parse_record(material_id, result.value)

        logger.info(
            "material_fetched",
            material_id=material_id,
            source=result.source.value,
            carbon_rate=record.carbon_rate,
        )
        return MaterialLookup(record=record, source=result.source)

    async def get_material_record(self, material_id: str) -> MaterialRecord:
        lookup = await self.fetch_material(material_id)
        return lookup.record

    async def get_carbon_coefficient(self, material_id: str) -> float:
        """Carbon coefficient in kg CO2-e per declared unit

        Read from the material's EPD; 0.0 when the EPD declares no GWP.
        """
        epd = await self.get_material_epd(material_id)
        if not isinstance(epd, dict):
            return 0.0
        return float(epd.get("gwp_per_declared_unit") or 0.0)

    @staticmethod
    def parse_record(material_id: str, data: Any) -> MaterialRecord:
        """Parse a registry payload into a MaterialRecord

        Accepts both the registry's own field names and the EC3 EPD names
        (``gwp_per_declared_unit``, ``declared_unit``).
        """
        if not isinstance(data, dict):
            raise InvalidResponseError(
                f"Material record for {material_id} is not an object"
            )

        carbon_rate = data.get("carbon_rate", data.get("gwp_per_declared_unit"))
        if carbon_rate is None:
            raise InvalidResponseError(
                f"Material record for {material_id} has no carbon rate"
            )

        try:
            return MaterialRecord(
                material_id=data.get("material_id") or material_id,
                carbon_rate=float(carbon_rate),
                unit=data.get("unit") or data.get("declared_unit") or "kg/unit",
                confidence_score=data.get(
                    "confidence_score", data.get("confidence", 0.0)
                ),
                source_id=data.get("epd_id") or data.get("source_id") or "unknown",
            )
        except (TypeError, ValueError, ValidationError) as e:
            raise InvalidResponseError(
                f"Invalid material record for {material_id}: {e}"
            ) from e

    @staticmethod
    def _as_list(data: Any) -> List[Dict[str, Any]]:
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("data"), list):
            return data["data"]
        return []


class EPDRegisterClient(RegistryClient):
    """Regional EPD register; listings change over a couple of hours"""

    @property
    def name(self) -> str:
        return "epd_register"

    async def search_epds(
        self,
        product: Optional[str] = None,
        manufacturer: Optional[str] = None,
        standard: str = "ISO 14025",
    ) -> Any:
        return await self._get(
            "/epds/search",
            {"product": product, "manufacturer": manufacturer, "standard": standard},
        )

    async def get_epd(self, epd_number: str) -> Dict[str, Any]:
        return await self._get(f"/epds/{epd_number}")

    async def get_manufacturers(self, category: Optional[str] = None) -> Any:
        return await self._get("/manufacturers", {"category": category})
