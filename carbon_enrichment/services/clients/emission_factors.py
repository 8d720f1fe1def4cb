from datetime import date
from typing import Any, Dict, Optional

import structlog
from pydantic import ValidationError

from carbon_enrichment.models.emission_factors import EmissionFactorTable
from carbon_enrichment.observability.metrics import FALLBACK_USED
from carbon_enrichment.services.clients.base import RegistryClient
from carbon_enrichment.utils.exceptions import EnrichmentError, InvalidResponseError

logger = structlog.get_logger()


class EmissionFactorClient(RegistryClient):
    """National greenhouse accounts emission factors

    Published annually, so responses are cached for a day. Regional factor
    lookups never fail: when the registry is unavailable the shipped,
    versioned fallback table is returned with ``used_fallback=True``.
    """

    @property
    def name(self) -> str:
        return "emission_factors"

    async def get_regional_emission_factors(
        self, state: str, year: Optional[int] = None
    ) -> EmissionFactorTable:
        """Get all emission factors for a state

        Args:
            state: State code (e.g. "QLD")
            year: Reporting year, current year when omitted

        Returns:
            EmissionFactorTable; flagged ``used_fallback`` when degraded
        """
        year = year or date.today().year
        state = state.upper()

        try:
            data = await self._get(
                "/nger/emission-factors/all",
                {"state": state, "year": year},
                validate=lambda payload: self._parse_table(state, year, payload),
            )
            table = self._parse_table(state, year, data)
        except EnrichmentError as e:
            FALLBACK_USED.labels(dataset="emission_factors").inc()
            fallback = EmissionFactorTable.fallback(state)
            logger.warning(
                "emission_factors_fallback",
                state=state,
                year=year,
                error_type=type(e).__name__,
                error=str(e),
                dataset_version=fallback.dataset_version,
                as_of=str(fallback.as_of),
            )
            return fallback

        logger.info("emission_factors_loaded", state=state, year=year)
        return table

    async def get_electricity_emissions(
        self, state: str, year: Optional[int] = None
    ) -> Any:
        return await self._get(
            "/nger/emission-factors/electricity",
            {"state": state.upper(), "year": year or date.today().year},
        )

    async def get_fuel_emissions(self, fuel_type: str) -> Any:
        return await self._get("/nger/emission-factors/fuels", {"fuel": fuel_type})

    async def get_transport_emissions(self, mode: str) -> Any:
        return await self._get("/nger/emission-factors/transport", {"mode": mode})

    @staticmethod
    def _parse_table(state: str, year: int, data: Any) -> EmissionFactorTable:
        if not isinstance(data, dict):
            raise InvalidResponseError("Emission factor payload is not an object")

        fields: Dict[str, Any] = {
            "state": state,
            "electricity": data.get("electricity"),
            "natural_gas": data.get("natural_gas", data.get("naturalGas")),
            "diesel": data.get("diesel"),
            "petrol": data.get("petrol"),
            "dataset_version": data.get("version") or f"nga-{year}",
            "as_of": data.get("as_of"),
        }

        try:
            return EmissionFactorTable(**fields)
        except ValidationError as e:
            raise InvalidResponseError(f"Invalid emission factor payload: {e}") from e
