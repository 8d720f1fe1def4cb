"""Enrichment service facade.

Wires the cache store, request executor, registry clients, region data and
batch orchestrator together from an EnrichmentConfig, and exposes the
operations presentation code calls:

- run_batch(queries) -> BatchResult
- clear_cache()
- get_cache_stats() -> CacheStats
- get_emission_factors(state) -> EmissionFactorTable
- get_material_data(keyword, category, manufacturer) -> MaterialSearchResult
"""

import asyncio
from typing import Any, Awaitable, Dict, Mapping, Optional, Sequence, Tuple, Union

import structlog

from carbon_enrichment.models.batch import BatchResult, MaterialQuery
from carbon_enrichment.models.cache import CacheStats
from carbon_enrichment.models.config import EnrichmentConfig
from carbon_enrichment.models.emission_factors import EmissionFactorTable
from carbon_enrichment.models.material import MaterialSearchResult
from carbon_enrichment.orchestration.batch_orchestrator import BatchOrchestrator
from carbon_enrichment.services.cache_service import CacheStore
from carbon_enrichment.services.clients import (
    EmissionFactorClient,
    EPDRegisterClient,
    MaterialRegistryClient,
    MaterialSource,
    ProjectBackendClient,
)
from carbon_enrichment.services.region_directory import RegionDirectory
from carbon_enrichment.services.request_executor import RequestExecutor
from carbon_enrichment.services.transport import Transport
from carbon_enrichment.utils.exceptions import EnrichmentError

logger = structlog.get_logger()

QueryLike = Union[MaterialQuery, Mapping[str, Any]]


class EnrichmentService:
    """Entry point for callers of the enrichment client."""

    def __init__(
        self,
        config: Optional[EnrichmentConfig] = None,
        cache: Optional[CacheStore] = None,
        transport: Optional[Transport] = None,
        regions: Optional[RegionDirectory] = None,
        material_source: Optional[MaterialSource] = None,
    ):
        """Initialize the service.

        Args:
            config: Root configuration (defaults when omitted)
            cache: Cache store to share (built from config when omitted)
            transport: Upstream transport for every client (aiohttp default)
            regions: Region reference data (loaded from config when omitted)
            material_source: Replaces the material registry for batch runs
        """
        self.config = config or EnrichmentConfig()
        self.cache = cache or CacheStore(self.config.cache)
        self.executor = RequestExecutor(
            cache=self.cache, retry_config=self.config.retry, transport=transport
        )

        registries = self.config.registries
        self.materials = MaterialRegistryClient(
            registries.material_registry, self.executor
        )
        self.epd_register = EPDRegisterClient(registries.epd_register, self.executor)
        self.emission_factors = EmissionFactorClient(
            registries.emission_factors, self.executor
        )
        self.backend: Optional[ProjectBackendClient] = (
            ProjectBackendClient(registries.project_backend, self.executor)
            if registries.project_backend is not None
            else None
        )

        self.regions = regions or RegionDirectory.load(self.config.regions_path)
        self.orchestrator = BatchOrchestrator(
            material_source=material_source or self.materials,
            regions=self.regions,
            config=self.config.batch,
        )

        logger.info(
            "enrichment_service_initialized",
            regions=self.regions.region_ids,
            batch_size=self.config.batch.batch_size,
            backend_configured=self.backend is not None,
        )

    async def run_batch(self, queries: Sequence[QueryLike]) -> BatchResult:
        """Enrich (material_id, region_id) queries in input order"""
        parsed = [
            q if isinstance(q, MaterialQuery) else MaterialQuery.model_validate(q)
            for q in queries
        ]
        return await self.orchestrator.run_batch(parsed)

    def clear_cache(self) -> None:
        """Invalidate every cached response; affects only later lookups"""
        self.cache.clear()

    def get_cache_stats(self) -> CacheStats:
        return self.cache.get_stats()

    async def get_material_data(
        self,
        keyword: Optional[str] = None,
        category: Optional[str] = None,
        manufacturer: Optional[str] = None,
    ) -> MaterialSearchResult:
        """Search the material registry and the EPD register together

        Each source fails independently; failures are reported per source
        instead of raised.
        """

        async def _search(
            source: str, call: Awaitable[Any]
        ) -> Tuple[str, Any, Optional[str]]:
            try:
                return source, await call, None
            except EnrichmentError as e:
                logger.warning("material_search_failed", source=source, error=str(e))
                return source, None, str(e)

        outcomes = await asyncio.gather(
            _search(
                "material_registry",
                self.materials.search_materials(category=category, keyword=keyword),
            ),
            _search(
                "epd_register",
                self.epd_register.search_epds(product=keyword, manufacturer=manufacturer),
            ),
        )

        result = MaterialSearchResult()
        for source, value, error in outcomes:
            if error is not None:
                result.errors[source] = error
            else:
                setattr(result, source, value)
        return result

    async def get_emission_factors(self, state: str) -> EmissionFactorTable:
        return await self.emission_factors.get_regional_emission_factors(state)

    def is_configured(self) -> Dict[str, bool]:
        """Which upstream registries carry credentials or are enabled"""
        registries = self.config.registries
        return {
            "material_registry": registries.material_registry.api_key is not None,
            "epd_register": True,
            "emission_factors": True,
            "project_backend": self.backend is not None,
        }

    async def close(self) -> None:
        await self.executor.close()
        self.cache.close()

    async def __aenter__(self) -> "EnrichmentService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
