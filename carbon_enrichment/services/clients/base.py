from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from carbon_enrichment.models.config import RegistrySettings
from carbon_enrichment.models.material import MaterialLookup
from carbon_enrichment.models.request import HttpMethod, RequestDescriptor
from carbon_enrichment.services.request_executor import RequestExecutor


class MaterialSource(ABC):
    """Anything that can produce a material record by id

    The batch orchestrator only depends on this capability, so tests and
    offline runs can substitute a fake registry.
    """

    @abstractmethod
    async def fetch_material(self, material_id: str) -> MaterialLookup:
        """Fetch the raw record for a material

        Args:
            material_id: Registry material identifier

        Returns:
            MaterialLookup with the record and where it was served from

        Raises:
            ClientError: Registry rejected the lookup
            ExhaustedRetriesError: Registry kept failing transiently
        """
        pass


class RegistryClient(ABC):
    """Typed facade over one upstream registry

    Fixes the base URL, default headers (bearer auth when a key is set) and
    the cache TTL, and delegates every call to the request executor.
    """

    def __init__(self, settings: RegistrySettings, executor: RequestExecutor):
        self.settings = settings
        self.executor = executor

    @property
    @abstractmethod
    def name(self) -> str:
        """Client name for logging and metrics"""
        pass

    @property
    def base_url(self) -> str:
        return self.settings.base_url

    @property
    def cache_ttl(self) -> float:
        return self.settings.cache_ttl_seconds

    @property
    def default_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        return headers

    def build_request(
        self,
        method: HttpMethod,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Any] = None,
    ) -> RequestDescriptor:
        return RequestDescriptor(
            method=method,
            url=f"{self.base_url}{endpoint}",
            params={k: v for k, v in (params or {}).items() if v is not None},
            headers=self.default_headers,
            body=body,
            ttl=self.cache_ttl,
        )

    async def _get(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        validate: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        result = await self.executor.execute(
            self.build_request(HttpMethod.GET, endpoint, params),
            client=self.name,
            validate=validate,
        )
        return result.value

    async def _post(self, endpoint: str, body: Any) -> Any:
        result = await self.executor.execute(
            self.build_request(HttpMethod.POST, endpoint, body=body), client=self.name
        )
        return result.value

    async def _put(self, endpoint: str, body: Any) -> Any:
        result = await self.executor.execute(
            self.build_request(HttpMethod.PUT, endpoint, body=body), client=self.name
        )
        return result.value

    async def _delete(self, endpoint: str) -> Any:
        result = await self.executor.execute(
            self.build_request(HttpMethod.DELETE, endpoint), client=self.name
        )
        return result.value
