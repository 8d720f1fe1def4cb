from typing import Optional

from pydantic import BaseModel, Field, field_validator

from carbon_enrichment.models.batch import BatchConfig
from carbon_enrichment.models.cache import CacheConfig
from carbon_enrichment.models.request import RetryConfig

HOUR = 3600.0
DAY = 86400.0


class RegistrySettings(BaseModel):
    """Connection settings for a single upstream registry"""

    base_url: str
    api_key: Optional[str] = None
    cache_ttl_seconds: float = Field(default=600.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("api_key")
    @classmethod
    def blank_key_is_none(cls, v: Optional[str]) -> Optional[str]:
        # Unset ${VAR} placeholders survive safe_substitute verbatim
        if v is None or not v.strip() or v.startswith("${"):
            return None
        return v


class RegistriesConfig(BaseModel):
    material_registry: RegistrySettings = Field(
        default_factory=lambda: RegistrySettings(
            base_url="https://buildingtransparency.org/api",
            cache_ttl_seconds=HOUR,
        )
    )
    epd_register: RegistrySettings = Field(
        default_factory=lambda: RegistrySettings(
            base_url="https://epd-australasia.com/api/v1",
            cache_ttl_seconds=2 * HOUR,
        )
    )
    emission_factors: RegistrySettings = Field(
        default_factory=lambda: RegistrySettings(
            base_url="https://www.industry.gov.au/data-and-publications/api",
            cache_ttl_seconds=DAY,
        )
    )
    project_backend: Optional[RegistrySettings] = None


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = True

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class EnrichmentConfig(BaseModel):
    """Root configuration model"""

    registries: RegistriesConfig = Field(default_factory=RegistriesConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # None means the bundled region data
    regions_path: Optional[str] = None
