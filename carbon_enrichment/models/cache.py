"""
Data models for the cache store.

Defines cache configuration, entries and statistics models.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class CacheBackend(str, Enum):
    MEMORY = "memory"
    DISK = "disk"


class CacheConfig(BaseModel):
    """Cache configuration"""

    model_config = ConfigDict(protected_namespaces=())

    enabled: bool = True
    backend: CacheBackend = CacheBackend.MEMORY
    cache_dir: str = "./cache"

    # Used when a put does not carry its own TTL
    default_ttl_seconds: float = Field(default=600.0, gt=0)

    # Memory backend: least recently used entries are evicted past this
    max_entries: int = Field(default=200, ge=1)
    # Disk backend: diskcache culls to stay under this size
    max_disk_size_mb: int = Field(default=100, ge=1)


class CacheEntry(BaseModel):
    """A cached response and the moment it was stored.

    Valid for reads iff ``now - stored_at < ttl``.
    """

    key: str
    value: Any
    stored_at: float
    ttl: float = Field(..., gt=0)
    label: Optional[str] = None

    def is_fresh(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


class CacheStats(BaseModel):
    """Cache statistics"""

    size: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    last_updated: datetime = Field(default_factory=datetime.now)

    @computed_field  # type: ignore[misc]
    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate"""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total
