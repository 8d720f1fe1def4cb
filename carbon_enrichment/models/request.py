"""Request models for the resilient request executor.

A RequestDescriptor is built per call by a registry client and handed to
the executor, which returns an ExecutionResult tagged with where the value
came from.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class CallSource(str, Enum):
    """Where a value was served from"""

    CACHE = "CACHE"
    LIVE = "LIVE"


class RetryConfig(BaseModel):
    """Configuration for retry logic with linear backoff

    Controls retry behavior for transient failures:
    - Number of attempts before giving up
    - Base delay, multiplied by the attempt number
    - Hard timeout per attempt
    """

    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts (1 initial + N-1 retries)",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Delay unit; attempt N waits delay * N before retrying",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        description="Timeout applied to each individual attempt",
    )


class RequestDescriptor(BaseModel):
    """Immutable description of one logical upstream request"""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod = HttpMethod.GET
    url: str
    params: Dict[str, Any] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[Any] = None
    cacheable: bool = True
    ttl: float = Field(default=600.0, gt=0)

    @property
    def label(self) -> str:
        """Human-readable request line, used for pattern invalidation"""
        return f"{self.method.value} {self.url}"

    @model_validator(mode="before")
    @classmethod
    def default_cacheable(cls, data: Any) -> Any:
        # Only idempotent reads are cached unless the caller says otherwise
        if isinstance(data, dict) and data.get("cacheable") is None:
            method = HttpMethod(data.get("method", HttpMethod.GET))
            data = {**data, "cacheable": method == HttpMethod.GET}
        return data


class TransportResponse(BaseModel):
    """Raw upstream response as seen by the executor"""

    status: int
    body: Any = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class ExecutionResult(BaseModel):
    """Value returned by the executor plus its provenance"""

    value: Any
    source: CallSource
    attempts: int = 0
