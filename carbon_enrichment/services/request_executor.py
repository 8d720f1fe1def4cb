"""Resilient request executor.

Executes one logical request with:
- Cache-aware short-circuit for cacheable requests
- Hard timeout per attempt
- Bounded retry with linear backoff for transient failures
- Immediate failure on 4xx client errors

The executor reports where each value came from (CACHE or LIVE); attaching
that to a batch run's call log is the caller's job.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional

import structlog

from carbon_enrichment.models.request import (
    CallSource,
    ExecutionResult,
    RequestDescriptor,
    RetryConfig,
)
from carbon_enrichment.observability.metrics import REGISTRY_REQUESTS, REQUEST_DURATION
from carbon_enrichment.services.cache_service import CacheStore
from carbon_enrichment.services.transport import AiohttpTransport, Transport
from carbon_enrichment.utils.exceptions import (
    ClientError,
    EnrichmentError,
    ExhaustedRetriesError,
    RequestTimeoutError,
    ServerError,
    TransientError,
)
from carbon_enrichment.utils.retry import RetryContext, RetryHandler

logger = structlog.get_logger()


class RequestExecutor:
    """Run requests through cache, timeout and retry policy."""

    def __init__(
        self,
        cache: CacheStore,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[Transport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize request executor.

        Args:
            cache: Shared cache store
            retry_config: Attempt budget, backoff unit and per-attempt timeout
            transport: Upstream sender (aiohttp when omitted)
            sleep: Awaitable used for backoff waits
        """
        self.cache = cache
        self.retry_config = retry_config or RetryConfig()
        self.transport = transport or AiohttpTransport()
        self.retry_handler = RetryHandler(self.retry_config, sleep=sleep)

    async def execute(
        self,
        descriptor: RequestDescriptor,
        client: str = "registry",
        validate: Optional[Callable[[Any], Any]] = None,
    ) -> ExecutionResult:
        """Execute one logical request.

        Args:
            descriptor: Request to run
            client: Client name used for logs and metrics
            validate: Checks a live value before it is cached; raising
                      keeps the value out of the cache

        Returns:
            ExecutionResult with the decoded value and its source

        Raises:
            ClientError: Upstream rejected the request (4xx), after one attempt
            ExhaustedRetriesError: Every attempt failed with a transient error
            InvalidResponseError: Payload was not JSON or failed validation
        """
        cache_key: Optional[str] = None

        if descriptor.cacheable:
            cache_key = CacheStore.hash_request(descriptor)
            cached = self.cache.get(cache_key)
            if cached is not None:
                REGISTRY_REQUESTS.labels(client=client, outcome="cache").inc()
                logger.debug(
                    "request_served_from_cache", client=client, url=descriptor.url
                )
                return ExecutionResult(value=cached, source=CallSource.CACHE)

        context = RetryContext()
        start_time = time.perf_counter()

        try:
            value = await self.retry_handler.execute(
                lambda: self._attempt(descriptor),
                retryable_exceptions={TransientError},
                context=context,
            )
        except ClientError as e:
            REGISTRY_REQUESTS.labels(client=client, outcome="client_error").inc()
            logger.error(
                "request_rejected",
                client=client,
                url=descriptor.url,
                status=e.status,
                error=str(e),
            )
            raise
        except ExhaustedRetriesError:
            REGISTRY_REQUESTS.labels(client=client, outcome="exhausted").inc()
            raise
        finally:
            REQUEST_DURATION.labels(client=client).observe(
                time.perf_counter() - start_time
            )

        if validate is not None:
            try:
                validate(value)
            except EnrichmentError as e:
                REGISTRY_REQUESTS.labels(client=client, outcome="invalid").inc()
                logger.error(
                    "response_rejected", client=client, url=descriptor.url, error=str(e)
                )
                raise

        if cache_key is not None and value is not None:
            self.cache.put(cache_key, value, descriptor.ttl, label=descriptor.label)

        REGISTRY_REQUESTS.labels(client=client, outcome="live").inc()
        logger.info(
            "request_completed",
            client=client,
            method=descriptor.method.value,
            url=descriptor.url,
            attempts=context.total_attempts,
        )
        return ExecutionResult(
            value=value, source=CallSource.LIVE, attempts=context.total_attempts
        )

    async def _attempt(self, descriptor: RequestDescriptor) -> Any:
        """One bounded attempt, mapping the response onto the error taxonomy"""
        timeout = self.retry_config.timeout_seconds

        try:
            response = await asyncio.wait_for(
                self.transport.send(descriptor), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(
                f"{descriptor.method.value} {descriptor.url} timed out after {timeout}s"
            ) from e

        if response.ok:
            return response.body

        message = f"HTTP {response.status}: {response.reason}".rstrip(": ")
        if 400 <= response.status < 500:
            raise ClientError(message, status=response.status)

        raise ServerError(message, status=response.status)

    async def close(self) -> None:
        await self.transport.close()
