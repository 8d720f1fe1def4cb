"""Batch enrichment orchestrator.

Runs a full enrichment pass over (material, region) queries:
- Fixed-size chunks, input order preserved
- Concurrent fan-out inside a chunk, results slotted by index
- Chunk barrier: the next chunk starts only after every request settled
- Partial-failure semantics: a failed query becomes an error entry
- Per-run call log and cache efficiency statistics
- Optional cancellation checked between chunks

No retry logic lives here; retries belong to the request executor.
"""

import asyncio
import time
import uuid
from typing import List, Optional, Sequence

import structlog

from carbon_enrichment.models.batch import (
    BatchConfig,
    BatchItem,
    BatchItemError,
    BatchResult,
    CallLog,
    MaterialQuery,
)
from carbon_enrichment.observability.context import correlation_id_context
from carbon_enrichment.observability.metrics import BATCH_QUERIES
from carbon_enrichment.services.clients.base import MaterialSource
from carbon_enrichment.services.enrichment_engine import enrich
from carbon_enrichment.services.region_directory import RegionDirectory
from carbon_enrichment.utils.exceptions import ExhaustedRetriesError

logger = structlog.get_logger()


def chunk_queries(
    queries: Sequence[MaterialQuery], size: int
) -> List[List[MaterialQuery]]:
    """Split queries into consecutive chunks of at most ``size``"""
    return [list(queries[i : i + size]) for i in range(0, len(queries), size)]


class BatchOrchestrator:
    """Fan material queries out in bounded chunks and enrich the results."""

    def __init__(
        self,
        material_source: MaterialSource,
        regions: RegionDirectory,
        config: Optional[BatchConfig] = None,
    ):
        """Initialize batch orchestrator.

        Args:
            material_source: Where raw material records come from
            regions: Region reference data
            config: Batch settings (chunk size)
        """
        self.material_source = material_source
        self.regions = regions
        self.config = config or BatchConfig()

    async def run_batch(
        self,
        queries: Sequence[MaterialQuery],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BatchResult:
        """Enrich every query, in input order.

        Args:
            queries: (material_id, region_id) pairs
            cancel_event: When set, remaining chunks are not started

        Returns:
            BatchResult with one entry per query and run statistics
        """
        run_id = f"batch-{uuid.uuid4().hex[:12]}"
        call_log = CallLog()
        results: List[Optional[BatchItem]] = [None] * len(queries)
        chunks = chunk_queries(queries, self.config.batch_size)
        cancelled = False
        start_time = time.time()

        with correlation_id_context(run_id):
            logger.info(
                "batch_run_started",
                run_id=run_id,
                total_queries=len(queries),
                chunks=len(chunks),
                batch_size=self.config.batch_size,
            )

            offset = 0
            for chunk_index, chunk in enumerate(chunks):
                if cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    self._mark_cancelled(queries, results, offset)
                    logger.warning(
                        "batch_run_cancelled",
                        run_id=run_id,
                        completed=offset,
                        remaining=len(queries) - offset,
                    )
                    break

                chunk_results = await asyncio.gather(
                    *(self._process_query(query, call_log) for query in chunk)
                )
                for position, item in enumerate(chunk_results):
                    results[offset + position] = item

                offset += len(chunk)
                logger.debug(
                    "batch_chunk_complete",
                    run_id=run_id,
                    chunk=chunk_index + 1,
                    completed=offset,
                    total=len(queries),
                )

            stats = call_log.stats()
            final_results = [item for item in results if item is not None]
            failed = sum(1 for item in final_results if isinstance(item, BatchItemError))

            logger.info(
                "batch_run_complete",
                run_id=run_id,
                total_queries=len(queries),
                failed=failed,
                cache_hits=stats.hits,
                cache_misses=stats.misses,
                efficiency_ratio=round(stats.efficiency_ratio, 3),
                cancelled=cancelled,
                duration_seconds=round(time.time() - start_time, 3),
            )

        return BatchResult(
            run_id=run_id,
            results=final_results,
            stats=stats,
            call_log=call_log.entries,
            cancelled=cancelled,
        )

    async def _process_query(self, query: MaterialQuery, call_log: CallLog) -> BatchItem:
        """Fetch and enrich one query; failures are returned, not raised"""
        try:
            lookup = await self.material_source.fetch_material(query.material_id)
        except Exception as e:
            BATCH_QUERIES.labels(outcome="failed").inc()
            logger.error(
                "batch_query_failed",
                material_id=query.material_id,
                region_id=query.region_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return BatchItemError(
                material_id=query.material_id,
                region_id=query.region_id,
                error_type=type(e).__name__,
                message=str(e),
                attempts=e.attempts if isinstance(e, ExhaustedRetriesError) else None,
            )

        call_log.record(query.material_id, lookup.source, query.region_id)
        BATCH_QUERIES.labels(outcome="enriched").inc()
        return enrich(lookup.record, self.regions.get(query.region_id))

    @staticmethod
    def _mark_cancelled(
        queries: Sequence[MaterialQuery],
        results: List[Optional[BatchItem]],
        offset: int,
    ) -> None:
        for index in range(offset, len(queries)):
            query = queries[index]
            BATCH_QUERIES.labels(outcome="cancelled").inc()
            results[index] = BatchItemError(
                material_id=query.material_id,
                region_id=query.region_id,
                error_type="BatchCancelled",
                message="Batch run cancelled before this query was issued",
            )
