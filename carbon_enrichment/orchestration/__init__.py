"""Batch orchestration for material enrichment.

Usage:
    from carbon_enrichment.orchestration import BatchOrchestrator
"""

from carbon_enrichment.orchestration.batch_orchestrator import (
    BatchOrchestrator,
    chunk_queries,
)

__all__ = ["BatchOrchestrator", "chunk_queries"]
