"""Correlation ID context management for batch-run tracing.

ContextVar-based storage that propagates across async boundaries, so every
log line emitted while a batch run is in flight carries that run's id.

Usage:
    from carbon_enrichment.observability.context import correlation_id_context

    with correlation_id_context("run-456") as run_id:
        await orchestrator.run_batch(queries)
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

_correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


@contextmanager
def correlation_id_context(
    corr_id: Optional[str] = None,
) -> Generator[str, None, None]:
    """Scoped correlation ID; the previous value is restored on exit.

    Args:
        corr_id: Optional correlation ID. If None, generates UUID.

    Yields:
        The correlation ID being used in this context.
    """
    if corr_id is None:
        corr_id = str(uuid.uuid4())

    token = _correlation_id_var.set(corr_id)

    try:
        yield corr_id
    finally:
        _correlation_id_var.reset(token)
