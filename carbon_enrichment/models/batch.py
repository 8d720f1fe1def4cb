"""Batch orchestration models.

Defines batch settings, per-run call logs and run statistics.
"""

from datetime import datetime, timezone
from typing import Iterator, List, Optional, Union

from pydantic import BaseModel, Field, computed_field

from carbon_enrichment.models.material import EnrichedMaterialResult
from carbon_enrichment.models.request import CallSource


class BatchConfig(BaseModel):
    """Batch orchestration settings"""

    # Queries issued concurrently before waiting for the chunk to settle
    batch_size: int = Field(default=3, ge=1, le=50)


class MaterialQuery(BaseModel):
    material_id: str = Field(..., min_length=1)
    region_id: str = Field(..., min_length=1)


class CallLogEntry(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    material_id: str
    source: CallSource
    region_id: str


class CallLog:
    """Append-only call log owned by a single batch run."""

    def __init__(self) -> None:
        self._entries: List[CallLogEntry] = []

    def append(self, entry: CallLogEntry) -> None:
        self._entries.append(entry)

    def record(self, material_id: str, source: CallSource, region_id: str) -> None:
        self.append(
            CallLogEntry(material_id=material_id, source=source, region_id=region_id)
        )

    @property
    def entries(self) -> List[CallLogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CallLogEntry]:
        return iter(list(self._entries))

    def stats(self) -> "BatchRunStats":
        return BatchRunStats.from_log(self._entries)


class BatchRunStats(BaseModel):
    """Cache efficiency of one batch run"""

    hits: int = 0
    misses: int = 0

    @computed_field  # type: ignore[misc]
    @property
    def efficiency_ratio(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    @classmethod
    def from_log(cls, entries: List[CallLogEntry]) -> "BatchRunStats":
        hits = sum(1 for e in entries if e.source == CallSource.CACHE)
        misses = sum(1 for e in entries if e.source == CallSource.LIVE)
        return cls(hits=hits, misses=misses)

    def __add__(self, other: "BatchRunStats") -> "BatchRunStats":
        return BatchRunStats(
            hits=self.hits + other.hits, misses=self.misses + other.misses
        )


class BatchItemError(BaseModel):
    """A single query that could not be enriched"""

    material_id: str
    region_id: str
    error_type: str
    message: str
    attempts: Optional[int] = None


BatchItem = Union[EnrichedMaterialResult, BatchItemError]


class BatchResult(BaseModel):
    """Outcome of a full enrichment pass, in input order"""

    run_id: str
    results: List[BatchItem] = Field(default_factory=list)
    stats: BatchRunStats = Field(default_factory=BatchRunStats)
    call_log: List[CallLogEntry] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def successes(self) -> List[EnrichedMaterialResult]:
        return [r for r in self.results if isinstance(r, EnrichedMaterialResult)]

    @property
    def errors(self) -> List[BatchItemError]:
        return [r for r in self.results if isinstance(r, BatchItemError)]
