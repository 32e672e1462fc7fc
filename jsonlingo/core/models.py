"""
Core data models for jsonlingo.

These models describe a translation run: the strings pulled out of a JSON
tree, the jobs and batches built from them, and the session that owns
everything for one end-to-end run.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from jsonlingo.core.utils import generate_id, now_ms, utc_now

# A location in a JSON tree: object keys and stringified array indices
JsonPath = tuple[str, ...]


# =============================================================================
# Enums
# =============================================================================


class JobStatus(str, Enum):
    """Status of a single translation job."""

    PENDING = "pending"  # Not yet attempted (or re-queued)
    TRANSLATING = "translating"  # Dispatched
    COMPLETED = "completed"  # Translated (backend or cache)
    ERROR = "error"  # Retry budget exhausted
    SKIPPED = "skipped"  # Deliberately not translated


class BatchStatus(str, Enum):
    """Status of a batch of jobs."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class SessionStatus(str, Enum):
    """Status of a translation session."""

    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    PAUSED = "paused"
    ERROR = "error"


class LogLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class DiffKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


# =============================================================================
# Extraction
# =============================================================================


class StringOccurrence(BaseModel):
    """A translatable leaf string and where it lives in the tree."""

    path: JsonPath
    value: str


class UniqueString(BaseModel):
    """
    One distinct leaf value after deduplication.

    `path` is the path of the first occurrence in traversal order;
    `occurrence_indices` point back into the occurrence list.
    """

    path: JsonPath
    value: str
    occurrence_indices: list[int] = Field(default_factory=list)


# =============================================================================
# Jobs, Batches, Sessions
# =============================================================================


class TranslationConfig(BaseModel):
    """Per-run options supplied by the caller."""

    source_language: str = "auto"
    target_language: str
    batch_size: int = Field(default=50, gt=0)
    max_retries: int = Field(default=3, ge=0)


class TranslationJob(BaseModel):
    """The unit of translation work for one unique string."""

    id: str = Field(default_factory=lambda: generate_id("job"))
    original_text: str
    source_language: str
    target_language: str
    status: JobStatus = JobStatus.PENDING
    translated_text: str | None = None
    error: str | None = None
    retry_count: int = 0
    from_cache: bool = False
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_done(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.SKIPPED)


class TranslationBatch(BaseModel):
    """A fixed-size group of jobs processed together."""

    id: str = Field(default_factory=lambda: generate_id("batch"))
    jobs: list[TranslationJob] = Field(default_factory=list)
    status: BatchStatus = BatchStatus.PENDING
    progress: float = 0.0
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def pending_jobs(self) -> list[TranslationJob]:
        """Jobs that still need work (never attempted, or failed)."""
        return [
            job for job in self.jobs
            if job.status in (JobStatus.PENDING, JobStatus.ERROR)
        ]

    def update_progress(self) -> None:
        """Recompute progress as percent of completed or skipped jobs."""
        if not self.jobs:
            self.progress = 100.0
            return
        done = sum(1 for job in self.jobs if job.is_done)
        self.progress = done / len(self.jobs) * 100


class TranslationLog(BaseModel):
    """One entry of the session's append-only log stream."""

    id: str = Field(default_factory=lambda: generate_id("log"))
    timestamp: int = Field(default_factory=now_ms)
    level: LogLevel
    message: str
    details: Any = None


class TranslationSession(BaseModel):
    """
    One end-to-end translation run over one input tree.

    The session exclusively owns its batches and jobs. The counters are
    always re-derived from job states via `refresh_counts()`, never
    incremented independently.
    """

    id: str = Field(default_factory=lambda: generate_id("sess"))
    source_language: str
    target_language: str
    config: TranslationConfig

    original_json: Any
    translated_json: Any = None

    batches: list[TranslationBatch] = Field(default_factory=list)

    total_strings: int = 0
    unique_strings: int = 0
    translated_strings: int = 0
    skipped_strings: int = 0
    error_strings: int = 0

    status: SessionStatus = SessionStatus.IDLE
    start_time: int = Field(default_factory=now_ms)
    end_time: int | None = None

    logs: list[TranslationLog] = Field(default_factory=list)

    def iter_jobs(self):
        """All jobs in batch order, then job order."""
        for batch in self.batches:
            yield from batch.jobs

    def refresh_counts(self) -> None:
        """Fold over every job to re-derive the aggregate counters."""
        translated = skipped = errors = 0
        for job in self.iter_jobs():
            if job.status == JobStatus.COMPLETED:
                translated += 1
            elif job.status == JobStatus.SKIPPED:
                skipped += 1
            elif job.status == JobStatus.ERROR:
                errors += 1
        self.translated_strings = translated
        self.skipped_strings = skipped
        self.error_strings = errors

    @property
    def elapsed_ms(self) -> int:
        end = self.end_time if self.end_time is not None else now_ms()
        return end - self.start_time


# =============================================================================
# Cache, Diff, Stats
# =============================================================================


class CacheEntry(BaseModel):
    """A cached translation. `timestamp` is epoch milliseconds."""

    text: str
    source_language: str
    target_language: str
    translated_text: str
    timestamp: int = Field(default_factory=now_ms)


class DiffRecord(BaseModel):
    """One structural difference between an original and translated tree."""

    path: JsonPath
    original: Any = None
    translated: Any = None
    kind: DiffKind


class TranslationStats(BaseModel):
    total_processed: int = 0
    total_translated: int = 0
    total_skipped: int = 0
    total_errors: int = 0
    average_time_ms: float = 0.0
    cache_hit_rate: float = 0.0


class LanguageInfo(BaseModel):
    code: str
    name: str
