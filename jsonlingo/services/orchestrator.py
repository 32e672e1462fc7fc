"""
Translation orchestrator - the session / batch / job state machine.

Turns the unique strings of a JSON tree into batches of jobs and drives
each job through: cache lookup -> rate-limit wait -> (language detection)
-> backend call -> retry with exponential backoff -> completion. Sessions
can be paused, resumed and stopped at batch and job boundaries, and on
completion the translated tree is rebuilt from the original.

Only one session runs at a time per orchestrator. Exclusivity is an owned
resource: `try_acquire_session()` hands out a `SessionLease` that must be
released, there are no module-level flags.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Awaitable, Callable

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type

from jsonlingo.backends.base import TranslatorBackend
from jsonlingo.backends.languages import is_auto
from jsonlingo.config import Settings, get_settings
from jsonlingo.core.errors import (
    AlreadyRunning,
    BackendError,
    NoSessionToResume,
    NoTranslatableContent,
)
from jsonlingo.core.models import (
    BatchStatus,
    JobStatus,
    JsonPath,
    LogLevel,
    SessionStatus,
    TranslationBatch,
    TranslationConfig,
    TranslationJob,
    TranslationLog,
    TranslationSession,
    TranslationStats,
    UniqueString,
)
from jsonlingo.core.utils import now_ms, truncate, utc_now
from jsonlingo.processing import apply_translations, deduplicate_strings, extract_strings
from jsonlingo.services.cache import TranslationCache
from jsonlingo.services.rate_limiter import RateLimiter
from jsonlingo.storage import create_local_store

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TranslationSession], None]
LogCallback = Callable[[TranslationLog], None]

_LOG_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


# =============================================================================
# Session lease
# =============================================================================


class SessionLease:
    """
    Exclusive right to run a session on an orchestrator.

    Obtained from `TranslationOrchestrator.try_acquire_session()`. Usable as
    a context manager; releasing twice is a no-op.
    """

    def __init__(self, owner: TranslationOrchestrator):
        self._owner = owner
        self.released = False

    def release(self) -> None:
        if not self.released:
            self.released = True
            self._owner._release(self)

    def __enter__(self) -> SessionLease:
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()


# =============================================================================
# Orchestrator
# =============================================================================


class TranslationOrchestrator:
    """
    Drives translation sessions against one backend.

    Usage:
        orchestrator = TranslationOrchestrator(backend)
        session = await orchestrator.start_translation(
            {"title": "Hello"},
            TranslationConfig(source_language="en", target_language="fr"),
        )
        session.translated_json  # {"title": "Bonjour"}

    Jobs run strictly one after another (batch order, then job order), so
    translation order is deterministic. A job that exhausts its retries
    ends in `error` without aborting the session; only an exception
    escaping the batch loop marks the session as `error`.
    """

    def __init__(
        self,
        backend: TranslatorBackend,
        cache: TranslationCache | None = None,
        rate_limiter: RateLimiter | None = None,
        settings: Settings | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or get_settings()
        self.backend = backend
        self.cache = cache or TranslationCache(
            store=create_local_store(self.settings.cache_path or None),
            ttl_ms=self.settings.cache_ttl,
            max_memory_size=self.settings.memory_cache_size,
        )
        self.rate_limiter = rate_limiter or RateLimiter(
            max_requests=self.settings.max_requests_per_window,
            window_ms=self.settings.window_ms,
        )
        self._sleep = sleep

        self._session: TranslationSession | None = None
        self._lease: SessionLease | None = None
        self._pause_requested = False
        self._on_progress: ProgressCallback | None = None
        self._on_log: LogCallback | None = None

    # =========================================================================
    # Session ownership
    # =========================================================================

    def try_acquire_session(self) -> SessionLease | None:
        """Claim the single active-session slot, or None if it is taken."""
        if self._lease is not None:
            return None
        self._lease = SessionLease(self)
        return self._lease

    def _release(self, lease: SessionLease) -> None:
        if self._lease is lease:
            self._lease = None

    # =========================================================================
    # Callbacks
    # =========================================================================

    def set_progress_callback(self, callback: ProgressCallback | None) -> None:
        """Called with the session after every processed job."""
        self._on_progress = callback

    def set_log_callback(self, callback: LogCallback | None) -> None:
        """Called with every log record appended to the session."""
        self._on_log = callback

    # =========================================================================
    # Public API
    # =========================================================================

    async def start_translation(
        self,
        json_data: Any,
        config: TranslationConfig,
        lease: SessionLease | None = None,
    ) -> TranslationSession:
        """
        Start a new session over `json_data` and run it.

        Returns when the session completes or is paused/stopped. A `lease`
        already obtained from `try_acquire_session()` is used and released
        instead of acquiring a new one.

        Raises:
            AlreadyRunning: another session holds the lease
            NoTranslatableContent: the tree has no eligible strings
        """
        lease = lease or self.try_acquire_session()
        if lease is None or lease.released:
            raise AlreadyRunning("Translation already in progress")

        with lease:
            strings = extract_strings(json_data)
            if not strings:
                raise NoTranslatableContent("No translatable strings found in the JSON")

            # Deduplicate strings to reduce API calls
            unique, _ = deduplicate_strings(strings)

            session = TranslationSession(
                source_language=config.source_language,
                target_language=config.target_language,
                config=config,
                original_json=copy.deepcopy(json_data),
                total_strings=len(strings),
                unique_strings=len(unique),
                status=SessionStatus.PROCESSING,
            )
            session.batches = self._create_batches(unique, config)

            self._session = session
            self._pause_requested = False

            await self.cache.cleanup_expired()

            self._log(
                LogLevel.INFO,
                f"Starting translation of {len(strings)} strings ({len(unique)} unique) "
                f"in {len(session.batches)} batches",
            )
            await self._run(session, config, done_message=None)

        return session

    async def resume_translation(
        self,
        max_retries: int | None = None,
        lease: SessionLease | None = None,
    ) -> TranslationSession:
        """
        Continue the current session from its first unfinished batch.

        Jobs already completed are never sent again. Passing `max_retries`
        reopens batches with failed jobs, which then get attempts up to the
        new budget. `lease` works as in `start_translation`.

        Raises:
            NoSessionToResume: there is no session
            AlreadyRunning: a session is currently running
        """
        if self._session is None:
            if lease is not None:
                lease.release()
            raise NoSessionToResume("No session to resume")

        lease = lease or self.try_acquire_session()
        if lease is None or lease.released:
            raise AlreadyRunning("Translation already in progress")

        with lease:
            session = self._session
            if max_retries is not None:
                session.config = session.config.model_copy(update={"max_retries": max_retries})
                # Reopen batches holding failed jobs for another pass
                for batch in session.batches:
                    if any(job.status == JobStatus.ERROR for job in batch.jobs):
                        batch.status = BatchStatus.PENDING

            self._pause_requested = False
            session.status = SessionStatus.PROCESSING
            session.end_time = None

            self._log(LogLevel.INFO, "Resuming translation...")
            await self._run(
                session, session.config, done_message="Translation resumed and completed"
            )

        return session

    def pause_translation(self) -> None:
        """Ask the running session to stop before its next batch or job."""
        if self.is_translation_in_progress() and self._session is not None:
            self._pause_requested = True
            self._session.status = SessionStatus.PAUSED
            self._log(LogLevel.INFO, "Translation paused")

    def stop_translation(self) -> None:
        """Like pause, but also applies to a session that is not running."""
        session = self._session
        if session is None or session.status in (SessionStatus.COMPLETED, SessionStatus.ERROR):
            return
        self._pause_requested = True
        session.status = SessionStatus.PAUSED
        self._log(LogLevel.INFO, "Translation stopped")

    def reset(self) -> None:
        """Drop the current session and rate-limit history."""
        if self._lease is not None:
            raise AlreadyRunning("Cannot reset while a translation is running")
        self._session = None
        self._pause_requested = False
        self.rate_limiter.reset()

    def get_current_session(self) -> TranslationSession | None:
        return self._session

    def is_translation_in_progress(self) -> bool:
        return self._lease is not None

    def can_resume(self) -> bool:
        return (
            self._session is not None
            and self._session.status == SessionStatus.PAUSED
            and not self.is_translation_in_progress()
        )

    def get_translation_stats(self) -> TranslationStats:
        """Aggregate statistics for the current session."""
        session = self._session
        if session is None:
            return TranslationStats()

        jobs = list(session.iter_jobs())
        total = len(jobs)
        cache_hits = sum(
            1 for job in jobs if job.from_cache and job.status == JobStatus.COMPLETED
        )
        session.refresh_counts()

        return TranslationStats(
            total_processed=total,
            total_translated=session.translated_strings,
            total_skipped=session.skipped_strings,
            total_errors=session.error_strings,
            average_time_ms=session.elapsed_ms / total if total else 0.0,
            cache_hit_rate=cache_hits / total if total else 0.0,
        )

    def get_partial_result(self) -> Any:
        """The original tree with every translation completed so far applied."""
        session = self._session
        if session is None:
            return None
        return apply_translations(session.original_json, self._translation_map(session))

    def generate_final_result(self, session: TranslationSession) -> Any:
        """
        Rebuild the translated tree from completed jobs.

        Re-extracts and re-deduplicates the original tree, which yields the
        same unique-string order used to create the jobs, then fans each
        completed translation out to every occurrence of its string.
        """
        try:
            session.translated_json = apply_translations(
                session.original_json, self._translation_map(session)
            )
        except Exception as e:
            self._log(LogLevel.ERROR, f"Failed to generate final result: {e}")
            raise

        self._log(LogLevel.SUCCESS, "Final translated JSON generated")
        return session.translated_json

    # =========================================================================
    # Batch loop
    # =========================================================================

    def _create_batches(
        self,
        unique: list[UniqueString],
        config: TranslationConfig,
    ) -> list[TranslationBatch]:
        batches: list[TranslationBatch] = []
        for start in range(0, len(unique), config.batch_size):
            jobs = [
                TranslationJob(
                    original_text=item.value,
                    source_language=config.source_language,
                    target_language=config.target_language,
                )
                for item in unique[start:start + config.batch_size]
            ]
            batches.append(TranslationBatch(jobs=jobs))
        return batches

    async def _run(
        self,
        session: TranslationSession,
        config: TranslationConfig,
        done_message: str | None,
    ) -> None:
        try:
            await self._process_batches(session, config)

            if not self._pause_requested:
                session.status = SessionStatus.COMPLETED
                session.end_time = now_ms()
                self._log(
                    LogLevel.SUCCESS,
                    done_message
                    or f"Translation completed in {session.elapsed_ms / 1000:.2f}s",
                )
        except Exception as e:
            session.status = SessionStatus.ERROR
            session.end_time = now_ms()
            self._log(LogLevel.ERROR, f"Translation failed: {e}")
            raise

    async def _process_batches(
        self,
        session: TranslationSession,
        config: TranslationConfig,
    ) -> None:
        for number, batch in enumerate(session.batches, start=1):
            if self._pause_requested:
                break

            if batch.status == BatchStatus.COMPLETED:
                continue  # Finished in an earlier run

            await self._process_batch(session, batch, config)
            if batch.status == BatchStatus.COMPLETED:
                self._log(
                    LogLevel.INFO,
                    f"Batch {number}/{len(session.batches)} completed",
                    details={"batch_id": batch.id},
                )

        if not self._pause_requested and session.status != SessionStatus.ERROR:
            self.generate_final_result(session)

    async def _process_batch(
        self,
        session: TranslationSession,
        batch: TranslationBatch,
        config: TranslationConfig,
    ) -> None:
        batch.status = BatchStatus.PROCESSING
        batch.started_at = utc_now()

        for job in batch.pending_jobs():
            if self._pause_requested:
                break

            await self._process_job(job, config)

            batch.update_progress()
            session.refresh_counts()
            if self._on_progress:
                self._on_progress(session)

        if not self._pause_requested or all(job.is_done for job in batch.jobs):
            batch.status = BatchStatus.COMPLETED
            batch.finished_at = utc_now()

    # =========================================================================
    # Job processing
    # =========================================================================

    async def _process_job(self, job: TranslationJob, config: TranslationConfig) -> None:
        """
        Run one job to a terminal state.

        `job.retry_count` counts failed attempts and persists across runs.
        After each failure the job sleeps 2 ** retry_count seconds and starts
        over from the cache lookup, until retry_count exceeds max_retries.
        A job whose budget is already spent is left in `error`.
        """
        if job.retry_count > config.max_retries:
            return

        job.status = JobStatus.TRANSLATING

        def log_retry(state: RetryCallState) -> None:
            self._log(
                LogLevel.WARNING,
                f"Retry {job.retry_count}/{config.max_retries} for: "
                f"\"{truncate(job.original_text)}\"",
            )

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(BackendError),
            stop=lambda state: job.retry_count > config.max_retries,
            wait=lambda state: 2 ** job.retry_count,
            before_sleep=log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    await self._attempt_job(job)
        except BackendError as e:
            job.status = JobStatus.ERROR
            job.error = str(e)
            self._log(
                LogLevel.ERROR,
                f"Failed to translate: \"{truncate(job.original_text)}\" - {job.error}",
            )

    async def _attempt_job(self, job: TranslationJob) -> None:
        cached = await self.cache.get(
            job.original_text, job.source_language, job.target_language
        )
        if cached is not None:
            job.translated_text = cached
            job.status = JobStatus.COMPLETED
            job.from_cache = True
            job.error = None
            self._log(LogLevel.INFO, f"Cache hit for: \"{truncate(job.original_text)}\"")
            return

        await self.rate_limiter.wait_for_slot()

        source = job.source_language
        if is_auto(source):
            source = await self._detect_source(job)

        try:
            translated = await self._call_backend(job.original_text, source, job.target_language)
        except BackendError:
            job.retry_count += 1
            raise

        job.translated_text = translated
        job.status = JobStatus.COMPLETED
        job.from_cache = False
        job.error = None

        await self.cache.set(job.original_text, source, job.target_language, translated)

        self._log(
            LogLevel.INFO,
            f"Translated: \"{truncate(job.original_text)}\" -> \"{truncate(translated)}\"",
        )

    async def _call_backend(self, text: str, source: str, target: str) -> str:
        """Call the backend; every failure surfaces as a retryable BackendError."""
        timeout = self.settings.request_timeout
        try:
            translated = await asyncio.wait_for(
                self.backend.translate(text, source, target), timeout=timeout
            )
        except BackendError:
            raise
        except asyncio.TimeoutError as e:
            raise BackendError(f"Translation timed out after {timeout}s") from e
        except Exception as e:
            raise BackendError(f"{type(e).__name__}: {e}") from e

        if not isinstance(translated, str):
            raise BackendError(f"Backend returned no translation (got {translated!r})")
        return translated

    async def _detect_source(self, job: TranslationJob) -> str:
        fallback = self.settings.detection_fallback_language
        try:
            detected = await asyncio.wait_for(
                self.backend.detect_language(job.original_text),
                timeout=self.settings.request_timeout,
            )
        except Exception as e:
            # Any detection failure degrades to the fallback language
            reason = str(e) or type(e).__name__
            self._log(
                LogLevel.WARNING,
                f"Language detection failed, assuming \"{fallback}\": {reason}",
            )
            return fallback

        if not isinstance(detected, str) or not detected.strip():
            self._log(
                LogLevel.WARNING,
                f"Language detection returned nothing, assuming \"{fallback}\"",
            )
            return fallback

        self._log(
            LogLevel.INFO,
            f"Detected language: {detected} for \"{truncate(job.original_text, 30)}\"",
        )
        return detected

    # =========================================================================
    # Helpers
    # =========================================================================

    def _translation_map(self, session: TranslationSession) -> dict[JsonPath, str]:
        occurrences = extract_strings(session.original_json)
        unique, _ = deduplicate_strings(occurrences)

        translations: dict[JsonPath, str] = {}
        # Job i was created from unique string i
        for unique_string, job in zip(unique, session.iter_jobs()):
            if job.status == JobStatus.COMPLETED and job.translated_text:
                for index in unique_string.occurrence_indices:
                    translations[occurrences[index].path] = job.translated_text
        return translations

    def _log(self, level: LogLevel, message: str, details: Any = None) -> None:
        logger.log(_LOG_LEVELS[level], message)

        session = self._session
        if session is None:
            return

        record = TranslationLog(level=level, message=message, details=details)
        session.logs.append(record)
        if self._on_log:
            self._on_log(record)


def create_orchestrator(settings: Settings | None = None) -> TranslationOrchestrator:
    """Build an orchestrator wired to the backend and cache named in settings."""
    from jsonlingo.backends import build_backend

    settings = settings or get_settings()
    return TranslationOrchestrator(build_backend(settings), settings=settings)
