"""
Asynchronous task helpers for long-running background jobs (translation runs).
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from langbly_sync.config import PipelineConfig
from langbly_sync.exceptions import PipelineError
from langbly_sync.logger import get_logger
from langbly_sync.translation.manager import TranslationManager
from langbly_sync.translation.progress import TranslationProgress

logger = get_logger(__name__)


@dataclass
class JobState:
    """In-memory representation of an asynchronous job."""

    job_id: str
    pipeline: Dict[str, Any] = field(default_factory=dict)
    cancel_requested: bool = False
    state: str = "pending"  # pending|running|completed|failed|cancelled
    created_at: float = field(default_factory=time.time)
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    progress: Dict[str, Any] = field(default_factory=dict)
    progress_history: List[Dict[str, Any]] = field(default_factory=list)
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    last_update: float = field(default_factory=time.time)

    def request_cancel(self):
        """Mark this job as requested for cancellation."""
        self.cancel_requested = True
        self.last_update = time.time()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_jobs: Dict[str, JobState] = {}
_jobs_lock = threading.Lock()
_JOB_RETENTION_SECONDS = 600  # Retain job info for 10 minutes after completion


def create_translation_job(
    pipeline_config: PipelineConfig,
    app_config: Optional[Dict[str, Any]] = None,
    manager_factory=TranslationManager,
) -> JobState:
    """
    Create and launch an asynchronous translation job.

    Args:
        pipeline_config: Validated options for the run.
        app_config: Application config passed to the manager (loaded from disk when None).
        manager_factory: Callable building the TranslationManager.

    Returns:
        JobState for the new job (already registered and running in background).
    """
    job_id = uuid.uuid4().hex
    job_state = JobState(job_id=job_id, pipeline=asdict(pipeline_config))

    with _jobs_lock:
        _cleanup_jobs_locked()
        _jobs[job_id] = job_state

    thread = threading.Thread(
        target=_run_translation_job,
        args=(job_state, pipeline_config, app_config, manager_factory),
        name=f"translation-job-{job_id}",
        daemon=True,
    )
    thread.start()
    logger.info(
        "Translation job %s started (files=%d, languages=%s, dry_run=%s)",
        job_id,
        len(pipeline_config.files),
        ",".join(pipeline_config.target_languages),
        pipeline_config.dry_run,
    )
    return job_state


def get_job(job_id: str) -> Optional[JobState]:
    """Fetch a job by ID (if still retained)."""
    with _jobs_lock:
        job = _jobs.get(job_id)
        if job and job.finished_at and (time.time() - job.finished_at) > _JOB_RETENTION_SECONDS:
            _jobs.pop(job_id, None)
            return None
        return job


def cancel_job(job_id: str) -> bool:
    """
    Request cancellation of a running job.

    Returns:
        True if job was found and cancellation requested, False otherwise.
    """
    with _jobs_lock:
        job = _jobs.get(job_id)
        if not job:
            return False
        if job.state in ("completed", "failed", "cancelled"):
            return False
        job.request_cancel()
        logger.info("Cancellation requested for job %s", job_id)
        return True


def serialize_job(job: JobState) -> Dict[str, Any]:
    """Convert JobState into JSON-safe dict."""
    with _jobs_lock:
        return job.to_dict()


def _run_translation_job(job: JobState, pipeline_config: PipelineConfig, app_config, manager_factory):
    """Worker function executed in a background thread."""
    with _jobs_lock:
        job.state = "running"
        job.started_at = time.time()
        job.last_update = job.started_at
    try:
        manager = manager_factory(pipeline_config, app_config=app_config)

        def on_progress(progress: TranslationProgress):
            with _jobs_lock:
                serialized = progress.to_dict()
                job.progress = serialized
                job.progress_history.append(serialized)
                job.last_update = time.time()

        def check_cancel():
            with _jobs_lock:
                return job.cancel_requested

        result = manager.translate_files(cancel_check=check_cancel, progress_callback=on_progress)

        with _jobs_lock:
            job.result = result.to_dict()
            if result.cancelled:
                job.state = "cancelled"
            else:
                job.state = "completed" if result.success else "failed"
            job.finished_at = time.time()
            job.last_update = job.finished_at
        logger.info(
            "Translation job %s %s (files=%s, characters=%s, failed=%s)",
            job.job_id,
            job.state,
            result.files_translated,
            result.characters_used,
            len(result.failed_items),
        )
    except PipelineError as exc:
        _mark_failed(job, exc)
        logger.error("✗ Translation job %s failed: %s", job.job_id, exc)
    except Exception as exc:
        _mark_failed(job, exc)
        logger.exception("✗ Translation job %s failed: %s: %s", job.job_id, type(exc).__name__, exc)


def _mark_failed(job: JobState, exc: Exception) -> None:
    with _jobs_lock:
        job.state = "failed"
        job.error = f"{type(exc).__name__}: {exc}"
        if isinstance(exc, PipelineError):
            job.result = {"failed_items": [exc.details]}
        job.finished_at = time.time()
        job.last_update = job.finished_at


def _cleanup_jobs_locked():
    """Remove completed jobs that exceeded retention period (call with lock held)."""
    now = time.time()
    expired = [
        job_id
        for job_id, job in _jobs.items()
        if job.finished_at and (now - job.finished_at) > _JOB_RETENTION_SECONDS
    ]
    for job_id in expired:
        _jobs.pop(job_id, None)
