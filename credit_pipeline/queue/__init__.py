"""
Analysis queue module: job model and store, per-job processor, worker pool.
Public API: JobStatus, Job, SqlJobStore, JobProcessor, WorkerPool, build_pipeline, submit_analysis.
"""
from credit_pipeline.queue.errors import JobFailure
from credit_pipeline.queue.factory import Pipeline, build_pipeline
from credit_pipeline.queue.models import ALLOWED_TRANSITIONS, TERMINAL_STATUSES, Job, JobStatus
from credit_pipeline.queue.pool import WorkerPool
from credit_pipeline.queue.processor import JobProcessor
from credit_pipeline.queue.settings import QueueSettings
from credit_pipeline.queue.store import SqlJobStore
from credit_pipeline.queue.submit import submit_analysis, submit_analysis_sync

__all__ = [
    "JobStatus",
    "Job",
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    "JobFailure",
    "SqlJobStore",
    "JobProcessor",
    "WorkerPool",
    "QueueSettings",
    "Pipeline",
    "build_pipeline",
    "submit_analysis",
    "submit_analysis_sync",
]
