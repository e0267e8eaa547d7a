"""SQL adapters for the worker's collaborators: document source, result sink, notifier, telemetry."""
from __future__ import annotations

import asyncio
import logging

from credit_pipeline.analysis.validator import ValidatedResult
from credit_pipeline.db.repositories.analysis_repo import AnalysisRepo, CreditScoreRepo
from credit_pipeline.db.repositories.notification_repo import CallMetricRepo, NotificationRepo
from credit_pipeline.db.session import session_scope
from credit_pipeline.db.utils import json_serialize, utc_now
from credit_pipeline.llm.telemetry import CallMetric
from credit_pipeline.queue.models import Job, NotificationMessage
from credit_pipeline.queue.store import SessionFactory

logger = logging.getLogger(__name__)

SCORE_BUREAU = "AI Estimate"
SCORE_SOURCE = "AI Analysis"
SCORE_NOTES = "Score estimated from credit report analysis"


class SqlDocumentSource:
    """Reads report text from analyses: OCR text, else manually entered text."""

    def __init__(self, *, session_factory: SessionFactory = session_scope) -> None:
        self._session = session_factory
        self._repo = AnalysisRepo()

    def _fetch(self, subject_id: str) -> str | None:
        with self._session() as s:
            return self._repo.get_text(s, subject_id)

    async def fetch_text(self, subject_id: str) -> str | None:
        return await asyncio.to_thread(self._fetch, subject_id)


class SqlResultSink:
    """Writes status and validated results onto analyses; records a score history point."""

    def __init__(self, *, session_factory: SessionFactory = session_scope) -> None:
        self._session = session_factory
        self._analyses = AnalysisRepo()
        self._scores = CreditScoreRepo()

    def _mark_processing(self, subject_id: str) -> None:
        with self._session() as s:
            self._analyses.set_status(s, subject_id, "processing")

    def _save(self, job: Job, result: ValidatedResult) -> None:
        now = utc_now()
        with self._session() as s:
            self._analyses.save_result(s, job.subject_id, json_serialize(result.result.to_json_dict()), now)
            if result.score is not None:
                self._scores.add(
                    s,
                    user_id=job.owner_id,
                    score=int(round(result.score)),
                    on=now.date(),
                    bureau=SCORE_BUREAU,
                    source=SCORE_SOURCE,
                    notes=SCORE_NOTES,
                    analysis_id=job.subject_id,
                )

    def _mark_failed(self, subject_id: str, message: str) -> None:
        with self._session() as s:
            self._analyses.mark_error(s, subject_id, message, utc_now())

    async def mark_processing(self, job: Job) -> None:
        await asyncio.to_thread(self._mark_processing, job.subject_id)

    async def save_result(self, job: Job, result: ValidatedResult) -> None:
        await asyncio.to_thread(self._save, job, result)

    async def mark_failed(self, job: Job, message: str) -> None:
        await asyncio.to_thread(self._mark_failed, job.subject_id, message)


class SqlNotifier:
    """Inserts user notifications. Callers treat failures as non-fatal."""

    def __init__(self, *, session_factory: SessionFactory = session_scope) -> None:
        self._session = session_factory
        self._repo = NotificationRepo()

    def _insert(self, n: NotificationMessage) -> None:
        with self._session() as s:
            self._repo.add(s, user_id=n.owner_id, title=n.title, message=n.message, type=n.severity)

    async def notify(self, notification: NotificationMessage) -> None:
        await asyncio.to_thread(self._insert, notification)


class SqlTelemetrySink:
    """TelemetrySinkPort writing one llm_call_metrics row per call. Called off the event loop."""

    def __init__(self, *, session_factory: SessionFactory = session_scope) -> None:
        self._session = session_factory
        self._repo = CallMetricRepo()

    def record(self, metric: CallMetric) -> None:
        with self._session() as s:
            self._repo.add(
                s,
                request_id=metric.request_id,
                model=metric.model,
                success=metric.success,
                latency_ms=metric.latency_ms,
                error_type=metric.error_type,
                retry_count=metric.retry_count,
            )
