"""Submission: create the subject analysis row and enqueue a job for it."""
from __future__ import annotations

import asyncio

from credit_pipeline.db.repositories.analysis_repo import AnalysisRepo
from credit_pipeline.db.session import session_scope
from credit_pipeline.queue.store import SessionFactory, SqlJobStore


def submit_analysis_sync(
    store: SqlJobStore,
    owner_id: str,
    text: str,
    *,
    priority: int = 0,
    max_attempts: int = 3,
    manual: bool = False,
    session_factory: SessionFactory = session_scope,
) -> tuple[str, str]:
    """Returns (analysis_id, job_id). manual=True stores the text as manually entered instead of OCR."""
    with session_factory() as s:
        row = AnalysisRepo().create(
            s,
            owner_id,
            ocr_text=None if manual else text,
            manual_text=text if manual else None,
        )
        analysis_id = row.id
    job_id = store.enqueue_sync(analysis_id, owner_id, priority, max_attempts)
    return analysis_id, job_id


async def submit_analysis(
    store: SqlJobStore,
    owner_id: str,
    text: str,
    *,
    priority: int = 0,
    max_attempts: int = 3,
    manual: bool = False,
    session_factory: SessionFactory = session_scope,
) -> tuple[str, str]:
    return await asyncio.to_thread(
        submit_analysis_sync,
        store,
        owner_id,
        text,
        priority=priority,
        max_attempts=max_attempts,
        manual=manual,
        session_factory=session_factory,
    )
