"""AnalysisJob repository. Status changes are compare-and-set UPDATEs on the current status."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from credit_pipeline.db.models.analysis_job import AnalysisJob


class AnalysisJobRepo:
    def add(
        self,
        session: Session,
        *,
        subject_id: str,
        owner_id: str,
        status: str,
        priority: int,
        max_attempts: int,
        created_at: datetime,
    ) -> AnalysisJob:
        job = AnalysisJob(
            subject_id=subject_id,
            owner_id=owner_id,
            status=status,
            priority=priority,
            attempts=0,
            max_attempts=max_attempts,
            created_at=created_at,
        )
        session.add(job)
        session.flush()
        return job

    def get(self, session: Session, job_id: str) -> AnalysisJob | None:
        return session.get(AnalysisJob, job_id)

    def next_id_with_status(self, session: Session, status: str) -> str | None:
        """Highest priority first, then oldest, then id for a total order."""
        stmt = (
            select(AnalysisJob.id)
            .where(AnalysisJob.status == status)
            .order_by(AnalysisJob.priority.desc(), AnalysisJob.created_at.asc(), AnalysisJob.id.asc())
            .limit(1)
        )
        return session.execute(stmt).scalar_one_or_none()

    def compare_and_set(
        self,
        session: Session,
        job_id: str,
        *,
        expected_status: str,
        values: dict[str, Any],
    ) -> bool:
        """UPDATE only if the row still has expected_status. Returns True when a row changed."""
        stmt = (
            update(AnalysisJob)
            .where(AnalysisJob.id == job_id, AnalysisJob.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        return result.rowcount == 1

    def increment_attempts(self, session: Session, job_id: str) -> bool:
        """attempts += 1 unless already at max_attempts."""
        stmt = (
            update(AnalysisJob)
            .where(AnalysisJob.id == job_id, AnalysisJob.attempts < AnalysisJob.max_attempts)
            .values(attempts=AnalysisJob.attempts + 1)
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).rowcount == 1

    def count_by_status(self, session: Session) -> dict[str, int]:
        rows = session.execute(
            select(AnalysisJob.status, func.count()).group_by(AnalysisJob.status)
        ).all()
        return {status: n for status, n in rows}

    def list_recent(self, session: Session, limit: int = 20) -> list[AnalysisJob]:
        stmt = select(AnalysisJob).order_by(AnalysisJob.created_at.desc()).limit(limit)
        return list(session.execute(stmt).scalars())
