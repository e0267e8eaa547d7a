"""Notification and call-metric repositories (insert-mostly)."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from credit_pipeline.db.models.call_metric import LlmCallMetric
from credit_pipeline.db.models.notification import Notification


class NotificationRepo:
    def add(self, session: Session, *, user_id: str, title: str, message: str, type: str) -> Notification:
        row = Notification(user_id=user_id, title=title, message=message, type=type, read=False)
        session.add(row)
        session.flush()
        return row

    def list_for_user(self, session: Session, user_id: str) -> list[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id).order_by(Notification.created_at.asc())
        return list(session.execute(stmt).scalars())


class CallMetricRepo:
    def add(
        self,
        session: Session,
        *,
        request_id: str,
        model: str,
        success: bool,
        latency_ms: int,
        error_type: str | None,
        retry_count: int,
    ) -> LlmCallMetric:
        row = LlmCallMetric(
            request_id=request_id,
            model=model,
            success=success,
            latency_ms=latency_ms,
            error_type=error_type,
            retry_count=retry_count,
        )
        session.add(row)
        session.flush()
        return row

    def count(self, session: Session) -> int:
        return len(session.execute(select(LlmCallMetric.id)).all())
