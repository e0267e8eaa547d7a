"""Analysis and CreditScore repositories."""
from __future__ import annotations

import datetime as dt

from sqlalchemy import select
from sqlalchemy.orm import Session

from credit_pipeline.db.exceptions import NotFoundError
from credit_pipeline.db.models.analysis import Analysis, CreditScore


class AnalysisRepo:
    def create(
        self,
        session: Session,
        owner_id: str,
        *,
        ocr_text: str | None = None,
        manual_text: str | None = None,
    ) -> Analysis:
        row = Analysis(owner_id=owner_id, status="pending", ocr_text=ocr_text, manual_text=manual_text)
        session.add(row)
        session.flush()
        return row

    def get(self, session: Session, analysis_id: str) -> Analysis | None:
        return session.get(Analysis, analysis_id)

    def _require(self, session: Session, analysis_id: str) -> Analysis:
        row = session.get(Analysis, analysis_id)
        if row is None:
            raise NotFoundError(f"Analysis {analysis_id} not found")
        return row

    def get_text(self, session: Session, analysis_id: str) -> str | None:
        """OCR text, falling back to manually entered text. None when the analysis is missing."""
        row = session.get(Analysis, analysis_id)
        if row is None:
            return None
        return row.ocr_text or row.manual_text

    def set_status(self, session: Session, analysis_id: str, status: str) -> None:
        row = self._require(session, analysis_id)
        row.status = status
        session.flush()

    def save_result(self, session: Session, analysis_id: str, result_json: str, completed_at: dt.datetime) -> None:
        row = self._require(session, analysis_id)
        row.result_json = result_json
        row.status = "completed"
        row.error_message = None
        row.completed_at = completed_at
        session.flush()

    def mark_error(self, session: Session, analysis_id: str, message: str, completed_at: dt.datetime) -> None:
        row = self._require(session, analysis_id)
        row.status = "error"
        row.error_message = message[:4096]
        row.completed_at = completed_at
        session.flush()


class CreditScoreRepo:
    def add(
        self,
        session: Session,
        *,
        user_id: str,
        score: int,
        on: dt.date,
        bureau: str = "AI Estimate",
        source: str = "AI Analysis",
        notes: str | None = None,
        analysis_id: str | None = None,
    ) -> CreditScore:
        row = CreditScore(
            user_id=user_id,
            bureau=bureau,
            score=score,
            date=on,
            source=source,
            notes=notes,
            analysis_id=analysis_id,
        )
        session.add(row)
        session.flush()
        return row

    def list_for_user(self, session: Session, user_id: str) -> list[CreditScore]:
        stmt = select(CreditScore).where(CreditScore.user_id == user_id).order_by(CreditScore.created_at.asc())
        return list(session.execute(stmt).scalars())
