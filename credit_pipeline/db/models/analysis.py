"""Analysis (subject document + result) and CreditScore ORM models."""
from __future__ import annotations

import datetime as dt

from sqlalchemy import Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from credit_pipeline.db.base import Base, CreatedAtMixin, IdMixin, TimestampMixin


class Analysis(Base, IdMixin, TimestampMixin):
    """Extracted report text in, validated result JSON out. status: pending/processing/completed/error."""

    __tablename__ = "analyses"

    owner_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending", index=True)
    ocr_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    manual_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    result_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    error_message: Mapped[str | None] = mapped_column(String(4096), nullable=True)
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class CreditScore(Base, IdMixin, CreatedAtMixin):
    """Score history point; one row per completed analysis with a known score."""

    __tablename__ = "credit_scores"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    bureau: Mapped[str] = mapped_column(String(64), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    source: Mapped[str] = mapped_column(String(64), nullable=False)
    notes: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    analysis_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
