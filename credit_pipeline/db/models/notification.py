"""Notification ORM model: user-facing messages written by the pipeline."""
from __future__ import annotations

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from credit_pipeline.db.base import Base, CreatedAtMixin, IdMixin


class Notification(Base, IdMixin, CreatedAtMixin):
    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    message: Mapped[str] = mapped_column(String(2048), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (Index("ix_notifications_user_read", "user_id", "read"),)
