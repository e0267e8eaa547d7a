"""create_pipeline_tables

Revision ID: 3c1e9a7b5d20
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "3c1e9a7b5d20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_NOW = sa.text("CURRENT_TIMESTAMP")


def upgrade() -> None:
    op.create_table(
        "analyses",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("ocr_text", sa.Text(), nullable=True),
        sa.Column("manual_text", sa.Text(), nullable=True),
        sa.Column("result_json", sa.Text(), nullable=True),
        sa.Column("error_message", sa.String(length=4096), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_analyses"),
    )
    op.create_index("ix_analyses_owner_id", "analyses", ["owner_id"], unique=False)
    op.create_index("ix_analyses_status", "analyses", ["status"], unique=False)

    op.create_table(
        "analysis_jobs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("owner_id", sa.String(length=36), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False),
        sa.Column("max_attempts", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error", sa.String(length=4096), nullable=True),
        sa.CheckConstraint("attempts >= 0 AND attempts <= max_attempts", name="ck_analysis_jobs_attempts_bounded"),
        sa.CheckConstraint("max_attempts >= 1", name="ck_analysis_jobs_max_attempts_positive"),
        sa.PrimaryKeyConstraint("id", name="pk_analysis_jobs"),
    )
    op.create_index("ix_analysis_jobs_subject_id", "analysis_jobs", ["subject_id"], unique=False)
    op.create_index("ix_analysis_jobs_owner_id", "analysis_jobs", ["owner_id"], unique=False)
    op.create_index("ix_analysis_jobs_status", "analysis_jobs", ["status"], unique=False)
    op.create_index(
        "ix_analysis_jobs_claim_order", "analysis_jobs", ["status", "priority", "created_at"], unique=False
    )

    op.create_table(
        "credit_scores",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("bureau", sa.String(length=64), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("source", sa.String(length=64), nullable=False),
        sa.Column("notes", sa.String(length=1024), nullable=True),
        sa.Column("analysis_id", sa.String(length=36), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_credit_scores"),
    )
    op.create_index("ix_credit_scores_user_id", "credit_scores", ["user_id"], unique=False)
    op.create_index("ix_credit_scores_analysis_id", "credit_scores", ["analysis_id"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("message", sa.String(length=2048), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
    )
    op.create_index("ix_notifications_user_read", "notifications", ["user_id", "read"], unique=False)

    op.create_table(
        "llm_call_metrics",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=_NOW, nullable=False),
        sa.Column("request_id", sa.String(length=64), nullable=False),
        sa.Column("model", sa.String(length=128), nullable=False),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("latency_ms", sa.Integer(), nullable=False),
        sa.Column("error_type", sa.String(length=64), nullable=True),
        sa.Column("retry_count", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_llm_call_metrics"),
    )
    op.create_index("ix_llm_call_metrics_request_id", "llm_call_metrics", ["request_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_llm_call_metrics_request_id", table_name="llm_call_metrics")
    op.drop_table("llm_call_metrics")
    op.drop_index("ix_notifications_user_read", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_credit_scores_analysis_id", table_name="credit_scores")
    op.drop_index("ix_credit_scores_user_id", table_name="credit_scores")
    op.drop_table("credit_scores")
    op.drop_index("ix_analysis_jobs_claim_order", table_name="analysis_jobs")
    op.drop_index("ix_analysis_jobs_status", table_name="analysis_jobs")
    op.drop_index("ix_analysis_jobs_owner_id", table_name="analysis_jobs")
    op.drop_index("ix_analysis_jobs_subject_id", table_name="analysis_jobs")
    op.drop_table("analysis_jobs")
    op.drop_index("ix_analyses_status", table_name="analyses")
    op.drop_index("ix_analyses_owner_id", table_name="analyses")
    op.drop_table("analyses")
