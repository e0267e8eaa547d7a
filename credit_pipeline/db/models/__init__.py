# Importing every model registers its table on Base.metadata (create_all, Alembic autogenerate).
from credit_pipeline.db.models.analysis import Analysis, CreditScore
from credit_pipeline.db.models.analysis_job import AnalysisJob
from credit_pipeline.db.models.call_metric import LlmCallMetric
from credit_pipeline.db.models.notification import Notification

__all__ = [
    "Analysis",
    "AnalysisJob",
    "CreditScore",
    "LlmCallMetric",
    "Notification",
]
