"""Repositories: session-bound data access. Callers own the session and its commit."""
from credit_pipeline.db.repositories.analysis_job_repo import AnalysisJobRepo
from credit_pipeline.db.repositories.analysis_repo import AnalysisRepo, CreditScoreRepo
from credit_pipeline.db.repositories.notification_repo import CallMetricRepo, NotificationRepo

__all__ = [
    "AnalysisJobRepo",
    "AnalysisRepo",
    "CreditScoreRepo",
    "NotificationRepo",
    "CallMetricRepo",
]
