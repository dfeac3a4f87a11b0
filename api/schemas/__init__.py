"""
Pydantic schemas for API requests.

Organized by feature/domain:
- workouts: ingestion, analytics, intent and backup request bodies
"""

from api.schemas.workouts import (
    AskRequest,
    BackupExportRequest,
    BackupImportRequest,
    ClassifierOutputRequest,
    MergeRequest,
    ParseOutputRequest,
    PlanRequest,
    PRRequest,
    StatsRequest,
)

__all__ = [
    "AskRequest",
    "BackupExportRequest",
    "BackupImportRequest",
    "ClassifierOutputRequest",
    "MergeRequest",
    "ParseOutputRequest",
    "PlanRequest",
    "PRRequest",
    "StatsRequest",
]
