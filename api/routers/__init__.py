"""
Router package for the LiftLog API.

This package contains all API routers organized by domain:
- health: Liveness endpoint
- workouts: Model output ingestion and session merging
- analytics: Muscle-group stats, PRs and volume guidelines
- intents: Ask/Plan intent execution
- backup: Backup export and import
"""

from api.routers.analytics import router as analytics_router
from api.routers.backup import router as backup_router
from api.routers.health import router as health_router
from api.routers.intents import router as intents_router
from api.routers.workouts import router as workouts_router

__all__ = [
    "analytics_router",
    "backup_router",
    "health_router",
    "intents_router",
    "workouts_router",
]
