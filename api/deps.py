"""
FastAPI Dependency Providers for the LiftLog API.

Providers return interface types (Protocols) where a port exists, so tests
can swap implementations without touching routers.

Usage in routers:
    from api.deps import get_template_lookup
    from application.ports import MuscleTemplateLookup

    @router.post("/stats")
    def stats(lookup: MuscleTemplateLookup = Depends(get_template_lookup)):
        ...

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_now] = lambda: datetime(2024, 12, 20, 12, 0)
"""

from datetime import datetime

from fastapi import Depends

from application.ports import MuscleTemplateLookup
from backend.core.exercise_normalizer import NormalizeOptions
from backend.core.muscle_templates import TemplateMuscleLookup
from backend.settings import Settings, get_settings as _get_settings


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.
    """
    return _get_settings()


# =============================================================================
# Collaborators
# =============================================================================


def get_template_lookup() -> MuscleTemplateLookup:
    """Exercise-name to muscle-template lookup backed by the YAML tables."""
    return TemplateMuscleLookup()


def get_normalize_options(
    settings: Settings = Depends(get_settings),
    lookup: MuscleTemplateLookup = Depends(get_template_lookup),
) -> NormalizeOptions:
    """Normalizer options driven by settings."""
    return NormalizeOptions(
        use_template_muscles=settings.use_template_muscles,
        allow_model_provided_muscles=settings.allow_model_provided_muscles,
        template_lookup=lookup,
    )


def get_now() -> datetime:
    """Reference time for date windows. Overridden in tests for a fixed clock."""
    return datetime.now()
