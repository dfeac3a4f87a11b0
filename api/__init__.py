"""
API package for the LiftLog API.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
- schemas/: Request bodies
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_normalize_options,
    get_now,
    get_settings,
    get_template_lookup,
)

__all__ = [
    "get_normalize_options",
    "get_now",
    "get_settings",
    "get_template_lookup",
]
