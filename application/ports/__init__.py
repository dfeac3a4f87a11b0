"""
Collaborator Interfaces (Ports) for the workout log service.

This package defines abstract interfaces that decouple the deterministic core
from external capabilities (language models, template catalogs).

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the core needs)
- Adapters: Concrete implementations elsewhere (how it's provided)

Usage:
    from application.ports import CompletionProvider

    class WorkoutTextParser:
        def __init__(self, provider: CompletionProvider):
            self.provider = provider
"""

from application.ports.completion_provider import CompletionProvider
from application.ports.muscle_template_lookup import MuscleTemplateLookup

__all__ = [
    "CompletionProvider",
    "MuscleTemplateLookup",
]
