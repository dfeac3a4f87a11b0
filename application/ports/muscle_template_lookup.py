"""
Muscle Template Lookup Interface (Port).

Maps an exercise name to the muscle groups it trains. The default
implementation is backend.core.muscle_templates.TemplateMuscleLookup.
"""

from typing import List, Optional, Protocol

from domain.models import MuscleContribution


class MuscleTemplateLookup(Protocol):
    """Abstract interface for exercise name -> muscle contribution templates."""

    def lookup(
        self, exercise_name: str, primary: Optional[str] = None
    ) -> Optional[List[MuscleContribution]]:
        """
        Resolve muscle contributions for an exercise.

        Args:
            exercise_name: Exercise name as logged
            primary: Optional primary muscle group used when no template matches

        Returns:
            Contributions, or None when nothing is known about the exercise
        """
        ...
