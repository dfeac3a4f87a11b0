"""
Deterministic muscle contribution templates for fractional set counting.

Templates live in shared/dictionaries/muscle_templates.yaml and map a
normalized exercise name to its contributions:
- the primary muscle gets fraction 1.0 and is_direct true
- secondary muscles get 0.25-0.5

Lookup order:
1. Exact template name
2. Partial containment in either direction, in table order
   ("incline dumbbell bench press" contains "bench press")
3. The supplied primary muscle group as a single direct contribution
"""

import logging
import re
from functools import lru_cache
from typing import List, Optional, Tuple

from domain.models import ContributionSource, MuscleContribution, WorkoutExercise
from application.ports import MuscleTemplateLookup
from backend.core.dictionaries import load_dictionary

logger = logging.getLogger(__name__)


def normalize_template_name(name: str) -> str:
    """
    Normalize an exercise name for template lookup.

    Lowercases, trims, drops punctuation except hyphens and collapses runs
    of whitespace.

    Examples:
        >>> normalize_template_name("  Bench   Press! ")
        'bench press'
        >>> normalize_template_name("Pull-Up")
        'pull-up'
    """
    t = name.lower().strip()
    t = re.sub(r"[^\w\s-]", "", t)
    return re.sub(r"\s+", " ", t)


def _templates():
    return load_dictionary("muscle_templates")["templates"]


@lru_cache(maxsize=512)
def _template_for(normalized: str) -> Optional[Tuple[MuscleContribution, ...]]:
    templates = _templates()

    entries = templates.get(normalized)
    if entries is None and normalized:
        for template_name, candidate in templates.items():
            if template_name in normalized or normalized in template_name:
                logger.debug(f"Partial template match: '{normalized}' -> '{template_name}'")
                entries = candidate
                break

    if entries is None:
        return None

    return tuple(
        MuscleContribution(
            muscle_group=e["muscle_group"],
            fraction=e.get("fraction", 1.0),
            is_direct=True if e.get("is_direct") else None,
            source=ContributionSource.TEMPLATE,
        )
        for e in entries
    )


def get_default_muscle_contributions(
    exercise_name: str,
    primary: Optional[str] = None,
) -> Optional[List[MuscleContribution]]:
    """
    Default muscle contributions for an exercise.

    Args:
        exercise_name: Exercise name as logged
        primary: Optional primary muscle group used when no template matches

    Returns:
        New list of contributions, or None when neither a template nor a
        primary group is available
    """
    template = _template_for(normalize_template_name(exercise_name or ""))
    if template is not None:
        return list(template)

    if primary:
        return [
            MuscleContribution(
                muscle_group=primary,
                fraction=1.0,
                is_direct=True,
                source=ContributionSource.PRIMARY,
            )
        ]

    return None


class TemplateMuscleLookup:
    """MuscleTemplateLookup backed by the YAML template table."""

    def lookup(
        self,
        exercise_name: str,
        primary: Optional[str] = None,
    ) -> Optional[List[MuscleContribution]]:
        return get_default_muscle_contributions(exercise_name, primary)


def ensure_muscle_contributions(
    exercise: WorkoutExercise,
    lookup: Optional[MuscleTemplateLookup] = None,
) -> Optional[List[MuscleContribution]]:
    """
    Resolve the contributions an exercise should be counted with.

    Stored contributions win when non-empty. Otherwise the template lookup
    is consulted (when given), then the primary muscle group.
    """
    if exercise.muscle_contributions:
        return list(exercise.muscle_contributions)

    if lookup is not None:
        return lookup.lookup(exercise.name_raw, exercise.primary_muscle_group)

    if exercise.primary_muscle_group:
        return [
            MuscleContribution(
                muscle_group=exercise.primary_muscle_group,
                fraction=1.0,
                is_direct=True,
                source=ContributionSource.PRIMARY,
            )
        ]

    return None
