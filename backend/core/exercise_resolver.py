"""
Exercise alias resolution against a user's own training history.

Every Ask/Plan branch that takes an exercise name goes through
find_best_match(), so thresholds and tie-breaks are defined once here:

1. Alias table: the normalized query equals a canonical name or one of its
   informal aliases ("dl" -> "deadlift"). The first history name that
   normalizes to the canonical name, or scores >= 0.8 against it, wins with
   score 1.0.
2. Similarity: every distinct history name is scored with
   calculate_similarity() and sorted by score (stable, so history order
   breaks ties).
3. Threshold: the top candidate is accepted at >= 0.5, and the next three
   candidates scoring >= 0.3 become suggestions. Otherwise there is no
   match and the top three candidates are returned as suggestions.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from domain.models import WorkoutExercise, WorkoutSession
from backend.core.dictionaries import load_dictionary

logger = logging.getLogger(__name__)

ACCEPT_THRESHOLD = 0.5
SUGGESTION_THRESHOLD = 0.3
ALIAS_HISTORY_THRESHOLD = 0.8
MAX_SUGGESTIONS = 3

_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)


class MatchMethod(str, Enum):
    """How the history name was chosen."""
    ALIAS = "alias"
    SIMILARITY = "similarity"
    NONE = "none"


@dataclass
class ExerciseResolution:
    """Result of resolving a free-text exercise reference."""
    matched_name: Optional[str]
    score: float  # 0.0 to 1.0
    method: MatchMethod
    suggestions: List[str] = field(default_factory=list)


@dataclass
class ExerciseOccurrences:
    """Every logged instance of the resolved exercise, in session order."""
    matched_name: Optional[str]
    occurrences: List[Tuple[WorkoutSession, WorkoutExercise]] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    @property
    def exercises(self) -> List[WorkoutExercise]:
        return [ex for _, ex in self.occurrences]


def normalize_exercise_name(name: str) -> str:
    """
    Lowercase, strip punctuation, trim.

    Examples:
        >>> normalize_exercise_name("Pull-Up!")
        'pullup'
        >>> normalize_exercise_name("  Bench Press ")
        'bench press'
    """
    return _NON_WORD.sub("", (name or "").lower()).strip()


def calculate_similarity(query: str, target: str) -> float:
    """
    Similarity between two exercise names in [0, 1].

    - exact match: 1.0
    - containment either way: 0.9
    - word overlap: 0.5 + overlap_ratio * 0.4
    - any pair of words sharing a 3-letter prefix: 0.4
    - otherwise: 0.0

    A word overlaps when it is contained in, or contains, a word of the
    other name. Blank names only match each other.

    Examples:
        >>> calculate_similarity("bench", "Bench Press")
        0.9
        >>> calculate_similarity("squat", "Leg Press")
        0.0
    """
    q = normalize_exercise_name(query)
    t = normalize_exercise_name(target)

    if q == t:
        return 1.0
    if not q or not t:
        return 0.0

    if q in t or t in q:
        return 0.9

    q_words = q.split()
    t_words = t.split()
    overlap = [w for w in q_words if any(w in tw or tw in w for tw in t_words)]
    if overlap:
        return 0.5 + (len(overlap) / max(len(q_words), len(t_words))) * 0.4

    for qw in q_words:
        for tw in t_words:
            if len(qw) >= 3 and tw.startswith(qw[:3]):
                return 0.4
            if len(tw) >= 3 and qw.startswith(tw[:3]):
                return 0.4

    return 0.0


def resolve_exercise_alias(query: str) -> Optional[str]:
    """Canonical exercise name for an informal query, or None."""
    normalized = normalize_exercise_name(query)
    if not normalized:
        return None

    for canonical, aliases in load_dictionary("exercise_aliases").items():
        if canonical == normalized or normalized in aliases:
            return canonical
    return None


def get_all_exercise_names(sessions: Iterable[WorkoutSession]) -> List[str]:
    """Distinct raw exercise names in first-seen order."""
    seen = {}
    for session in sessions:
        for ex in session.exercises:
            seen.setdefault(ex.name_raw, None)
    return list(seen)


def find_best_match(query: str, sessions: Iterable[WorkoutSession]) -> ExerciseResolution:
    """
    Resolve a free-text exercise reference to a name from the user's history.

    Args:
        query: What the user typed ("benched", "dl", "incline db")
        sessions: Training history to search

    Returns:
        ExerciseResolution with the matched history name (or None), its
        score and up to three suggestions
    """
    all_names = get_all_exercise_names(sessions)

    canonical = resolve_exercise_alias(query)
    if canonical:
        for name in all_names:
            normalized = normalize_exercise_name(name)
            if normalized == canonical or calculate_similarity(canonical, normalized) >= ALIAS_HISTORY_THRESHOLD:
                logger.debug(f"Alias match: '{canonical}' -> '{name}'")
                return ExerciseResolution(matched_name=name, score=1.0, method=MatchMethod.ALIAS)

    scored = sorted(
        ((name, calculate_similarity(query, name)) for name in all_names),
        key=lambda pair: pair[1],
        reverse=True,
    )

    if scored and scored[0][1] >= ACCEPT_THRESHOLD:
        best_name, best_score = scored[0]
        return ExerciseResolution(
            matched_name=best_name,
            score=best_score,
            method=MatchMethod.SIMILARITY,
            suggestions=[
                name for name, score in scored[1 : MAX_SUGGESTIONS + 1] if score >= SUGGESTION_THRESHOLD
            ],
        )

    logger.debug(f"No exercise match above {ACCEPT_THRESHOLD} among {len(all_names)} names")
    return ExerciseResolution(
        matched_name=None,
        score=0.0,
        method=MatchMethod.NONE,
        suggestions=[name for name, _ in scored[:MAX_SUGGESTIONS]],
    )


def find_matching_exercises(query: str, sessions: Iterable[WorkoutSession]) -> ExerciseOccurrences:
    """
    Resolve a query and collect every logged instance of the matched exercise.

    Instances are those whose normalized name equals the normalized match.
    """
    sessions = list(sessions)
    resolution = find_best_match(query, sessions)

    if resolution.matched_name is None:
        return ExerciseOccurrences(matched_name=None, suggestions=resolution.suggestions)

    key = normalize_exercise_name(resolution.matched_name)
    occurrences = [
        (session, ex)
        for session in sessions
        for ex in session.exercises
        if normalize_exercise_name(ex.name_raw) == key
    ]

    return ExerciseOccurrences(
        matched_name=resolution.matched_name,
        occurrences=occurrences,
        suggestions=resolution.suggestions,
    )
