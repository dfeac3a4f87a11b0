"""
Display formatting for Ask and Plan results.

Turns executor output into data cards and text for a client to render.
Formatting is deterministic; no model is involved.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from backend.core.training_math import format_number, format_numeric_date
from backend.services.ask_executor import AskResult
from backend.services.plan_executor import PlanExercise, WorkoutPlan


# =============================================================================
# Ask results
# =============================================================================


@dataclass
class DataCard:
    title: str
    items: List[Dict[str, str]] = field(default_factory=list)

    def add(self, label: str, value: str) -> None:
        self.items.append({"label": label, "value": value})

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "items": list(self.items)}


@dataclass
class FormattedAskResult:
    answer_text: str
    data_card: Optional[DataCard] = None
    suggestions: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "answerText": self.answer_text,
            "dataCard": self.data_card.to_dict() if self.data_card else None,
        }
        if self.suggestions is not None:
            out["suggestions"] = list(self.suggestions)
        return out


def format_ask_result(result: AskResult, weight_unit: str = "lbs") -> FormattedAskResult:
    """
    Build a data card for an Ask result.

    A result that only carries suggestions (a failed name lookup) gets no
    card, just the suggestions. The card title is the matched exercise name
    when there is one.
    """
    data = result.data

    if data.suggestions and not data.matched_exercise and not data.date and data.sets_count is None:
        return FormattedAskResult(answer_text=result.answer_text, suggestions=list(data.suggestions))

    has_data = (
        data.date
        or data.matched_exercise
        or data.sets_count is not None
        or data.best_weight is not None
        or data.sets
        or data.session_exercises
    )
    if not has_data:
        return FormattedAskResult(answer_text=result.answer_text)

    exercise_name = data.matched_exercise or data.exercise
    card = DataCard(title=exercise_name or "Workout Data")

    if data.date:
        card.add("Date", format_numeric_date(data.date))
    if exercise_name:
        card.add("Exercise", exercise_name)
    if data.top_set:
        card.add("Top Set", f"{data.top_set['reps']} reps @ {data.top_set['weight']}")
    if data.best_weight is not None:
        card.add("Best Weight", f"{format_number(data.best_weight)} {weight_unit}")
        if data.best_reps is not None:
            card.add("Reps", str(data.best_reps))
    if data.best_e1rm is not None:
        card.add("Estimated 1RM", f"{data.best_e1rm:.1f} {weight_unit}")
    if data.best_volume is not None:
        card.add("Best Volume", f"{data.best_volume:.0f} {weight_unit}")
    if data.sets_count is not None:
        card.add("Total Sets", str(data.sets_count))
    if data.sets:
        card.add("Sets", ", ".join(f"{s['reps']}×{s['weight']}" for s in data.sets))

    if not card.items:
        return FormattedAskResult(answer_text=result.answer_text)

    return FormattedAskResult(answer_text=result.answer_text, data_card=card)


# =============================================================================
# Plan results
# =============================================================================


def _format_plan_exercise(exercise: PlanExercise) -> Dict[str, Any]:
    out = {
        "name": exercise.exercise,
        "prescription": f"{exercise.sets} sets × {exercise.reps} reps",
        "intensity": exercise.intensity or "RPE 7–8",
    }
    rw = exercise.recommended_weight
    if rw is not None:
        weight = f"{format_number(rw.value)} {rw.unit}"
        if rw.percentage_of_max:
            weight += f" (~{rw.percentage_of_max}% 1RM)"
        if rw.confidence == "low":
            weight += " ⚠️"
        out["weight"] = weight
        out["confidence"] = rw.confidence
    if exercise.notes:
        out["notes"] = exercise.notes
    return out


def format_plan_result(plan: WorkoutPlan) -> Dict[str, Any]:
    """Display structure with a prescription line per exercise and a summary."""
    exercises = [_format_plan_exercise(e) for e in plan.exercises]
    has_weights = plan.has_personalized_weights or any("weight" in e for e in exercises)

    summary = f"{len(exercises)} exercises"
    if has_weights:
        summary += " with personalized weight recommendations"
    if plan.is_generic:
        summary += " (generic template)"

    return {
        "title": plan.title,
        "summary": summary,
        "exercises": exercises,
        "rationale": list(plan.rationale),
        "hasPersonalizedWeights": has_weights,
    }


def format_plan_as_text(plan: WorkoutPlan) -> str:
    """Plain-text plan for sharing."""
    lines = [f"📋 {plan.title}", ""]

    for i, ex in enumerate(plan.exercises, start=1):
        line = f"{i}. {ex.exercise}: {ex.sets} × {ex.reps}"
        if ex.recommended_weight:
            line += f" @ {format_number(ex.recommended_weight.value)} {ex.recommended_weight.unit}"
        if ex.intensity:
            line += f" ({ex.intensity})"
        lines.append(line)
        if ex.notes:
            lines.append(f"   ↳ {ex.notes}")

    lines.append("")
    lines.append("---")
    lines.extend(f"• {r}" for r in plan.rationale)
    return "\n".join(lines)


def format_plan_as_card(plan: WorkoutPlan) -> Dict[str, Any]:
    exercises = []
    for ex in plan.exercises:
        rw = ex.recommended_weight
        exercises.append({
            "name": ex.exercise,
            "details": f"{ex.sets} × {ex.reps} @ {ex.intensity}",
            "weight": f"{format_number(rw.value)} {rw.unit}" if rw else None,
            "notes": ex.notes,
            "confidence": rw.confidence if rw else None,
        })
    return {"title": plan.title, "exercises": exercises, "footer": " ".join(plan.rationale)}
