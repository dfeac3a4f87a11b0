"""
Muscle contribution value object.

A contribution says how much one set of an exercise counts toward a muscle
group. Contributions come from three places (exercise templates, sanitized
model output, or a bare primary muscle group) and carry that provenance in
`source` so aggregation never has to care where they came from.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ContributionSource(str, Enum):
    """Where a muscle contribution was derived from."""

    TEMPLATE = "template"
    MODEL = "model"
    PRIMARY = "primary"


class MuscleContribution(BaseModel):
    """
    Value object describing one muscle group hit by an exercise.

    `fraction` weights the set count toward `weeklySets.fractional`.
    `is_direct` marks the group that counts 1:1 toward direct sets.

    Examples:
        >>> chest = MuscleContribution(muscle_group="Chest", fraction=1, is_direct=True)
        >>> chest.counts_as_direct
        True

        >>> arms = MuscleContribution(muscle_group="Arms", fraction=0.5)
        >>> arms.counts_as_direct
        False
    """

    muscle_group: str = Field(..., min_length=1, description="Muscle group name (e.g. 'Chest')")
    fraction: float = Field(
        default=1.0,
        gt=0,
        le=1,
        description="Share of each set attributed to this group, in (0, 1]",
    )
    is_direct: Optional[bool] = Field(
        default=None,
        description="True when sets count fully toward direct volume",
    )
    source: Optional[ContributionSource] = Field(
        default=None,
        description="Provenance of the contribution",
    )

    @property
    def counts_as_direct(self) -> bool:
        return self.is_direct is True

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }
