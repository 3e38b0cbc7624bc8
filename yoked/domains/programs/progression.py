"""Weight estimation and RIR-driven progression.

Pure functions; the service layer loads the inputs and persists the results.
"""
import math
from collections.abc import Sequence

import structlog

from yoked.core.exceptions import ValidationError

logger = structlog.get_logger(__name__)

WEIGHT_INCREMENT = 2.5

# Relative load per exercise slug, used when the catalogue row has no modifier
EXERCISE_MODIFIERS: dict[str, float] = {
    "bench_press": 1.0,
    "shoulder_press": 0.8,
    "squat": 1.2,
    "deadlift": 1.1,
    "bicep_curl": 0.5,
}
DEFAULT_MODIFIER = 0.5


def round_to_increment(value: float, increment: float = WEIGHT_INCREMENT) -> float:
    """Round to the nearest plate increment, halves away from zero.

    ``round()`` would round 0.5 to even, which makes 21.25 -> 20.0; the
    gym convention is 22.5.
    """
    steps = value / increment
    return math.copysign(math.floor(abs(steps) + 0.5), steps) * increment


def exercise_modifier(slug: str | None, load_modifier: float | None = None) -> float:
    """Resolve the load modifier of an exercise.

    Order: the catalogue value, the built-in table by slug, then
    ``DEFAULT_MODIFIER``.
    """
    if load_modifier is not None and load_modifier > 0:
        return load_modifier
    if slug in EXERCISE_MODIFIERS:
        return EXERCISE_MODIFIERS[slug]

    logger.warning("exercise_modifier_defaulted", slug=slug, modifier=DEFAULT_MODIFIER)
    return DEFAULT_MODIFIER


def base_strength(body_weight: float, sex: str, age: int) -> float:
    """Estimate working load before the exercise modifier."""
    base = body_weight * 0.6
    if sex == "male":
        base *= 1.2
    if age < 25:
        base *= 0.9 + (age - 13) / 120
    elif age > 35:
        base *= 1.1 - (age - 35) / 100
    return base


def initial_weight(
    body_weight: float,
    sex: str,
    age: int,
    modifier: float,
    prescribed_weight: float | None = None,
) -> float:
    """Starting weight for an exercise the user has never logged.

    A non-zero prescribed weight from the program template wins.
    """
    if prescribed_weight:
        return prescribed_weight
    return max(round_to_increment(base_strength(body_weight, sex, age) * modifier), 0.0)


def average_rir(values: Sequence[int | float]) -> float:
    """Mean reps-in-reserve over the logged sets."""
    if not values:
        raise ValidationError("RIR values must not be empty", field="actual_rir")
    return sum(values) / len(values)


def adjustment_multiplier(target_rir: float, avg_rir: float) -> float:
    """Load multiplier for the next session.

    Positive difference (fewer reps left than targeted) lowers the load;
    negative raises it.
    """
    difference = target_rir - avg_rir
    if difference >= 2:
        return 0.90
    if difference <= -2:
        return 1.10
    if difference >= 1:
        return 0.95
    if difference <= -1:
        return 1.05
    return 1.0


def next_weight(previous: float, multiplier: float) -> float:
    """Apply the multiplier and round to the plate increment."""
    return max(round_to_increment(previous * multiplier), 0.0)
