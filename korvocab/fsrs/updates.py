"""
Stability and Difficulty Updates

Implements the memory-model update applied after a review rating.

Key principles:
- Successful recall after more decay produces the largest stability gains
- Gains saturate as stability grows
- A lapse (Again) always drops stability
- Difficulty moves slowly and stays within [1, 10]
"""

from __future__ import annotations

import math

from korvocab.errors import InvalidState
from korvocab.fsrs.constants import (
    DIFFICULTY_BOOST,
    GAIN,
    LAPSE_CAP,
    LAPSE_D,
    LAPSE_R,
    LAPSE_S,
    LAPSE_W,
    RATING_MULTIPLIER,
    RECALL_WEIGHT,
    SATURATION,
    U_RATING,
    ReviewRating,
)
from korvocab.fsrs.memory_state import clamp_difficulty, clamp_stability


def update_stability_on_success(
    stability: float,
    difficulty: float,
    retrievability: float,
    rating: ReviewRating
) -> float:
    """
    Update stability after successful recall (Hard/Good).

    Formula:
        S_new = S * (1 + GAIN * f(D) * S^-SATURATION * (exp(w * (1 - R)) - 1) * m(rating))

    Where:
        - (exp(w * (1 - R)) - 1) rewards recall after more decay (testing effect)
        - S^-SATURATION makes gains shrink for already stable words
        - f(D) = 1 + DIFFICULTY_BOOST * (D - 5.5) gives harder words a larger boost
        - m(rating) is 0.3 for Hard and 1.0 for Good

    The growth term is never negative, so S_new >= S.
    """
    if rating == ReviewRating.AGAIN:
        raise ValueError("Use update_stability_on_failure for AGAIN ratings")

    f_d = 1.0 + DIFFICULTY_BOOST * (difficulty - 5.5)
    recall_bonus = math.exp(RECALL_WEIGHT * (1.0 - retrievability)) - 1.0
    growth = GAIN * f_d * stability ** -SATURATION * recall_bonus * RATING_MULTIPLIER[rating]

    return clamp_stability(stability * (1.0 + max(0.0, growth)))


def update_stability_on_failure(
    stability: float,
    difficulty: float,
    retrievability: float
) -> float:
    """
    Update stability after a lapse (Again).

    Formula:
        S_forget = LAPSE_W * D^-LAPSE_D * ((S + 1)^LAPSE_S - 1) * exp(LAPSE_R * (1 - R))
        S_new = max(S_MIN, min(S_forget, S * LAPSE_CAP))

    The cap guarantees the lapse is a real drop.
    """
    forget = (
        LAPSE_W
        * difficulty ** -LAPSE_D
        * ((stability + 1.0) ** LAPSE_S - 1.0)
        * math.exp(LAPSE_R * (1.0 - retrievability))
    )
    return clamp_stability(min(forget, stability * LAPSE_CAP))


def update_difficulty(difficulty: float, rating: ReviewRating) -> float:
    """
    Update difficulty based on the rating.

    Failure increases difficulty, Hard increases it slightly, Good eases it
    slightly down. Always clipped to [1, 10].
    """
    return clamp_difficulty(difficulty + U_RATING[rating])


def update_after_rating(
    stability: float,
    difficulty: float,
    retrievability: float,
    rating: ReviewRating
) -> tuple[float, float]:
    """
    Apply the memory-model update for one review rating.

    Args:
        stability: Current stability (must be > 0)
        difficulty: Current difficulty
        retrievability: Retrievability at review time
        rating: AGAIN, HARD or GOOD

    Returns:
        (new_stability, new_difficulty)
    """
    if stability <= 0:
        raise InvalidState(f"stability must be positive, got {stability}")

    if rating == ReviewRating.AGAIN:
        new_stability = update_stability_on_failure(stability, difficulty, retrievability)
    else:
        new_stability = update_stability_on_success(stability, difficulty, retrievability, rating)

    new_difficulty = update_difficulty(difficulty, rating)

    return new_stability, new_difficulty
