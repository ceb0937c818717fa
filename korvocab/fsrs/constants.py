"""
FSRS Constants and Parameters

All configurable parameters of the memory model in one place.
Stability is measured in days, difficulty on a 1-10 scale.
"""

from enum import IntEnum


# ---- Ratings ----

class ReviewRating(IntEnum):
    """Learner feedback on a review of a word that already has history."""
    AGAIN = 1  # Forgot (a lapse)
    HARD = 2   # Recalled with high effort
    GOOD = 3   # Recalled normally


class FirstExposureRating(IntEnum):
    """Perceived difficulty when a word is learned for the first time."""
    HARD = 1
    MEDIUM = 2
    EASY = 3


REGIME_FIRST_EXPOSURE = "first_exposure"
REGIME_REVIEW = "review"


# ---- Forgetting Curve ----

DECAY = -0.5
FACTOR = 0.9 ** (1 / DECAY) - 1  # 19/81, so R(S, t=S) == 0.9

DEFAULT_DESIRED_RETENTION = 0.9
MIN_DESIRED_RETENTION = 0.5
MAX_DESIRED_RETENTION = 0.97


# ---- Bounds ----

S_MIN = 0.1       # Minimum stability (days)
S_MAX = 36500.0   # Maximum stability (days)
D_MIN = 1.0       # Minimum difficulty
D_MAX = 10.0      # Maximum difficulty

INITIAL_STABILITY = 1.0   # Untouched "new" record
INITIAL_DIFFICULTY = 5.0  # Neutral difficulty

MASTERED_STABILITY = 30.0  # Stability at which a word counts as mastered


# ---- Successful Recall (Hard / Good) ----

GAIN = 20.0              # Overall stability growth rate
SATURATION = 0.2         # Growth shrinks as stability rises: S^-SATURATION
RECALL_WEIGHT = 1.0      # Reward for recalling after more decay: exp(w * (1 - R)) - 1
DIFFICULTY_BOOST = 0.1   # f(D) = 1 + DIFFICULTY_BOOST * (D - 5.5)

RATING_MULTIPLIER = {
    ReviewRating.HARD: 0.3,
    ReviewRating.GOOD: 1.0,
}


# ---- Lapse (Again) ----

LAPSE_W = 1.94
LAPSE_D = 0.11
LAPSE_S = 0.29
LAPSE_R = 2.27
LAPSE_CAP = 0.5  # Post-lapse stability never exceeds half the previous value


# ---- Difficulty Update Direction by Rating ----

U_RATING = {
    ReviewRating.AGAIN: +1.0,   # Failure increases difficulty
    ReviewRating.HARD: +0.35,   # Hard success slightly increases difficulty
    ReviewRating.GOOD: -0.20,   # Good success slightly decreases difficulty
}


# ---- First Exposure: (stability, difficulty, interval days) ----

FIRST_EXPOSURE_STATE = {
    FirstExposureRating.EASY: (7.0, 3.0, 7),
    FirstExposureRating.MEDIUM: (3.0, 5.0, 3),
    FirstExposureRating.HARD: (1.0, 7.0, 1),
}

# Review rating -> first-exposure rating, used when a review arrives for a
# word that was never rated before.
REVIEW_TO_FIRST_EXPOSURE = {
    ReviewRating.AGAIN: FirstExposureRating.HARD,
    ReviewRating.HARD: FirstExposureRating.MEDIUM,
    ReviewRating.GOOD: FirstExposureRating.EASY,
}


# ---- Chat Hints ----

DEFAULT_HINT_LIMIT = 20
