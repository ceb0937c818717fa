import random

import pytest

from korvocab.errors import InvalidState
from korvocab.fsrs.constants import D_MAX, D_MIN, S_MIN, ReviewRating
from korvocab.fsrs.updates import (
    update_after_rating,
    update_difficulty,
    update_stability_on_success,
)

STABILITIES = [0.5, 1.0, 3.0, 10.0, 120.0]
DIFFICULTIES = [1.0, 5.0, 10.0]
RETRIEVABILITIES = [0.3, 0.7, 0.9, 0.99]


@pytest.mark.parametrize("stability", STABILITIES)
@pytest.mark.parametrize("difficulty", DIFFICULTIES)
@pytest.mark.parametrize("retrievability", RETRIEVABILITIES)
def test_again_drops_stability_and_raises_difficulty(stability, difficulty, retrievability):
    new_s, new_d = update_after_rating(stability, difficulty, retrievability, ReviewRating.AGAIN)

    assert 0 < new_s < stability
    assert new_d >= difficulty
    if difficulty < D_MAX:
        assert new_d > difficulty


@pytest.mark.parametrize("stability", STABILITIES)
@pytest.mark.parametrize("difficulty", DIFFICULTIES)
@pytest.mark.parametrize("retrievability", RETRIEVABILITIES)
def test_good_grows_at_least_as_much_as_hard(stability, difficulty, retrievability):
    hard_s, hard_d = update_after_rating(stability, difficulty, retrievability, ReviewRating.HARD)
    good_s, good_d = update_after_rating(stability, difficulty, retrievability, ReviewRating.GOOD)

    assert hard_s >= stability
    assert good_s >= stability
    assert good_s - stability >= hard_s - stability
    assert good_d <= difficulty <= hard_d


def test_recall_after_more_decay_gives_larger_boost():
    early = update_stability_on_success(5.0, 5.0, 0.95, ReviewRating.GOOD)
    late = update_stability_on_success(5.0, 5.0, 0.6, ReviewRating.GOOD)
    assert late > early


def test_harder_words_get_larger_boost():
    easy_word = update_stability_on_success(5.0, 2.0, 0.8, ReviewRating.GOOD)
    hard_word = update_stability_on_success(5.0, 9.0, 0.8, ReviewRating.GOOD)
    assert hard_word > easy_word


def test_difficulty_is_clamped():
    assert update_difficulty(D_MAX, ReviewRating.AGAIN) == D_MAX
    assert update_difficulty(D_MIN, ReviewRating.GOOD) == D_MIN


def test_difficulty_stays_in_range_under_random_histories():
    rng = random.Random(42)
    ratings = list(ReviewRating)

    for _ in range(200):
        stability, difficulty = rng.uniform(0.1, 50), rng.uniform(1, 10)
        for _ in range(50):
            retrievability = rng.uniform(0.05, 1.0)
            stability, difficulty = update_after_rating(
                stability, difficulty, retrievability, rng.choice(ratings)
            )
            assert D_MIN <= difficulty <= D_MAX
            assert stability > 0


def test_non_positive_stability_is_rejected():
    with pytest.raises(InvalidState):
        update_after_rating(0.0, 5.0, 0.9, ReviewRating.GOOD)


def test_again_at_stability_floor_stays_at_floor():
    new_s, new_d = update_after_rating(S_MIN, 5.0, 0.5, ReviewRating.AGAIN)

    assert new_s == S_MIN
    assert new_d == 6.0
