"""Tests for score composition and the calculate_score entry point."""

import math
import random

import pytest

from core.domain import BoxSize, Drawing, FeedbackBand, InputError
from core.services import ScoreCalculator, score_to_stars

from factories import (
    diagonal_attempt,
    diagonal_example,
    letter_t,
    make_drawing,
    make_stroke,
)


@pytest.fixture
def calculator():
    return ScoreCalculator(rng=random.Random(1234), clock=lambda: 1_700_000_000_000)


def _pool(band):
    return ScoreCalculator.FEEDBACK[band]


def _categories(result):
    c = result.categories
    return [c.accuracy, c.strokes, c.timing, c.overall]


class TestStars:

    @pytest.mark.parametrize("score,stars", [
        (0.0, 1),
        (0.5, 3),
        (1.0, 5),
        (0.625, 4),
        (0.37, 2),
        (-0.3, 1),
        (1.7, 5),
        (float("nan"), 1),
    ])
    def test_score_to_stars(self, score, stars):
        assert score_to_stars(score) == stars


class TestFeedback:

    @pytest.mark.parametrize("total,band", [
        (100, FeedbackBand.EXCELLENT),
        (90, FeedbackBand.EXCELLENT),
        (89, FeedbackBand.VERY_GOOD),
        (75, FeedbackBand.VERY_GOOD),
        (74, FeedbackBand.GOOD),
        (60, FeedbackBand.GOOD),
        (59, FeedbackBand.FAIR),
        (40, FeedbackBand.FAIR),
        (39, FeedbackBand.NEEDS_WORK),
        (0, FeedbackBand.NEEDS_WORK),
    ])
    def test_band_selection(self, calculator, total, band):
        assert FeedbackBand.for_score(total) == band
        assert calculator.generate_feedback(total) in _pool(band)

    def test_seeded_random_source_is_reproducible(self):
        first = ScoreCalculator(rng=random.Random(99))
        second = ScoreCalculator(rng=random.Random(99))

        picks_a = [first.generate_feedback(50) for _ in range(10)]
        picks_b = [second.generate_feedback(50) for _ in range(10)]

        assert picks_a == picks_b

    def test_random_source_is_injected(self):
        class FirstChoice:
            def choice(self, options):
                return options[0]

        calculator = ScoreCalculator(rng=FirstChoice())

        assert calculator.generate_feedback(95) == _pool(FeedbackBand.EXCELLENT)[0]


class TestCalculateScore:

    def test_empty_attempts_raises(self, calculator):
        with pytest.raises(InputError):
            calculator.calculate_score(diagonal_example(), [])

    def test_input_error_is_a_value_error(self, calculator):
        with pytest.raises(ValueError, match="No attempts"):
            calculator.calculate_score(diagonal_example(), [])

    def test_identical_single_stroke_drawings(self, calculator):
        result = calculator.calculate_score(diagonal_example(), [diagonal_example()])

        assert 90 <= result.total_score <= 100
        assert result.categories.overall == 5
        assert result.feedback in _pool(FeedbackBand.EXCELLENT)

    def test_identical_multi_stroke_drawings(self, calculator):
        result = calculator.calculate_score(letter_t(), [letter_t()])

        assert result.total_score == 100
        assert _categories(result) == [5, 5, 5, 5]
        assert result.feedback in _pool(FeedbackBand.EXCELLENT)

    def test_close_copy_scores_well(self, calculator):
        result = calculator.calculate_score(diagonal_example(), [diagonal_attempt()])

        assert result.total_score > 70
        assert all(stars >= 3 for stars in _categories(result))

    def test_empty_attempt_scores_minimum(self, calculator):
        example = letter_t()
        example.strokes.append(make_stroke(2, [(0, 130), (100, 130)], start_time=700))
        example.total_time = 800
        attempt = Drawing.empty(300, 300)

        breakdown = calculator.calculate_breakdown(example, [attempt])
        result = calculator.calculate_score(example, [attempt])

        assert breakdown.stroke_count == 0.0
        assert breakdown.path_similarity == 0.0
        assert result.total_score <= 25
        assert result.categories.strokes == 1
        assert all(stars >= 1 for stars in _categories(result))
        assert result.feedback in _pool(FeedbackBand.NEEDS_WORK)

    def test_violated_constraint_box_lowers_accuracy(self, calculator):
        example, attempt = diagonal_example(), diagonal_attempt()

        free = calculator.calculate_breakdown(example, [attempt])
        boxed = calculator.calculate_breakdown(example, [attempt], [BoxSize(10, 10)])

        assert boxed.constraint_adherence == 0.0
        assert boxed.accuracy < free.accuracy
        assert free.accuracy - boxed.accuracy == pytest.approx(0.25)

    def test_only_last_attempt_is_scored(self, calculator):
        example = letter_t()
        scribble = make_drawing([make_stroke(0, [(300, 0), (0, 300)])])

        last_good = calculator.calculate_score(example, [scribble, letter_t()])
        only_good = calculator.calculate_score(example, [letter_t()])

        assert last_good.total_score == only_good.total_score

    def test_constraint_box_matches_last_attempt_position(self, calculator):
        example, attempt = diagonal_example(), diagonal_attempt()

        applied = calculator.calculate_breakdown(
            example, [attempt, attempt], [None, BoxSize(10, 10)]
        )
        earlier_only = calculator.calculate_breakdown(
            example, [attempt, attempt], [BoxSize(10, 10)]
        )

        assert applied.constraint_adherence == 0.0
        assert earlier_only.constraint_adherence == 1.0

    def test_degenerate_drawings_stay_finite(self, calculator):
        dot = make_drawing([make_stroke(0, [(150, 150)])], total_time=0)
        line = make_drawing([make_stroke(0, [(10, 10), (10, 90)], interval=0)], total_time=0)

        breakdown = calculator.calculate_breakdown(dot, [line], [BoxSize(1, 1)])
        result = calculator.compose(breakdown)

        assert all(math.isfinite(v) for v in vars(breakdown).values())
        assert 0 <= result.total_score <= 100

    def test_inputs_are_not_mutated(self, calculator):
        example, attempt = letter_t(offset_x=30), letter_t(offset_x=60)
        before = (repr(example), repr(attempt))

        calculator.calculate_score(example, [attempt])

        assert (repr(example), repr(attempt)) == before

    def test_timestamp_comes_from_clock(self, calculator):
        result = calculator.calculate_score(letter_t(), [letter_t()])

        assert result.timestamp == 1_700_000_000_000

    def test_same_seed_same_result(self):
        args = (diagonal_example(), [diagonal_attempt()])

        first = ScoreCalculator(rng=random.Random(5), clock=lambda: 0).calculate_score(*args)
        second = ScoreCalculator(rng=random.Random(5), clock=lambda: 0).calculate_score(*args)

        assert first == second
