"""Tests for the stroke pattern and timing comparators."""

import math

import pytest

from core.domain import Drawing
from core.services import StrokeComparator, TimingComparator
from core.services.stroke_comparator import compare_patterns, relative_shares

from factories import letter_t, make_drawing, make_stroke


def _two_strokes(first_length, second_length):
    return make_drawing([
        make_stroke(0, [(0, 0), (first_length, 0)]),
        make_stroke(1, [(0, 0), (0, second_length)], start_time=100),
    ])


class TestPatternHelpers:

    def test_relative_shares(self):
        assert relative_shares([30, 10]) == [0.75, 0.25]

    def test_relative_shares_of_nothing(self):
        assert relative_shares([0, 0, 0]) == [0.0, 0.0, 0.0]

    def test_compare_identical(self):
        assert compare_patterns([0.5, 0.5], [0.5, 0.5]) == 1.0

    def test_compare_empty(self):
        assert compare_patterns([], [1.0]) == 0.0

    def test_compare_never_negative(self):
        assert compare_patterns([1.0, 0.0], [0.0, 1.0], mismatch_penalty=0.1) == 0.0

    def test_compare_position_by_position(self):
        # Same shares in a different order are not matched up
        assert compare_patterns([0.75, 0.25], [0.25, 0.75]) == pytest.approx(0.5)


class TestStrokeComparator:

    @pytest.fixture
    def comparator(self):
        return StrokeComparator()

    def test_count_similarity(self, comparator):
        empty = Drawing.empty(300, 300)
        one = make_drawing([make_stroke(0, [(0, 0), (1, 1)])])
        two = _two_strokes(10, 10)
        three = letter_t()
        three.strokes.append(make_stroke(2, [(0, 0), (5, 5)], start_time=700))

        assert comparator.count_similarity(empty, empty) == 1.0
        assert comparator.count_similarity(three, empty) == 0.0
        assert comparator.count_similarity(one, two) == pytest.approx(0.5)
        assert comparator.count_similarity(two, two) == 1.0

    def test_relative_lengths(self, comparator):
        assert comparator.relative_lengths(_two_strokes(30, 10)) == pytest.approx([0.75, 0.25])

    def test_length_similarity_identical(self, comparator):
        assert comparator.length_similarity(letter_t(), letter_t(scale=2)) == pytest.approx(1.0)

    def test_length_similarity_with_missing_stroke(self, comparator):
        example = _two_strokes(30, 10)
        attempt = make_drawing([make_stroke(0, [(0, 0), (40, 0)])])

        # |0.75 - 1.0| plus one missing stroke
        assert comparator.length_similarity(example, attempt) == pytest.approx(1 - 0.35)

    def test_length_similarity_empty(self, comparator):
        assert comparator.length_similarity(letter_t(), Drawing.empty(300, 300)) == 0.0
        assert comparator.length_similarity(Drawing.empty(300, 300), letter_t()) == 0.0

    def test_dots_have_zero_length_without_dividing_by_zero(self, comparator):
        dots = make_drawing([
            make_stroke(0, [(5, 5)]),
            make_stroke(1, [(9, 9)], start_time=50),
        ])

        assert comparator.relative_lengths(dots) == [0.0, 0.0]
        assert comparator.length_similarity(dots, dots) == 1.0

    def test_compare_weights_count_and_length(self, comparator):
        example = _two_strokes(30, 10)
        attempt = make_drawing([make_stroke(0, [(0, 0), (40, 0)])])

        assert comparator.compare(example, attempt) == pytest.approx(0.5 * 0.5 + 0.5 * 0.65)

    def test_mismatch_penalty_is_configurable(self):
        example = _two_strokes(30, 10)
        attempt = make_drawing([make_stroke(0, [(0, 0), (40, 0)])])

        assert StrokeComparator(mismatch_penalty=0).length_similarity(example, attempt) == pytest.approx(0.75)


class TestTimingComparator:

    @pytest.fixture
    def comparator(self):
        return TimingComparator()

    def test_ratio_is_log_symmetric(self, comparator):
        twice_as_slow = comparator.ratio_to_score(2.0)
        twice_as_fast = comparator.ratio_to_score(0.5)

        assert twice_as_slow == pytest.approx(twice_as_fast)
        assert twice_as_slow == pytest.approx(math.exp(-math.log(2) ** 2))

    def test_ratio_peaks_at_equal_time(self, comparator):
        assert comparator.ratio_score(letter_t(), letter_t()) == 1.0

    def test_ratio_neutral_without_time(self, comparator):
        timed = letter_t()
        untimed = make_drawing(letter_t().strokes, total_time=0)

        assert comparator.ratio_score(timed, untimed) == 0.5
        assert comparator.ratio_score(untimed, timed) == 0.5

    def test_ratio_score_for_invalid_ratio(self, comparator):
        assert comparator.ratio_to_score(0) == 0.0
        assert comparator.ratio_to_score(float("inf")) == 0.0

    def test_pattern_neutral_with_single_stroke(self, comparator):
        single = make_drawing([make_stroke(0, [(0, 0), (1, 1)])])

        assert comparator.pattern_score(letter_t(), single) == 0.5
        assert comparator.pattern_score(single, letter_t()) == 0.5

    def test_pattern_compares_relative_durations(self, comparator):
        example = make_drawing([
            make_stroke(0, [(0, 0), (1, 1)], start_time=0, end_time=100),
            make_stroke(1, [(0, 0), (1, 1)], start_time=200, end_time=300),
        ])
        attempt = make_drawing([
            make_stroke(0, [(0, 0), (1, 1)], start_time=0, end_time=150),
            make_stroke(1, [(0, 0), (1, 1)], start_time=200, end_time=250),
        ])

        assert comparator.relative_durations(attempt) == pytest.approx([0.75, 0.25])
        assert comparator.pattern_score(example, attempt) == pytest.approx(0.75)

    def test_pattern_with_zero_durations(self, comparator):
        instant = make_drawing([
            make_stroke(0, [(0, 0)], start_time=10, end_time=10),
            make_stroke(1, [(1, 1)], start_time=20, end_time=20),
        ])

        assert comparator.pattern_score(instant, instant) == 1.0

    def test_compare_weights_ratio_and_pattern(self, comparator):
        example = letter_t()
        attempt = make_drawing(letter_t().strokes, total_time=example.total_time * 2)

        expected = 0.4 * math.exp(-math.log(2) ** 2) + 0.6 * 1.0
        assert comparator.compare(example, attempt) == pytest.approx(expected)
