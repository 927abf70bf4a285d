"""
Stroke Comparator Service

Compares how an attempt was built out of strokes: how many strokes were
used, and how the total ink is distributed over them.
"""

import logging
from typing import Sequence

from ..domain.drawing import Drawing

logger = logging.getLogger(__name__)


def relative_shares(values: Sequence[float]) -> list[float]:
    """
    Express each value as a fraction of the total.

    Returns all zeros when the total is zero.
    """
    total = sum(values)
    if total <= 0:
        return [0.0 for _ in values]
    return [value / total for value in values]


def compare_patterns(
    example: Sequence[float],
    attempt: Sequence[float],
    mismatch_penalty: float = 0.0,
) -> float:
    """
    Compare two per-stroke share patterns position by position.

    The i-th example stroke is compared with the i-th attempt stroke over
    the shorter of the two patterns. Each stroke one pattern has beyond the
    other adds mismatch_penalty to the total difference.

    Returns:
        Similarity from 0.0 to 1.0, 0.0 if either pattern is empty
    """
    common = min(len(example), len(attempt))
    if common == 0:
        return 0.0

    total_difference = sum(abs(example[i] - attempt[i]) for i in range(common))
    total_difference += abs(len(example) - len(attempt)) * mismatch_penalty

    return max(0.0, 1.0 - total_difference / common)


class StrokeComparator:
    """
    Scores stroke structure similarity between example and attempt.

    Combines:
    - Count similarity (50%): how close the number of strokes is
    - Length similarity (50%): how close each stroke's share of total length is

    Usage:
        comparator = StrokeComparator()
        score = comparator.compare(example, attempt)
    """

    WEIGHTS = {
        "count": 0.5,
        "length": 0.5,
    }

    DEFAULT_MISMATCH_PENALTY = 0.1

    def __init__(self, mismatch_penalty: float = DEFAULT_MISMATCH_PENALTY):
        """
        Args:
            mismatch_penalty: Length-pattern penalty per missing or extra stroke
        """
        self.mismatch_penalty = mismatch_penalty

    def compare(self, example: Drawing, attempt: Drawing) -> float:
        """Combined stroke score (0.0 to 1.0)."""
        count = self.count_similarity(example, attempt)
        length = self.length_similarity(example, attempt)

        score = count * self.WEIGHTS["count"] + length * self.WEIGHTS["length"]
        logger.debug(f"Stroke score {score:.3f} (count={count:.3f}, length={length:.3f})")
        return score

    @staticmethod
    def count_similarity(example: Drawing, attempt: Drawing) -> float:
        """How close the stroke counts are; 1.0 when both are empty."""
        example_count = len(example.strokes)
        attempt_count = len(attempt.strokes)

        most = max(example_count, attempt_count)
        if most == 0:
            return 1.0

        return max(0.0, 1.0 - abs(example_count - attempt_count) / most)

    def length_similarity(self, example: Drawing, attempt: Drawing) -> float:
        """How close the relative stroke lengths are; 0.0 if either is empty."""
        if example.is_empty or attempt.is_empty:
            return 0.0

        return compare_patterns(
            self.relative_lengths(example),
            self.relative_lengths(attempt),
            mismatch_penalty=self.mismatch_penalty,
        )

    @staticmethod
    def relative_lengths(drawing: Drawing) -> list[float]:
        """Each stroke's length as a fraction of the drawing's total length."""
        return relative_shares([stroke.length for stroke in drawing.strokes])
