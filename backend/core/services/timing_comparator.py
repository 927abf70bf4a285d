"""
Timing Comparator Service

Compares the rhythm of an attempt with the example: overall pace and how
time was split between strokes.
"""

import logging
import math

from ..domain.drawing import Drawing
from .stroke_comparator import compare_patterns, relative_shares

logger = logging.getLogger(__name__)


class TimingComparator:
    """
    Scores timing similarity between example and attempt.

    Combines:
    - Ratio score (40%): total drawing time, on a log-symmetric bell curve
      so drawing twice as fast and twice as slow score the same
    - Pattern score (60%): each stroke's share of the summed stroke time

    Either part falls back to a neutral 0.5 when it can't be measured
    (no recorded time, or fewer than two strokes to form a rhythm).
    """

    WEIGHTS = {
        "ratio": 0.4,
        "pattern": 0.6,
    }

    NEUTRAL_SCORE = 0.5

    def compare(self, example: Drawing, attempt: Drawing) -> float:
        """Combined timing score (0.0 to 1.0)."""
        ratio = self.ratio_score(example, attempt)
        pattern = self.pattern_score(example, attempt)

        score = ratio * self.WEIGHTS["ratio"] + pattern * self.WEIGHTS["pattern"]
        logger.debug(f"Timing score {score:.3f} (ratio={ratio:.3f}, pattern={pattern:.3f})")
        return score

    def ratio_score(self, example: Drawing, attempt: Drawing) -> float:
        """
        Score the attempt/example total time ratio.

        Peaks at 1.0 for equal times: exp(-(ln ratio)^2).
        """
        if example.total_time <= 0 or attempt.total_time <= 0:
            return self.NEUTRAL_SCORE

        return self.ratio_to_score(attempt.total_time / example.total_time)

    @staticmethod
    def ratio_to_score(ratio: float) -> float:
        """Bell curve over log(ratio); 0.0 for non-positive ratios."""
        if ratio <= 0 or not math.isfinite(ratio):
            return 0.0
        return math.exp(-math.log(ratio) ** 2)

    def pattern_score(self, example: Drawing, attempt: Drawing) -> float:
        """Compare relative stroke durations position by position."""
        if len(example.strokes) < 2 or len(attempt.strokes) < 2:
            return self.NEUTRAL_SCORE

        return compare_patterns(
            self.relative_durations(example),
            self.relative_durations(attempt),
        )

    @staticmethod
    def relative_durations(drawing: Drawing) -> list[float]:
        """Each stroke's duration as a fraction of the summed durations."""
        return relative_shares([stroke.duration for stroke in drawing.strokes])
