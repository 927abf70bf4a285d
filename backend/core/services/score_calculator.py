"""
Score Calculator Service

High-level service that runs every comparator over an example drawing and
the learner's final attempt, and composes the results into star ratings,
an overall score, and a feedback message.

This is the main entry point for scoring drawings.
"""

import logging
import math
import random
import time
from typing import Callable, Optional, Sequence

from ..domain.drawing import BoxSize, Drawing
from ..domain.errors import InputError
from ..domain.score import (
    FeedbackBand,
    ScoreBreakdown,
    ScoreCategories,
    ScoreResult,
)
from .shape_matcher import ShapeMatcher
from .stroke_comparator import StrokeComparator
from .timing_comparator import TimingComparator

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def score_to_stars(score: float) -> int:
    """
    Convert a 0.0-1.0 score to a 1-5 star rating.

    Out-of-range scores are clamped first, so the result is always 1-5.
    """
    if not math.isfinite(score):
        score = 0.0
    clamped = max(0.0, min(1.0, score))
    return round_half_up(clamped * 4 + 1)


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


class ScoreCalculator:
    """
    Scores a learner's attempt against an example drawing.

    The calculator:
    1. Normalizes both drawings and measures path similarity
    2. Checks how well the raw attempt stayed inside its constraint box
    3. Compares stroke counts and stroke length patterns
    4. Compares total time and stroke timing patterns
    5. Weights everything into stars, a 0-100 score, and feedback

    It holds no state between calls; the same inputs and random seed always
    give the same result.

    Usage:
        calculator = ScoreCalculator(rng=random.Random(42))
        result = calculator.calculate_score(example, attempts)
        print(f"Total score: {result.total_score}")
    """

    MAX_SCORE = 100

    # Share of the total score per category
    WEIGHTS = {
        "accuracy": 0.5,
        "strokes": 0.25,
        "timing": 0.25,
    }

    # Split of the accuracy category
    ACCURACY_WEIGHTS = {
        "path": 0.75,
        "constraint": 0.25,
    }

    FEEDBACK = {
        FeedbackBand.EXCELLENT: (
            "Excellent work! Your drawing is spot on!",
            "Amazing job! Your handwriting is fantastic!",
            "Perfect! You've mastered this drawing!",
        ),
        FeedbackBand.VERY_GOOD: (
            "Very good! Your drawing looks great!",
            "Impressive work! Keep practicing!",
            "Great job! You're getting better each time!",
        ),
        FeedbackBand.GOOD: (
            "Good job! You're making progress!",
            "Nice work! Keep practicing!",
            "Well done! You're improving!",
        ),
        FeedbackBand.FAIR: (
            "Nice try! Keep practicing!",
            "Good effort! Try to follow the example more closely!",
            "Keep going! Practice makes perfect!",
        ),
        FeedbackBand.NEEDS_WORK: (
            "Keep practicing! You'll get better each time!",
            "Good start! Try to follow the example more carefully!",
            "Don't give up! Every practice helps you improve!",
        ),
    }

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], int]] = None,
        path_decay: float = ShapeMatcher.DEFAULT_PATH_DECAY,
        mismatch_penalty: float = StrokeComparator.DEFAULT_MISMATCH_PENALTY,
    ):
        """
        Initialize the score calculator.

        Args:
            rng: Random source for picking feedback phrases. Pass a seeded
                 random.Random for reproducible output.
            clock: Returns the current time in ms, used to stamp results
            path_decay: Path similarity decay constant
            mismatch_penalty: Stroke length penalty per missing/extra stroke
        """
        self.rng = rng or random.Random()
        self.clock = clock or (lambda: int(time.time() * 1000))
        self.shape_matcher = ShapeMatcher(path_decay=path_decay)
        self.stroke_comparator = StrokeComparator(mismatch_penalty=mismatch_penalty)
        self.timing_comparator = TimingComparator()

    # -------------------------------------------------------------------------
    # Main Scoring Methods
    # -------------------------------------------------------------------------

    def calculate_score(
        self,
        example: Drawing,
        attempts: Sequence[Drawing],
        constraint_boxes: Optional[Sequence[Optional[BoxSize]]] = None,
    ) -> ScoreResult:
        """
        Score the final attempt against the example.

        Args:
            example: The reference drawing
            attempts: The learner's attempts; only the last one is scored
            constraint_boxes: Optional box per attempt, by position. The box
                              matching the last attempt is applied.

        Returns:
            ScoreResult with stars and feedback

        Raises:
            InputError: attempts is empty
        """
        breakdown = self.calculate_breakdown(example, attempts, constraint_boxes)
        return self.compose(breakdown)

    def calculate_breakdown(
        self,
        example: Drawing,
        attempts: Sequence[Drawing],
        constraint_boxes: Optional[Sequence[Optional[BoxSize]]] = None,
    ) -> ScoreBreakdown:
        """
        Run every comparator and return the raw sub-scores.

        Takes the same arguments as calculate_score.
        """
        if not attempts:
            raise InputError("No attempts provided for scoring")

        final_attempt = attempts[-1]
        box = self._box_for_attempt(len(attempts), constraint_boxes)

        path_similarity = _finite(self.shape_matcher.path_similarity(
            self.shape_matcher.normalize(example),
            self.shape_matcher.normalize(final_attempt),
        ))
        constraint_adherence = _finite(
            self.shape_matcher.constraint_adherence(final_attempt, box)
        )
        accuracy = (
            path_similarity * self.ACCURACY_WEIGHTS["path"] +
            constraint_adherence * self.ACCURACY_WEIGHTS["constraint"]
        )

        stroke_count = _finite(self.stroke_comparator.count_similarity(example, final_attempt))
        stroke_length = _finite(self.stroke_comparator.length_similarity(example, final_attempt))
        strokes = (
            stroke_count * self.stroke_comparator.WEIGHTS["count"] +
            stroke_length * self.stroke_comparator.WEIGHTS["length"]
        )

        timing_ratio = _finite(self.timing_comparator.ratio_score(example, final_attempt))
        timing_pattern = _finite(self.timing_comparator.pattern_score(example, final_attempt))
        timing = (
            timing_ratio * self.timing_comparator.WEIGHTS["ratio"] +
            timing_pattern * self.timing_comparator.WEIGHTS["pattern"]
        )

        logger.debug(
            f"Sub-scores: path={path_similarity:.3f} constraint={constraint_adherence:.3f} "
            f"strokes={strokes:.3f} timing={timing:.3f}"
        )

        return ScoreBreakdown(
            path_similarity=path_similarity,
            constraint_adherence=constraint_adherence,
            accuracy=accuracy,
            stroke_count=stroke_count,
            stroke_length=stroke_length,
            strokes=strokes,
            timing_ratio=timing_ratio,
            timing_pattern=timing_pattern,
            timing=timing,
        )

    def compose(self, breakdown: ScoreBreakdown) -> ScoreResult:
        """Turn sub-scores into a total score, stars, and feedback."""
        total_score = self.calculate_total_score(
            breakdown.accuracy, breakdown.strokes, breakdown.timing
        )

        categories = ScoreCategories(
            accuracy=score_to_stars(breakdown.accuracy),
            strokes=score_to_stars(breakdown.strokes),
            timing=score_to_stars(breakdown.timing),
            overall=score_to_stars(total_score / self.MAX_SCORE),
        )

        return ScoreResult(
            total_score=total_score,
            categories=categories,
            feedback=self.generate_feedback(total_score),
            timestamp=self.clock(),
        )

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def calculate_total_score(self, accuracy: float, strokes: float, timing: float) -> int:
        """Weighted 0-100 score."""
        weighted_sum = (
            accuracy * self.WEIGHTS["accuracy"] +
            strokes * self.WEIGHTS["strokes"] +
            timing * self.WEIGHTS["timing"]
        )
        total = round_half_up(_finite(weighted_sum) * self.MAX_SCORE)
        return max(0, min(self.MAX_SCORE, total))

    def generate_feedback(self, total_score: int) -> str:
        """Pick a feedback phrase from the band matching the score."""
        options = self.FEEDBACK[FeedbackBand.for_score(total_score)]
        return self.rng.choice(options)

    @staticmethod
    def _box_for_attempt(
        attempt_count: int,
        constraint_boxes: Optional[Sequence[Optional[BoxSize]]],
    ) -> Optional[BoxSize]:
        """Constraint box for the last attempt, if one was given."""
        if not constraint_boxes or attempt_count > len(constraint_boxes):
            return None
        return constraint_boxes[attempt_count - 1]
