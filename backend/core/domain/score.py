"""
Score Domain Models

Data structures for the result of comparing an attempt against an example
drawing: star ratings per category, the overall 0-100 score, and the
feedback message shown to the learner.
"""

from dataclasses import dataclass
from enum import Enum


class FeedbackBand(Enum):
    """
    Feedback tiers selected by total score.

    Each band has a minimum total score (inclusive):
    - EXCELLENT: 90+
    - VERY_GOOD: 75+
    - GOOD: 60+
    - FAIR: 40+
    - NEEDS_WORK: everything below
    """
    EXCELLENT = "excellent"
    VERY_GOOD = "very_good"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_WORK = "needs_work"

    @classmethod
    def for_score(cls, total_score: int) -> "FeedbackBand":
        """Pick the band for a 0-100 score."""
        if total_score >= 90:
            return cls.EXCELLENT
        elif total_score >= 75:
            return cls.VERY_GOOD
        elif total_score >= 60:
            return cls.GOOD
        elif total_score >= 40:
            return cls.FAIR
        else:
            return cls.NEEDS_WORK


@dataclass(frozen=True)
class ScoreCategories:
    """
    Star ratings (1-5) for each scoring category.
    """
    accuracy: int
    strokes: int
    timing: int
    overall: int


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    Raw sub-scores (0.0 to 1.0) behind a ScoreResult.

    Attributes:
        path_similarity: Shape match of normalized drawings
        constraint_adherence: Fraction of attempt points inside the constraint box
        accuracy: Weighted path similarity and constraint adherence
        stroke_count: How close the stroke counts are
        stroke_length: How close the relative stroke lengths are
        strokes: Weighted stroke count and stroke length
        timing_ratio: How close the total drawing times are
        timing_pattern: How close the relative stroke durations are
        timing: Weighted timing ratio and timing pattern
    """
    path_similarity: float
    constraint_adherence: float
    accuracy: float
    stroke_count: float
    stroke_length: float
    strokes: float
    timing_ratio: float
    timing_pattern: float
    timing: float


@dataclass(frozen=True)
class ScoreResult:
    """
    Complete score for one attempt.

    Attributes:
        total_score: 0-100 rating
        categories: Star ratings by category
        feedback: Encouragement message for the learner
        timestamp: When the score was calculated (ms since epoch)
    """
    total_score: int
    categories: ScoreCategories
    feedback: str
    timestamp: int

    @property
    def band(self) -> FeedbackBand:
        """Feedback band this score falls in."""
        return FeedbackBand.for_score(self.total_score)
