"""
Score API Schemas

Pydantic models for scoring and exercise API requests and responses.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from config import settings
from core.domain.score import ScoreBreakdown, ScoreResult

from .drawing import BoxSizeSchema, DrawingSchema


class FeedbackBandEnum(str, Enum):
    """Feedback tiers for API."""
    EXCELLENT = "excellent"
    VERY_GOOD = "very_good"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_WORK = "needs_work"


class ScoreCategoriesSchema(BaseModel):
    """
    Star ratings by category.
    """
    accuracy: int = Field(..., ge=1, le=5, description="Shape accuracy stars")
    strokes: int = Field(..., ge=1, le=5, description="Stroke structure stars")
    timing: int = Field(..., ge=1, le=5, description="Timing stars")
    overall: int = Field(..., ge=1, le=5, description="Overall stars")


class ScoreResultSchema(BaseModel):
    """
    Complete score for one attempt.
    """
    total_score: int = Field(..., ge=0, le=100, description="Score out of 100")
    categories: ScoreCategoriesSchema = Field(..., description="Star ratings")
    feedback: str = Field(..., description="Feedback message")
    band: FeedbackBandEnum = Field(..., description="Feedback tier")
    timestamp: int = Field(..., description="When the score was calculated (ms since epoch)")

    @classmethod
    def from_domain(cls, result: ScoreResult) -> "ScoreResultSchema":
        return cls(
            total_score=result.total_score,
            categories=ScoreCategoriesSchema(
                accuracy=result.categories.accuracy,
                strokes=result.categories.strokes,
                timing=result.categories.timing,
                overall=result.categories.overall,
            ),
            feedback=result.feedback,
            band=FeedbackBandEnum(result.band.value),
            timestamp=result.timestamp,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "total_score": 92,
                "categories": {"accuracy": 5, "strokes": 5, "timing": 4, "overall": 5},
                "feedback": "Excellent work! Your drawing is spot on!",
                "band": "excellent",
                "timestamp": 1704067200000
            }
        }


class ScoreBreakdownSchema(BaseModel):
    """
    Raw sub-scores (0-1) behind a score.
    """
    path_similarity: float = Field(..., ge=0)
    constraint_adherence: float = Field(..., ge=0)
    accuracy: float = Field(..., ge=0)
    stroke_count: float = Field(..., ge=0)
    stroke_length: float = Field(..., ge=0)
    strokes: float = Field(..., ge=0)
    timing_ratio: float = Field(..., ge=0)
    timing_pattern: float = Field(..., ge=0)
    timing: float = Field(..., ge=0)

    @classmethod
    def from_domain(cls, breakdown: ScoreBreakdown) -> "ScoreBreakdownSchema":
        return cls(
            path_similarity=breakdown.path_similarity,
            constraint_adherence=breakdown.constraint_adherence,
            accuracy=breakdown.accuracy,
            stroke_count=breakdown.stroke_count,
            stroke_length=breakdown.stroke_length,
            strokes=breakdown.strokes,
            timing_ratio=breakdown.timing_ratio,
            timing_pattern=breakdown.timing_pattern,
            timing=breakdown.timing,
        )


class ScoreRequest(BaseModel):
    """
    Request to score attempts against an example.

    Only the last attempt is scored.
    """
    example: DrawingSchema = Field(..., description="Reference drawing")
    attempts: List[DrawingSchema] = Field(
        ..., max_length=settings.max_attempts, description="Learner attempts, oldest first"
    )
    constraint_boxes: Optional[List[Optional[BoxSizeSchema]]] = Field(
        None, max_length=settings.max_attempts, description="Constraint box per attempt, by position"
    )
    seed: Optional[int] = Field(None, description="Seed for reproducible feedback selection")


class ScoreResponse(BaseModel):
    """
    Score plus the sub-scores it was built from.
    """
    result: ScoreResultSchema
    breakdown: ScoreBreakdownSchema


# =============================================================================
# Exercises
# =============================================================================

class ExerciseCreateRequest(BaseModel):
    """
    Request to create an exercise from an example drawing.
    """
    name: str = Field(..., min_length=1, max_length=100, description="Exercise name")
    example: DrawingSchema = Field(..., description="Reference drawing")


class ExerciseSummarySchema(BaseModel):
    """
    Exercise listing entry.
    """
    id: str = Field(..., description="Unique exercise ID")
    name: str = Field(..., description="Exercise name")
    created_at: datetime = Field(..., description="When the exercise was created")
    attempt_count: int = Field(..., ge=0, description="Attempts recorded so far")
    best_score: Optional[ScoreResultSchema] = Field(None, description="Highest score so far")


class ExerciseResponse(ExerciseSummarySchema):
    """
    Full exercise including drawings.
    """
    example: DrawingSchema = Field(..., description="Reference drawing")
    attempts: List[DrawingSchema] = Field(default_factory=list, description="Learner attempts")


class AttemptRequest(BaseModel):
    """
    A finished attempt drawing.
    """
    attempt: DrawingSchema = Field(..., description="Attempt drawing")


class AttemptResponse(BaseModel):
    """
    Result of recording an attempt.
    """
    exercise_id: str
    attempt_number: int = Field(..., ge=1, description="1-based attempt number")
    attempts_remaining: int = Field(..., ge=0)
    next_constraint_box: Optional[BoxSizeSchema] = Field(
        None, description="Constraint box for the next attempt, null when none are left"
    )


class ExerciseScoreRequest(BaseModel):
    """
    Options for scoring a stored exercise.
    """
    seed: Optional[int] = Field(None, description="Seed for reproducible feedback selection")
    use_constraint_boxes: bool = Field(True, description="Apply the shrinking per-attempt boxes")


class ExerciseScoreResponse(ScoreResponse):
    """
    Score for a stored exercise.
    """
    is_best_score: bool = Field(..., description="Whether this beat the previous best")
    best_score: ScoreResultSchema = Field(..., description="Best score after this one")


class HealthResponse(BaseModel):
    """
    Health check response.
    """
    status: str = Field("healthy", description="Service status")
    version: str = Field(..., description="API version")
