"""
Domain Models

Pure data structures representing drawing practice concepts.
No external dependencies - just Python dataclasses and enums.
"""

from .drawing import Point, Stroke, Drawing, BoxSize
from .score import FeedbackBand, ScoreCategories, ScoreBreakdown, ScoreResult
from .exercise import Exercise
from .errors import (
    StrokeCoachError,
    InputError,
    CaptureError,
    ReplayError,
    ExerciseNotFoundError,
    ExerciseFullError,
)

__all__ = [
    "Point",
    "Stroke",
    "Drawing",
    "BoxSize",
    "FeedbackBand",
    "ScoreCategories",
    "ScoreBreakdown",
    "ScoreResult",
    "Exercise",
    "StrokeCoachError",
    "InputError",
    "CaptureError",
    "ReplayError",
    "ExerciseNotFoundError",
    "ExerciseFullError",
]
