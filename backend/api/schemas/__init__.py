"""
API Schemas

Pydantic models for request/response validation.
"""

from .drawing import (
    PointSchema,
    StrokeSchema,
    DrawingSchema,
    BoxSizeSchema,
    WebSocketMessageType,
    WebSocketMessage,
    SessionStartMessage,
    StrokePointMessage,
    ReplayEventKind,
    ReplayEventSchema,
    ReplayResponse,
)

from .score import (
    FeedbackBandEnum,
    ScoreCategoriesSchema,
    ScoreResultSchema,
    ScoreBreakdownSchema,
    ScoreRequest,
    ScoreResponse,
    ExerciseCreateRequest,
    ExerciseSummarySchema,
    ExerciseResponse,
    AttemptRequest,
    AttemptResponse,
    ExerciseScoreRequest,
    ExerciseScoreResponse,
    HealthResponse,
)

__all__ = [
    # Drawing schemas
    "PointSchema",
    "StrokeSchema",
    "DrawingSchema",
    "BoxSizeSchema",
    "WebSocketMessageType",
    "WebSocketMessage",
    "SessionStartMessage",
    "StrokePointMessage",
    "ReplayEventKind",
    "ReplayEventSchema",
    "ReplayResponse",
    # Score schemas
    "FeedbackBandEnum",
    "ScoreCategoriesSchema",
    "ScoreResultSchema",
    "ScoreBreakdownSchema",
    "ScoreRequest",
    "ScoreResponse",
    "ExerciseCreateRequest",
    "ExerciseSummarySchema",
    "ExerciseResponse",
    "AttemptRequest",
    "AttemptResponse",
    "ExerciseScoreRequest",
    "ExerciseScoreResponse",
    "HealthResponse",
]
