"""
REST API Routes

FastAPI routes for drawing practice scoring.
Handles HTTP requests for scoring attempts and managing exercises.
"""

import logging
import random
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from .schemas import (
    BoxSizeSchema,
    DrawingSchema,
    ScoreRequest,
    ScoreResponse,
    ScoreResultSchema,
    ScoreBreakdownSchema,
    ExerciseCreateRequest,
    ExerciseSummarySchema,
    ExerciseResponse,
    AttemptRequest,
    AttemptResponse,
    ExerciseScoreRequest,
    ExerciseScoreResponse,
    HealthResponse,
    ReplayEventSchema,
    ReplayResponse,
)
from config import settings
from core.domain import Exercise, InputError, ReplayError, ExerciseNotFoundError, ExerciseFullError
from core.services import ScoreCalculator, ExerciseStore, build_timeline, constraint_box_for_attempt

# Configure logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()

# Exercises live for the lifetime of the process
store = ExerciseStore(max_attempts=settings.max_attempts)


def get_calculator(seed: Optional[int] = None) -> ScoreCalculator:
    """Build a score calculator from the configured scoring constants."""
    return ScoreCalculator(
        rng=random.Random(seed),
        path_decay=settings.path_decay,
        mismatch_penalty=settings.stroke_mismatch_penalty,
    )


# =============================================================================
# Health Check
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health check endpoint"
)
async def health_check() -> HealthResponse:
    """
    Check if the API is running.

    Returns:
        Health status and version information
    """
    return HealthResponse(status="healthy", version=settings.version)


# =============================================================================
# Scoring
# =============================================================================

@router.post(
    "/score",
    response_model=ScoreResponse,
    tags=["Scoring"],
    summary="Score the final attempt against an example"
)
async def score_attempts(request: ScoreRequest) -> ScoreResponse:
    """
    Score a learner's final attempt against an example drawing.

    Only the last element of `attempts` is scored; earlier attempts only
    decide which constraint box applies.

    Args:
        request: Example, attempts, optional constraint boxes and seed

    Returns:
        Star ratings, total score, feedback and the raw sub-scores
    """
    example = request.example.to_domain()
    attempts = [a.to_domain() for a in request.attempts]
    boxes = (
        [b.to_domain() if b is not None else None for b in request.constraint_boxes]
        if request.constraint_boxes is not None else None
    )

    calculator = get_calculator(request.seed)
    try:
        breakdown = calculator.calculate_breakdown(example, attempts, boxes)
    except InputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    result = calculator.compose(breakdown)
    logger.info(f"Scored attempt {len(attempts)}: {result.total_score}/100")

    return ScoreResponse(
        result=ScoreResultSchema.from_domain(result),
        breakdown=ScoreBreakdownSchema.from_domain(breakdown),
    )


@router.get(
    "/constraint-box/{attempt_number}",
    response_model=BoxSizeSchema,
    tags=["Scoring"],
    summary="Constraint box size for an attempt"
)
async def get_constraint_box(attempt_number: int) -> BoxSizeSchema:
    """
    Get the constraint box for the n-th attempt (1-based).

    Boxes shrink with each attempt, down to 40% of the base size.
    """
    if attempt_number < 1:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                            detail="attempt_number must be at least 1")
    box = constraint_box_for_attempt(attempt_number, base_size=settings.constraint_base_size)
    return BoxSizeSchema.from_domain(box)


# =============================================================================
# Exercises
# =============================================================================

@router.post(
    "/exercises",
    response_model=ExerciseResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Exercises"],
    summary="Create an exercise"
)
async def create_exercise(request: ExerciseCreateRequest) -> ExerciseResponse:
    """
    Create an exercise from an example drawing.
    """
    if not request.example.strokes:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                            detail="Example drawing has no strokes")

    exercise = store.create(request.name, request.example.to_domain())
    return _convert_exercise_to_response(exercise)


@router.get(
    "/exercises",
    response_model=List[ExerciseSummarySchema],
    tags=["Exercises"],
    summary="List exercises"
)
async def list_exercises() -> List[ExerciseSummarySchema]:
    return [_convert_exercise_to_summary(e) for e in store.list_all()]


@router.get(
    "/exercises/{exercise_id}",
    response_model=ExerciseResponse,
    tags=["Exercises"],
    summary="Get an exercise"
)
async def get_exercise(exercise_id: str) -> ExerciseResponse:
    try:
        return _convert_exercise_to_response(store.get(exercise_id))
    except ExerciseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/exercises/{exercise_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Exercises"],
    summary="Delete an exercise"
)
async def delete_exercise(exercise_id: str) -> None:
    try:
        store.delete(exercise_id)
    except ExerciseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/exercises/{exercise_id}/attempts",
    response_model=AttemptResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Exercises"],
    summary="Record an attempt"
)
async def record_attempt(exercise_id: str, request: AttemptRequest) -> AttemptResponse:
    """
    Record a finished attempt at an exercise.

    Returns:
        The attempt number and the constraint box for the next attempt
    """
    try:
        attempt_number = store.record_attempt(exercise_id, request.attempt.to_domain())
    except ExerciseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ExerciseFullError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    remaining = store.max_attempts - attempt_number
    next_box = None
    if remaining > 0:
        next_box = BoxSizeSchema.from_domain(
            constraint_box_for_attempt(attempt_number + 1, base_size=settings.constraint_base_size)
        )

    return AttemptResponse(
        exercise_id=exercise_id,
        attempt_number=attempt_number,
        attempts_remaining=remaining,
        next_constraint_box=next_box,
    )


@router.delete(
    "/exercises/{exercise_id}/attempts",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Exercises"],
    summary="Start a new round of attempts"
)
async def clear_attempts(exercise_id: str) -> None:
    """
    Discard recorded attempts so the learner can start a new round.

    The best score is kept.
    """
    try:
        store.clear_attempts(exercise_id)
    except ExerciseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    logger.info(f"Started a new round for exercise {exercise_id}")


@router.post(
    "/exercises/{exercise_id}/score",
    response_model=ExerciseScoreResponse,
    tags=["Exercises"],
    summary="Score an exercise's latest attempt"
)
async def score_exercise(
    exercise_id: str,
    request: Optional[ExerciseScoreRequest] = None,
) -> ExerciseScoreResponse:
    """
    Score the latest recorded attempt and keep it if it is the best yet.

    By default each attempt's constraint box shrinks the way it did while
    the attempt was drawn.
    """
    options = request or ExerciseScoreRequest()

    try:
        exercise = store.get(exercise_id)
    except ExerciseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    attempts = list(exercise.attempts)
    boxes = None
    if options.use_constraint_boxes:
        boxes = [
            constraint_box_for_attempt(n, base_size=settings.constraint_base_size)
            for n in range(1, len(attempts) + 1)
        ]

    calculator = get_calculator(options.seed)
    try:
        breakdown = calculator.calculate_breakdown(exercise.example, attempts, boxes)
    except InputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    result = calculator.compose(breakdown)
    is_best = store.save_result(exercise_id, result)
    best = store.get(exercise_id).best_score or result

    return ExerciseScoreResponse(
        result=ScoreResultSchema.from_domain(result),
        breakdown=ScoreBreakdownSchema.from_domain(breakdown),
        is_best_score=is_best,
        best_score=ScoreResultSchema.from_domain(best),
    )


@router.get(
    "/exercises/{exercise_id}/replay",
    response_model=ReplayResponse,
    tags=["Exercises"],
    summary="Replay timeline for an exercise's example"
)
async def replay_example(
    exercise_id: str,
    frame_ms: float = Query(16.0, gt=0, le=1000, description="Renderer frame length (ms)"),
) -> ReplayResponse:
    """
    Animate the example drawing offline and return the timeline.

    The frontend plays the events back on its own clock to show the
    learner how the example is drawn, stroke by stroke.
    """
    try:
        exercise = store.get(exercise_id)
    except ExerciseNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    try:
        events = build_timeline(
            exercise.example,
            point_interval_ms=settings.replay_point_interval_ms,
            stroke_pause_ms=settings.replay_stroke_pause_ms,
            frame_ms=frame_ms,
        )
    except ReplayError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return ReplayResponse(
        exercise_id=exercise_id,
        duration_ms=events[-1].at_ms,
        events=[ReplayEventSchema.from_domain(e) for e in events],
    )


# =============================================================================
# Helper Functions
# =============================================================================

def _convert_exercise_to_summary(exercise: Exercise) -> ExerciseSummarySchema:
    """Convert domain Exercise to a listing entry."""
    return ExerciseSummarySchema(
        id=exercise.id,
        name=exercise.name,
        created_at=exercise.created_at,
        attempt_count=len(exercise.attempts),
        best_score=(
            ScoreResultSchema.from_domain(exercise.best_score)
            if exercise.best_score else None
        ),
    )


def _convert_exercise_to_response(exercise: Exercise) -> ExerciseResponse:
    """Convert domain Exercise to API response schema."""
    summary = _convert_exercise_to_summary(exercise)
    return ExerciseResponse(
        **summary.model_dump(),
        example=DrawingSchema.from_domain(exercise.example),
        attempts=[DrawingSchema.from_domain(a) for a in exercise.attempts],
    )
