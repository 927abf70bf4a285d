"""
Exercise Store Service

In-memory storage for exercises, their attempts, and best scores.

Keeping the highest score is the store's job, not the scoring engine's:
the engine returns a fresh ScoreResult per call and the store decides
whether it beats the one on record.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Optional

from ..domain.drawing import BoxSize, Drawing
from ..domain.errors import ExerciseFullError, ExerciseNotFoundError
from ..domain.exercise import Exercise
from ..domain.score import ScoreResult

logger = logging.getLogger(__name__)


def constraint_box_for_attempt(attempt_number: int, base_size: float = 300.0) -> BoxSize:
    """
    Constraint box for the n-th attempt (1-based).

    The box shrinks by 15% of the base size per attempt, down to 40%:
    100%, 85%, 70%, 55%, 40%, 40%, ...
    """
    scale = max(0.4, 1 - (max(1, attempt_number) - 1) * 0.15)
    return BoxSize(width=base_size * scale, height=base_size * scale)


class ExerciseStore:
    """
    Thread-safe in-memory exercise repository.

    Usage:
        store = ExerciseStore()
        exercise = store.create("Letter A", example_drawing)
        store.record_attempt(exercise.id, attempt_drawing)
        is_best = store.save_result(exercise.id, score)
    """

    def __init__(self, max_attempts: int = 5):
        self.max_attempts = max_attempts
        self._exercises: dict[str, Exercise] = {}
        self._lock = threading.Lock()

    def create(self, name: str, example: Drawing) -> Exercise:
        """Store a new exercise with no attempts."""
        exercise = Exercise(
            id=str(uuid.uuid4()),
            name=name,
            created_at=datetime.now(),
            example=example,
        )
        with self._lock:
            self._exercises[exercise.id] = exercise

        logger.info(f"Created exercise {exercise.id} ({name!r})")
        return exercise

    def list_all(self) -> list[Exercise]:
        """All exercises, oldest first."""
        with self._lock:
            return sorted(self._exercises.values(), key=lambda e: e.created_at)

    def get(self, exercise_id: str) -> Exercise:
        """
        Raises:
            ExerciseNotFoundError: Unknown id
        """
        with self._lock:
            return self._get(exercise_id)

    def delete(self, exercise_id: str) -> None:
        with self._lock:
            self._get(exercise_id)
            del self._exercises[exercise_id]
        logger.info(f"Deleted exercise {exercise_id}")

    def record_attempt(self, exercise_id: str, attempt: Drawing) -> int:
        """
        Append an attempt.

        Returns:
            The attempt number (1-based)

        Raises:
            ExerciseFullError: The exercise already has max_attempts attempts
        """
        with self._lock:
            exercise = self._get(exercise_id)
            if len(exercise.attempts) >= self.max_attempts:
                raise ExerciseFullError(
                    f"Exercise {exercise_id} already has {self.max_attempts} attempts"
                )
            exercise.attempts.append(attempt)
            return len(exercise.attempts)

    def clear_attempts(self, exercise_id: str) -> None:
        """Start a fresh round; the best score is kept."""
        with self._lock:
            self._get(exercise_id).attempts = []

    def save_result(self, exercise_id: str, score: ScoreResult) -> bool:
        """
        Keep score if it beats the best on record.

        Returns:
            True if score became the new best
        """
        with self._lock:
            exercise = self._get(exercise_id)
            best: Optional[ScoreResult] = exercise.best_score
            is_best = best is None or score.total_score > best.total_score
            if is_best:
                exercise.best_score = score

        if is_best:
            logger.info(f"New best score {score.total_score} for exercise {exercise_id}")
        return is_best

    def _get(self, exercise_id: str) -> Exercise:
        exercise = self._exercises.get(exercise_id)
        if exercise is None:
            raise ExerciseNotFoundError(exercise_id)
        return exercise
