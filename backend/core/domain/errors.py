"""
Domain Errors

Exceptions raised by the scoring engine and its collaborators.
"""


class StrokeCoachError(Exception):
    """Base class for all StrokeCoach errors."""


class InputError(StrokeCoachError, ValueError):
    """Scoring was requested without anything to score."""


class CaptureError(StrokeCoachError):
    """Stroke capture events arrived out of sequence."""


class ReplayError(StrokeCoachError):
    """A drawing cannot be replayed."""


class ExerciseNotFoundError(StrokeCoachError, KeyError):
    """No exercise exists with the requested id."""

    def __init__(self, exercise_id: str):
        super().__init__(exercise_id)
        self.exercise_id = exercise_id

    def __str__(self) -> str:
        return f"Exercise with ID {self.exercise_id} not found"


class ExerciseFullError(StrokeCoachError):
    """An exercise already holds its maximum number of attempts."""
