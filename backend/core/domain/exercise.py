"""
Exercise Domain Model

An exercise pairs an example drawing with the learner's attempts at it
and the best score reached so far.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .drawing import Drawing
from .score import ScoreResult


@dataclass
class Exercise:
    """
    A practice exercise.

    Attributes:
        id: Unique identifier
        name: Display name
        created_at: When the exercise was created
        example: The reference drawing the learner copies
        attempts: The learner's attempts, oldest first
        best_score: Highest scoring result so far, None before the first score
    """
    id: str
    name: str
    created_at: datetime
    example: Drawing
    attempts: list[Drawing] = field(default_factory=list)
    best_score: Optional[ScoreResult] = None

    @property
    def latest_attempt(self) -> Optional[Drawing]:
        return self.attempts[-1] if self.attempts else None
