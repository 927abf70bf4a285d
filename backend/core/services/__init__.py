"""
Services Layer

Business logic services for drawing practice scoring.
These services operate on the domain models and hold no state between scoring calls.
"""

from .shape_matcher import ShapeMatcher
from .stroke_comparator import StrokeComparator
from .timing_comparator import TimingComparator
from .score_calculator import ScoreCalculator, score_to_stars
from .stroke_recorder import StrokeRecorder, DrawingObserver
from .replay_scheduler import FrameScheduler, DrawingReplayer, ManualClock, ReplayEvent, build_timeline
from .exercise_store import ExerciseStore, constraint_box_for_attempt

__all__ = [
    "ShapeMatcher",
    "StrokeComparator",
    "TimingComparator",
    "ScoreCalculator",
    "score_to_stars",
    "StrokeRecorder",
    "DrawingObserver",
    "FrameScheduler",
    "DrawingReplayer",
    "ManualClock",
    "ReplayEvent",
    "build_timeline",
    "ExerciseStore",
    "constraint_box_for_attempt",
]
