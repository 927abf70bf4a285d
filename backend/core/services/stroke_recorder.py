"""
Stroke Recorder Service

Turns a sequence of pen-down / move / pen-up events into a Drawing.

Only a single contact point is tracked: one stroke can be active at a
time, and the caller is responsible for delivering start, continue and end
in order. Time comes from an injected clock so recordings can be made
deterministic (or driven by client-side timestamps).
"""

import logging
import time
from typing import Callable, Optional

from ..domain.drawing import Drawing, Point, Stroke
from ..domain.errors import CaptureError

logger = logging.getLogger(__name__)


class DrawingObserver:
    """
    Receives notifications while a drawing is recorded or replayed.

    Subclass and override the hooks you care about; the defaults do nothing.
    """

    def on_stroke_started(self, stroke: Stroke) -> None:
        pass

    def on_point_added(self, point: Point) -> None:
        pass

    def on_stroke_completed(self, stroke: Stroke) -> None:
        pass


class StrokeRecorder:
    """
    Records strokes from pointer input.

    Usage:
        recorder = StrokeRecorder(width=800, height=600)
        recorder.enable()

        recorder.start_stroke(10, 10)
        recorder.continue_stroke(20, 25)
        recorder.end_stroke()

        drawing = recorder.get_drawing()
    """

    def __init__(
        self,
        width: float,
        height: float,
        clock: Optional[Callable[[], int]] = None,
        observer: Optional[DrawingObserver] = None,
        stroke_color: str = "#000000",
        stroke_width: float = 3.0,
        max_points: Optional[int] = None,
    ):
        """
        Args:
            width: Capture surface width
            height: Capture surface height
            clock: Returns the current time in ms
            observer: Notified when strokes start, grow and complete
            stroke_color: Color given to new strokes
            stroke_width: Width given to new strokes
            max_points: Most points one drawing may hold, None for no limit
        """
        self.width = width
        self.height = height
        self.clock = clock or (lambda: int(time.time() * 1000))
        self.observer = observer or DrawingObserver()
        self.stroke_color = stroke_color
        self.stroke_width = stroke_width
        self.max_points = max_points

        self.is_enabled = False
        self._strokes: list[Stroke] = []
        self._current: Optional[Stroke] = None
        self._stroke_counter = 0
        self._start_time = 0
        self._end_time = 0

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def is_drawing(self) -> bool:
        """Whether a stroke is in progress."""
        return self._current is not None

    @property
    def stroke_count(self) -> int:
        return len(self._strokes)

    @property
    def point_count(self) -> int:
        """Points recorded so far, including the stroke in progress."""
        count = sum(len(s.points) for s in self._strokes)
        if self._current is not None:
            count += len(self._current.points)
        return count

    def enable(self) -> None:
        self.is_enabled = True

    def disable(self) -> None:
        """Stop accepting input; an unfinished stroke is dropped."""
        self.is_enabled = False
        self._current = None

    def reset(self) -> None:
        """Discard everything recorded so far."""
        self._strokes = []
        self._current = None
        self._stroke_counter = 0
        self._start_time = 0
        self._end_time = 0

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def start_stroke(self, x: float, y: float, pressure: float = 1.0) -> Optional[Stroke]:
        """
        Begin a new stroke at (x, y).

        Returns:
            The new stroke, or None while the recorder is disabled

        Raises:
            CaptureError: Another stroke is still in progress, or the
                          drawing already holds max_points points
        """
        if not self.is_enabled:
            return None
        if self._current is not None:
            raise CaptureError(
                f"Stroke {self._current.id} is still in progress; end it before starting another"
            )
        self._check_capacity()

        now = self.clock()
        if not self._strokes:
            self._start_time = now

        self._current = Stroke(
            id=self._stroke_counter,
            points=[Point(x=x, y=y, timestamp=now, pressure=pressure)],
            start_time=now,
            end_time=now,
            color=self.stroke_color,
            width=self.stroke_width,
        )
        self._stroke_counter += 1

        self.observer.on_stroke_started(self._current)
        return self._current

    def continue_stroke(self, x: float, y: float, pressure: float = 1.0) -> Optional[Point]:
        """
        Add a point to the active stroke.

        Ignored (returns None) when disabled or when no stroke is active.

        Raises:
            CaptureError: The drawing already holds max_points points
        """
        if not self.is_enabled or self._current is None:
            return None
        self._check_capacity()

        # Keep timestamps non-decreasing even if the clock steps backwards
        now = max(self.clock(), self._current.points[-1].timestamp)
        point = Point(x=x, y=y, timestamp=now, pressure=pressure)
        self._current.points.append(point)

        self.observer.on_point_added(point)
        return point

    def end_stroke(self) -> Optional[Stroke]:
        """
        Finish the active stroke.

        Ignored (returns None) when no stroke is active.
        """
        if self._current is None:
            logger.debug("end_stroke called with no active stroke")
            return None

        stroke = self._current
        stroke.end_time = max(self.clock(), stroke.points[-1].timestamp)
        self._end_time = stroke.end_time

        self._strokes.append(stroke)
        self._current = None

        self.observer.on_stroke_completed(stroke)
        return stroke

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def get_drawing(self) -> Drawing:
        """
        Snapshot of the completed strokes.

        A stroke still in progress is not included.
        """
        strokes = [
            Stroke(
                id=s.id,
                points=list(s.points),
                start_time=s.start_time,
                end_time=s.end_time,
                color=s.color,
                width=s.width,
            )
            for s in self._strokes
        ]
        total_time = self._end_time - self._start_time if strokes else 0

        return Drawing(
            strokes=strokes,
            total_time=max(0, total_time),
            width=self.width,
            height=self.height,
            created=self.clock(),
        )

    def _check_capacity(self) -> None:
        if self.max_points is not None and self.point_count >= self.max_points:
            raise CaptureError(f"Drawing is full ({self.max_points} points)")
