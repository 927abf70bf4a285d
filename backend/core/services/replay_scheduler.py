"""
Replay Scheduler Service

Frame-driven cooperative scheduling for replaying an example drawing.

A FrameScheduler is ticked once per frame. Each scheduled task gets the
time elapsed since the previous tick and reports whether it is done. The
scheduler reads time from an injected source, so tests (and offline
replays) can drive it with a ManualClock instead of wall-clock time.
"""

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..domain.drawing import Drawing, Point, Stroke
from ..domain.errors import ReplayError
from .stroke_recorder import DrawingObserver

logger = logging.getLogger(__name__)

# Receives elapsed ms since the previous tick, returns True when finished
StepFn = Callable[[float], bool]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class ManualClock:
    """A time source that only moves when told to."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


class FrameScheduler:
    """
    Runs independently scheduled per-frame tasks.

    The scheduler starts running when a task is scheduled and stops once
    no tasks remain; the first tick after a (re)start measures time from
    the moment it started.

    Usage:
        clock = ManualClock()
        scheduler = FrameScheduler(time_source=clock)
        handle = scheduler.schedule(lambda dt: True)

        clock.advance(16)
        scheduler.tick()
    """

    def __init__(self, time_source: Optional[Callable[[], float]] = None):
        """
        Args:
            time_source: Returns the current time in ms
        """
        self.time_source = time_source or _monotonic_ms
        self._tasks: dict[str, StepFn] = {}
        self._ids = itertools.count()
        self._last_tick = 0.0
        self.is_running = False

    @property
    def task_count(self) -> int:
        return len(self._tasks)

    def schedule(self, step: StepFn) -> str:
        """Add a task; returns a handle for cancel()."""
        handle = f"task_{next(self._ids)}"
        self._tasks[handle] = step
        self.start()
        return handle

    def cancel(self, handle: str) -> None:
        """Remove a task. Unknown handles are ignored."""
        self._tasks.pop(handle, None)
        if not self._tasks:
            self.stop()

    def start(self) -> None:
        if not self.is_running:
            self.is_running = True
            self._last_tick = self.time_source()

    def stop(self) -> None:
        self.is_running = False

    def tick(self) -> bool:
        """
        Advance every task by one frame.

        Tasks scheduled during the tick first run on the next tick.

        Returns:
            Whether the scheduler is still running afterwards
        """
        if not self.is_running:
            return False

        now = self.time_source()
        elapsed = now - self._last_tick
        self._last_tick = now

        for handle, step in list(self._tasks.items()):
            # Cancelled by an earlier task during this tick
            if handle not in self._tasks:
                continue
            if step(elapsed):
                self._tasks.pop(handle, None)

        if not self._tasks:
            self.stop()
        return self.is_running

    def run_until_idle(self, clock: ManualClock, frame_ms: float = 16.0, max_frames: int = 100_000) -> int:
        """
        Tick with a manual clock until no tasks remain.

        Returns:
            Number of frames ticked

        Raises:
            ReplayError: Tasks were still pending after max_frames
        """
        frames = 0
        while self.is_running:
            if frames >= max_frames:
                raise ReplayError(f"Scheduler still busy after {max_frames} frames")
            clock.advance(frame_ms)
            self.tick()
            frames += 1
        return frames


class DrawingReplayer:
    """
    Replays a drawing stroke by stroke through a FrameScheduler.

    One point is revealed every point_interval_ms, with a pause of
    stroke_pause_ms between strokes. Progress is reported to the observer
    the same way the StrokeRecorder reports live input.

    Usage:
        replayer = DrawingReplayer(scheduler, observer=renderer)
        replayer.play(example, on_finished=start_attempt)
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        observer: Optional[DrawingObserver] = None,
        point_interval_ms: float = 20.0,
        stroke_pause_ms: float = 200.0,
    ):
        self.scheduler = scheduler
        self.observer = observer or DrawingObserver()
        self.point_interval_ms = point_interval_ms
        self.stroke_pause_ms = stroke_pause_ms

        self.current_task: Optional[str] = None
        self.is_playing = False
        self._strokes: list[Stroke] = []
        self._on_finished: Optional[Callable[[], None]] = None

    def play(self, drawing: Drawing, on_finished: Optional[Callable[[], None]] = None) -> None:
        """
        Start replaying a drawing.

        Raises:
            ReplayError: The drawing has no strokes
        """
        if drawing.is_empty:
            raise ReplayError("No strokes to animate")

        self.stop()
        self._strokes = list(drawing.strokes)
        self._on_finished = on_finished
        self.is_playing = True
        self._animate_stroke(0)

    def stop(self) -> None:
        """Cancel the replay in progress, if any."""
        if self.current_task is not None:
            self.scheduler.cancel(self.current_task)
            self.current_task = None
        self.is_playing = False

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _animate_stroke(self, index: int) -> None:
        stroke = self._strokes[index]
        self.observer.on_stroke_started(stroke)

        if len(stroke.points) < 2:
            self.observer.on_stroke_completed(stroke)
            self._after_stroke(index)
            return

        remaining = stroke.points[1:]
        state = {"next": 0, "elapsed": 0.0}

        def step(elapsed: float) -> bool:
            state["elapsed"] += elapsed
            while state["elapsed"] >= self.point_interval_ms and state["next"] < len(remaining):
                self.observer.on_point_added(remaining[state["next"]])
                state["next"] += 1
                state["elapsed"] -= self.point_interval_ms

            if state["next"] >= len(remaining):
                self.observer.on_stroke_completed(stroke)
                self._after_stroke(index)
                return True
            return False

        self.current_task = self.scheduler.schedule(step)

    def _after_stroke(self, index: int) -> None:
        if index < len(self._strokes) - 1:
            self._pause_then(lambda: self._animate_stroke(index + 1))
        else:
            self._finish()

    def _pause_then(self, next_step: Callable[[], None]) -> None:
        state = {"elapsed": 0.0}

        def step(elapsed: float) -> bool:
            state["elapsed"] += elapsed
            if state["elapsed"] >= self.stroke_pause_ms:
                next_step()
                return True
            return False

        self.current_task = self.scheduler.schedule(step)

    def _finish(self) -> None:
        self.current_task = None
        self.is_playing = False
        logger.debug(f"Replay finished ({len(self._strokes)} strokes)")
        if self._on_finished is not None:
            self._on_finished()


# =============================================================================
# Timeline
# =============================================================================

@dataclass(frozen=True)
class ReplayEvent:
    """
    One observer notification from a replay.

    Attributes:
        kind: stroke_started, point_added, stroke_completed or finished
        at_ms: Replay time of the event, 0 at the start
        stroke_id: Stroke the event belongs to (None for finished)
        point: Revealed point for point_added
    """
    kind: str
    at_ms: float
    stroke_id: Optional[int] = None
    point: Optional[Point] = None


class TimelineRecorder(DrawingObserver):
    """Collects replay notifications with the clock time they happened at."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.events: list[ReplayEvent] = []
        self._stroke_id: Optional[int] = None

    def on_stroke_started(self, stroke: Stroke) -> None:
        self._stroke_id = stroke.id
        self._add("stroke_started", stroke_id=stroke.id)

    def on_point_added(self, point: Point) -> None:
        self._add("point_added", stroke_id=self._stroke_id, point=point)

    def on_stroke_completed(self, stroke: Stroke) -> None:
        self._add("stroke_completed", stroke_id=stroke.id)

    def on_finished(self) -> None:
        self._add("finished")

    def _add(self, kind: str, **fields) -> None:
        self.events.append(ReplayEvent(kind=kind, at_ms=self.clock(), **fields))


def build_timeline(
    drawing: Drawing,
    point_interval_ms: float = 20.0,
    stroke_pause_ms: float = 200.0,
    frame_ms: float = 16.0,
) -> list[ReplayEvent]:
    """
    Run a complete replay offline and return what a live one would show.

    Event times are quantized to frame_ms, as they would be when the
    scheduler is ticked once per rendered frame.

    Raises:
        ReplayError: The drawing has no strokes
    """
    clock = ManualClock()
    timeline = TimelineRecorder(clock)
    scheduler = FrameScheduler(time_source=clock)
    replayer = DrawingReplayer(
        scheduler,
        observer=timeline,
        point_interval_ms=point_interval_ms,
        stroke_pause_ms=stroke_pause_ms,
    )

    replayer.play(drawing, on_finished=timeline.on_finished)
    frames = scheduler.run_until_idle(clock, frame_ms=frame_ms)

    logger.debug(f"Built replay timeline: {len(timeline.events)} events over {frames} frames")
    return timeline.events
