"""
Drawing Domain Models

Data structures for freehand pen input: timestamped points grouped into
strokes, and strokes grouped into a drawing together with the size of the
surface they were captured on.

Coordinates are in capture-surface pixels unless a drawing has been
normalized (see ShapeMatcher.normalize), in which case they live in a unit
frame.
"""

import math
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Point:
    """
    A single sampled pen position.

    Attributes:
        x: Horizontal position
        y: Vertical position (grows downward, like the capture surface)
        timestamp: When the sample was taken (ms)
        pressure: Pen pressure (0.0 to 1.0), None if the device has none
    """
    x: float
    y: float
    timestamp: int
    pressure: Optional[float] = None

    def distance_to(self, other: "Point") -> float:
        """Calculate Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass
class Stroke:
    """
    One continuous pen-down to pen-up path.

    Attributes:
        id: Unique within the owning drawing
        points: Ordered samples, timestamps non-decreasing
        start_time: Pen-down time (ms)
        end_time: Pen-up time (ms), never before start_time
        color: CSS color string
        width: Line width in pixels
    """
    id: int
    points: list[Point]
    start_time: int
    end_time: int
    color: str = "#000000"
    width: float = 3.0

    @property
    def duration(self) -> int:
        """Time between pen-down and pen-up (ms)."""
        return self.end_time - self.start_time

    @property
    def length(self) -> float:
        """Path length: sum of distances between consecutive points."""
        return sum(
            self.points[i - 1].distance_to(self.points[i])
            for i in range(1, len(self.points))
        )


@dataclass(frozen=True)
class BoxSize:
    """Size of a constraint box, centered on the capture surface."""
    width: float
    height: float


@dataclass
class Drawing:
    """
    A complete recording of strokes plus timing and surface metadata.

    Attributes:
        strokes: Strokes in the order they were drawn
        total_time: First pen-down to last pen-up (ms)
        width: Capture surface width when the drawing was made
        height: Capture surface height when the drawing was made
        created: When the drawing was made (ms since epoch)
    """
    strokes: list[Stroke] = field(default_factory=list)
    total_time: int = 0
    width: float = 0
    height: float = 0
    created: int = 0

    @classmethod
    def empty(cls, width: float = 0, height: float = 0, created: int = 0) -> "Drawing":
        """Create a drawing with no strokes."""
        return cls(strokes=[], total_time=0, width=width, height=height, created=created)

    @property
    def is_empty(self) -> bool:
        return not self.strokes

    @property
    def point_count(self) -> int:
        return sum(len(stroke.points) for stroke in self.strokes)

    def all_points(self) -> list[Point]:
        """Get every point of every stroke as one flat list."""
        return [point for stroke in self.strokes for point in stroke.points]
