"""
Drawing API Schemas

Pydantic models for drawing data and stroke capture messages.
These mirror the domain dataclasses and convert to/from them.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from config import settings
from core.domain.drawing import BoxSize, Drawing, Point, Stroke
from core.services.replay_scheduler import ReplayEvent


class PointSchema(BaseModel):
    """
    A single sampled pen position.
    """
    x: float = Field(..., allow_inf_nan=False, description="Horizontal position (px)")
    y: float = Field(..., allow_inf_nan=False, description="Vertical position (px, grows downward)")
    timestamp: int = Field(..., description="Sample time (ms)")
    pressure: Optional[float] = Field(None, ge=0.0, le=1.0, description="Pen pressure (0-1)")

    def to_domain(self) -> Point:
        return Point(x=self.x, y=self.y, timestamp=self.timestamp, pressure=self.pressure)

    @classmethod
    def from_domain(cls, point: Point) -> "PointSchema":
        return cls(x=point.x, y=point.y, timestamp=point.timestamp, pressure=point.pressure)


class StrokeSchema(BaseModel):
    """
    One continuous pen-down to pen-up path.
    """
    id: int = Field(..., description="Stroke ID, unique within the drawing")
    points: List[PointSchema] = Field(..., min_length=1, description="Ordered samples")
    start_time: int = Field(..., description="Pen-down time (ms)")
    end_time: int = Field(..., description="Pen-up time (ms)")
    color: str = Field("#000000", description="CSS color")
    width: float = Field(3.0, gt=0, description="Line width (px)")

    @model_validator(mode="after")
    def check_timing(self) -> "StrokeSchema":
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        for previous, current in zip(self.points, self.points[1:]):
            if current.timestamp < previous.timestamp:
                raise ValueError("point timestamps must be non-decreasing")
        return self

    def to_domain(self) -> Stroke:
        return Stroke(
            id=self.id,
            points=[p.to_domain() for p in self.points],
            start_time=self.start_time,
            end_time=self.end_time,
            color=self.color,
            width=self.width,
        )

    @classmethod
    def from_domain(cls, stroke: Stroke) -> "StrokeSchema":
        return cls(
            id=stroke.id,
            points=[PointSchema.from_domain(p) for p in stroke.points],
            start_time=stroke.start_time,
            end_time=stroke.end_time,
            color=stroke.color,
            width=stroke.width,
        )


class DrawingSchema(BaseModel):
    """
    A complete drawing: strokes plus timing and surface size.
    """
    strokes: List[StrokeSchema] = Field(default_factory=list, description="Strokes in drawing order")
    total_time: int = Field(0, ge=0, description="First pen-down to last pen-up (ms)")
    width: float = Field(0, ge=0, description="Capture surface width (px)")
    height: float = Field(0, ge=0, description="Capture surface height (px)")
    created: int = Field(0, description="Creation time (ms since epoch)")

    @model_validator(mode="after")
    def check_surface(self) -> "DrawingSchema":
        if self.strokes and (self.width <= 0 or self.height <= 0):
            raise ValueError("width and height must be positive for a drawing with strokes")
        ids = [s.id for s in self.strokes]
        if len(ids) != len(set(ids)):
            raise ValueError("stroke ids must be unique within a drawing")
        point_count = sum(len(s.points) for s in self.strokes)
        if point_count > settings.max_points_per_drawing:
            raise ValueError(
                f"drawing has {point_count} points, the limit is {settings.max_points_per_drawing}"
            )
        return self

    def to_domain(self) -> Drawing:
        return Drawing(
            strokes=[s.to_domain() for s in self.strokes],
            total_time=self.total_time,
            width=self.width,
            height=self.height,
            created=self.created,
        )

    @classmethod
    def from_domain(cls, drawing: Drawing) -> "DrawingSchema":
        return cls(
            strokes=[StrokeSchema.from_domain(s) for s in drawing.strokes],
            total_time=drawing.total_time,
            width=drawing.width,
            height=drawing.height,
            created=drawing.created,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "strokes": [
                    {
                        "id": 0,
                        "points": [
                            {"x": 0, "y": 0, "timestamp": 0},
                            {"x": 100, "y": 100, "timestamp": 100},
                        ],
                        "start_time": 0,
                        "end_time": 100,
                        "color": "#000000",
                        "width": 3,
                    }
                ],
                "total_time": 100,
                "width": 300,
                "height": 300,
                "created": 1704067200000,
            }
        }


class BoxSizeSchema(BaseModel):
    """
    Size of a constraint box centered on the capture surface.
    """
    width: float = Field(..., gt=0, description="Box width (px)")
    height: float = Field(..., gt=0, description="Box height (px)")

    def to_domain(self) -> BoxSize:
        return BoxSize(width=self.width, height=self.height)

    @classmethod
    def from_domain(cls, box: BoxSize) -> "BoxSizeSchema":
        return cls(width=box.width, height=box.height)


# =============================================================================
# WebSocket Message Schemas
# =============================================================================

class WebSocketMessageType(str, Enum):
    """Types of WebSocket messages."""
    # Client -> Server
    START_SESSION = "start_session"    # Open a capture surface
    STROKE_START = "stroke_start"      # Pen down
    STROKE_POINT = "stroke_point"      # Pen moved
    STROKE_END = "stroke_end"          # Pen up
    GET_DRAWING = "get_drawing"        # Request the drawing so far
    END_SESSION = "end_session"        # Finish capture

    # Server -> Client
    SESSION_STARTED = "session_started"
    STROKE_COMPLETED = "stroke_completed"
    DRAWING = "drawing"
    SESSION_ENDED = "session_ended"
    ERROR = "error"


class WebSocketMessage(BaseModel):
    """
    Base WebSocket message structure.

    All WebSocket communication uses this format.
    """
    type: WebSocketMessageType = Field(..., description="Message type")
    data: Optional[dict] = Field(default_factory=dict, description="Message payload")
    timestamp: Optional[float] = Field(None, description="Unix timestamp in milliseconds")

    class Config:
        json_schema_extra = {
            "example": {
                "type": "stroke_point",
                "data": {"x": 120.5, "y": 88.0, "pressure": 0.6},
                "timestamp": 1704067200000
            }
        }


class SessionStartMessage(BaseModel):
    """
    Capture surface size, sent when a session starts.
    """
    width: float = Field(..., gt=0, description="Surface width (px)")
    height: float = Field(..., gt=0, description="Surface height (px)")
    stroke_color: str = Field("#000000", description="Color for new strokes")
    stroke_width: float = Field(3.0, gt=0, description="Width for new strokes")


class StrokePointMessage(BaseModel):
    """
    Pen position for stroke_start and stroke_point messages.
    """
    x: float = Field(..., allow_inf_nan=False, description="Horizontal position (px)")
    y: float = Field(..., allow_inf_nan=False, description="Vertical position (px)")
    pressure: float = Field(1.0, ge=0.0, le=1.0, description="Pen pressure (0-1)")


# =============================================================================
# Example Replay
# =============================================================================

class ReplayEventKind(str, Enum):
    """Replay notifications, in the order a renderer receives them."""
    STROKE_STARTED = "stroke_started"
    POINT_ADDED = "point_added"
    STROKE_COMPLETED = "stroke_completed"
    FINISHED = "finished"


class ReplayEventSchema(BaseModel):
    """
    One step of an example replay.
    """
    kind: ReplayEventKind = Field(..., description="Event type")
    at_ms: float = Field(..., ge=0, description="Time since replay start (ms)")
    stroke_id: Optional[int] = Field(None, description="Stroke being replayed")
    point: Optional[PointSchema] = Field(None, description="Point revealed by point_added")

    @classmethod
    def from_domain(cls, event: ReplayEvent) -> "ReplayEventSchema":
        return cls(
            kind=ReplayEventKind(event.kind),
            at_ms=event.at_ms,
            stroke_id=event.stroke_id,
            point=PointSchema.from_domain(event.point) if event.point else None,
        )


class ReplayResponse(BaseModel):
    """
    Timeline for animating an exercise's example drawing.
    """
    exercise_id: str
    duration_ms: float = Field(..., ge=0, description="Time of the finished event (ms)")
    events: List[ReplayEventSchema]
