"""
WebSocket Handler

Live stroke capture via WebSocket connection.
Lets the frontend stream pen events and receive stroke notifications and
the finished drawing.
"""

import json
import logging
import math
import time
from typing import Optional

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from .schemas import (
    WebSocketMessage,
    WebSocketMessageType,
    DrawingSchema,
    StrokeSchema,
    SessionStartMessage,
    StrokePointMessage,
)
from config import settings
from core.domain import CaptureError, Stroke
from core.services import StrokeRecorder, DrawingObserver

# Configure logging
logger = logging.getLogger(__name__)

_MESSAGE_TYPES = {t.value for t in WebSocketMessageType}

# Largest integer a JSON client can send exactly
_MAX_TIMESTAMP_MS = 2 ** 53


def _now_ms() -> int:
    return int(time.time() * 1000)


class MessageClock:
    """
    Clock that reports the timestamp of the message being handled.

    Capture timing follows the client's clock, not the server's receive time.
    """

    def __init__(self):
        self.current_ms = _now_ms()

    def __call__(self) -> int:
        return self.current_ms


class CompletedStrokeCollector(DrawingObserver):
    """Buffers completed strokes until they can be sent to the client."""

    def __init__(self):
        self.pending: list[Stroke] = []

    def on_stroke_completed(self, stroke: Stroke) -> None:
        self.pending.append(stroke)

    def drain(self) -> list[Stroke]:
        strokes, self.pending = self.pending, []
        return strokes


class CaptureSession:
    """Per-connection capture state."""

    def __init__(self):
        self.clock = MessageClock()
        self.collector = CompletedStrokeCollector()
        self.recorder: Optional[StrokeRecorder] = None


class ConnectionManager:
    """
    Manages WebSocket connections.

    Each connection gets its own capture session.
    """

    def __init__(self):
        self.active_connections: list[WebSocket] = []
        self.sessions: dict[WebSocket, CaptureSession] = {}

    async def connect(self, websocket: WebSocket) -> None:
        """Accept new WebSocket connection."""
        await websocket.accept()
        self.active_connections.append(websocket)
        self.sessions[websocket] = CaptureSession()

        logger.info(f"New WebSocket connection. Total: {len(self.active_connections)}")

    def disconnect(self, websocket: WebSocket) -> None:
        """Handle WebSocket disconnection."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        self.sessions.pop(websocket, None)

        logger.info(f"WebSocket disconnected. Remaining: {len(self.active_connections)}")

    def get_session(self, websocket: WebSocket) -> Optional[CaptureSession]:
        """Get capture session for a connection."""
        return self.sessions.get(websocket)

    async def send_message(self, websocket: WebSocket, msg_type: WebSocketMessageType, data: dict) -> None:
        """Send a typed message to a specific connection."""
        try:
            await websocket.send_json({
                "type": msg_type.value,
                "data": data,
                "timestamp": _now_ms(),
            })
        except Exception as e:
            logger.error(f"Failed to send WebSocket message: {e}")

    async def send_error(self, websocket: WebSocket, error: str) -> None:
        await self.send_message(websocket, WebSocketMessageType.ERROR, {"error": error})


# Global connection manager
manager = ConnectionManager()


async def websocket_endpoint(websocket: WebSocket) -> None:
    """
    WebSocket endpoint for live stroke capture.

    Protocol:
    1. Client connects and sends start_session with the surface size
    2. Client streams stroke_start / stroke_point / stroke_end
    3. Server sends stroke_completed after each stroke_end
    4. Client sends end_session and receives the finished drawing

    Message format (client -> server):
    {
        "type": "stroke_point",
        "data": {"x": 120.5, "y": 88.0, "pressure": 0.6},
        "timestamp": 1704067200000
    }

    Message format (server -> client):
    {
        "type": "drawing",
        "data": {"drawing": { ... }},
        "timestamp": 1704067200025
    }
    """
    await manager.connect(websocket)

    try:
        # Main message loop
        while True:
            try:
                data = await websocket.receive_json()
            except json.JSONDecodeError:
                await manager.send_error(websocket, "Invalid JSON")
                continue

            if not isinstance(data, dict):
                await manager.send_error(websocket, "Message must be a JSON object")
                continue

            if await handle_message(websocket, data):
                break

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        manager.disconnect(websocket)


async def handle_message(websocket: WebSocket, message: dict) -> bool:
    """
    Process one client message.

    Returns:
        True when the session has ended
    """
    session = manager.get_session(websocket)
    if session is None:
        await manager.send_error(websocket, "Session not initialized")
        return False

    raw_type = message.get("type")
    if isinstance(raw_type, str) and raw_type not in _MESSAGE_TYPES:
        await manager.send_error(websocket, f"Unknown message type: {raw_type}")
        return False

    try:
        envelope = WebSocketMessage.model_validate(message)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        await manager.send_error(websocket, f"Invalid message {field}: {error['msg']}")
        return False

    msg_type = envelope.type
    payload = envelope.data or {}
    session.clock.current_ms = _client_time_ms(envelope.timestamp)

    try:
        if msg_type == WebSocketMessageType.START_SESSION:
            start = SessionStartMessage.model_validate(payload)
            session.recorder = StrokeRecorder(
                width=start.width,
                height=start.height,
                clock=session.clock,
                observer=session.collector,
                stroke_color=start.stroke_color,
                stroke_width=start.stroke_width,
                max_points=settings.max_points_per_drawing,
            )
            session.recorder.enable()
            await manager.send_message(websocket, WebSocketMessageType.SESSION_STARTED, {
                "message": "Capture session started",
                "width": start.width,
                "height": start.height,
            })
            return False

        recorder = session.recorder
        if recorder is None:
            await manager.send_error(websocket, "Session not started")
            return False

        if msg_type == WebSocketMessageType.STROKE_START:
            point = StrokePointMessage.model_validate(payload)
            recorder.start_stroke(point.x, point.y, point.pressure)

        elif msg_type == WebSocketMessageType.STROKE_POINT:
            point = StrokePointMessage.model_validate(payload)
            recorder.continue_stroke(point.x, point.y, point.pressure)

        elif msg_type == WebSocketMessageType.STROKE_END:
            recorder.end_stroke()

        elif msg_type == WebSocketMessageType.GET_DRAWING:
            await _send_drawing(websocket, recorder)

        elif msg_type == WebSocketMessageType.END_SESSION:
            recorder.end_stroke()
            await _flush_completed(websocket, session)
            recorder.disable()
            await _send_drawing(websocket, recorder)
            await manager.send_message(websocket, WebSocketMessageType.SESSION_ENDED, {
                "message": "Session ended",
            })
            return True

        else:
            await manager.send_error(websocket, f"Unexpected message type: {msg_type.value}")

    except ValidationError as e:
        await manager.send_error(websocket, f"Invalid {msg_type.value} payload: {e.errors()[0]['msg']}")
    except CaptureError as e:
        await manager.send_error(websocket, str(e))

    await _flush_completed(websocket, session)
    return False


def _client_time_ms(timestamp: Optional[float]) -> int:
    """Client timestamp as integer ms; server time when missing or unusable."""
    if timestamp is None or not math.isfinite(timestamp) or abs(timestamp) > _MAX_TIMESTAMP_MS:
        return _now_ms()
    return int(timestamp)


async def _flush_completed(websocket: WebSocket, session: CaptureSession) -> None:
    for stroke in session.collector.drain():
        await manager.send_message(websocket, WebSocketMessageType.STROKE_COMPLETED, {
            "stroke": StrokeSchema.from_domain(stroke).model_dump(),
        })


async def _send_drawing(websocket: WebSocket, recorder: StrokeRecorder) -> None:
    drawing = recorder.get_drawing()
    await manager.send_message(websocket, WebSocketMessageType.DRAWING, {
        "drawing": DrawingSchema.from_domain(drawing).model_dump(),
    })
