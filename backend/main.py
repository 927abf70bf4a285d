"""
StrokeCoach Backend API

FastAPI application for drawing practice: live stroke capture and scoring
of a learner's copy against an example drawing.

Run with:
    uvicorn main:app --reload --host 0.0.0.0 --port 8000

API docs available at:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router as api_router
from api.websocket import websocket_endpoint
from config import settings

# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan (startup/shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup code before app starts accepting requests,
    and cleanup code when app shuts down.
    """
    # Startup
    logger.info(f" {settings.app_name} starting up...")
    logger.info(" API docs: http://localhost:8000/docs")
    logger.info(" WebSocket: ws://localhost:8000/ws/capture")
    logger.info(
        f" Scoring: path_decay={settings.path_decay}, "
        f"stroke_mismatch_penalty={settings.stroke_mismatch_penalty}"
    )

    yield  # App runs here

    # Shutdown
    logger.info(f" {settings.app_name} shutting down...")


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="""
    **Drawing Practice Scorer**

    Records freehand strokes and scores a learner's copy of an example drawing.

    ## Features

    - **Live Stroke Capture** via WebSocket
    - **Scoring** of accuracy, stroke structure and timing as 1-5 stars
    - **Exercises** with up to five attempts and best-score tracking
    - **Example Replay** timelines for showing how the example is drawn

    ## Endpoints

    - `GET /api/health` - Health check
    - `POST /api/score` - Score the final attempt against an example
    - `POST /api/exercises` - Create an exercise
    - `POST /api/exercises/{id}/attempts` - Record an attempt
    - `DELETE /api/exercises/{id}/attempts` - Start a new round
    - `POST /api/exercises/{id}/score` - Score an exercise
    - `GET /api/exercises/{id}/replay` - Timeline for animating the example
    - `WS /ws/capture` - Live stroke capture

    ## WebSocket Protocol

    Connect to `/ws/capture` and send pen events as JSON:
```json
    {
        "type": "stroke_point",
        "data": {"x": 120.5, "y": 88.0, "pressure": 0.6},
        "timestamp": 1704067200000
    }
```
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# CORS Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Routes
# =============================================================================

# Include REST API routes
app.include_router(api_router, prefix="/api")

# WebSocket endpoint
app.websocket("/ws/capture")(websocket_endpoint)


# =============================================================================
# Root endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "name": settings.app_name,
        "version": settings.version,
        "description": "Drawing Practice Scorer",
        "docs": "/docs",
        "health": "/api/health",
        "websocket": "ws://localhost:8000/ws/capture"
    }


# =============================================================================
# Run directly (for development)
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower()
    )
