"""
Application Settings

Environment-driven configuration for the StrokeCoach backend.
Every field can be overridden with a STROKECOACH_-prefixed environment
variable or a .env file in the working directory, e.g.:

    STROKECOACH_LOG_LEVEL=DEBUG
    STROKECOACH_PATH_DECAY=4.0
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STROKECOACH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Service
    app_name: str = "StrokeCoach API"
    version: str = "1.0.0"
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",      # React dev server
        "http://localhost:5173",      # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Scoring
    path_decay: float = Field(5.0, gt=0, description="Exponential decay applied to average point distance")
    stroke_mismatch_penalty: float = Field(0.1, ge=0, description="Length-pattern penalty per missing/extra stroke")

    # Exercises
    max_attempts: int = Field(5, ge=1)
    max_points_per_drawing: int = Field(5000, ge=1, description="Largest drawing accepted by the API, in points")
    constraint_base_size: float = Field(300.0, gt=0, description="Constraint box side for the first attempt (px)")

    # Example replay
    replay_point_interval_ms: float = Field(20.0, gt=0)
    replay_stroke_pause_ms: float = Field(200.0, ge=0)


settings = Settings()
