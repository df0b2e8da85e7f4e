"""
Application settings.

Values can be overridden with environment variables prefixed with
SWING_ (e.g. SWING_SMOOTHER_BETA=0.02) or a .env file.
"""

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Swing Overlay API"
    version: str = "1.0.0"
    log_level: str = "INFO"

    # Landmark smoothing (One Euro filter)
    smoother_min_cutoff: float = 1.7
    smoother_beta: float = 0.01
    smoother_d_cutoff: float = 1.0

    # Confidence interpolation
    interpolator_buffer_size: int = 3

    # Phase segmentation
    default_fps: float = 30.0

    # MediaPipe Pose
    model_complexity: int = 1  # 0=Lite, 1=Full, 2=Heavy
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    cors_origins: List[str] = [
        "http://localhost:3000",      # React dev server
        "http://localhost:5173",      # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    class Config:
        env_file = ".env"
        env_prefix = "SWING_"


settings = Settings()
