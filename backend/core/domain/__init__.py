"""
Domain Models

Pure data structures representing pose and swing phase concepts.
No external dependencies - just Python dataclasses and enums.
"""

from .pose import PoseLandmark, PoseFrame, BodyPart, Recording, NUM_LANDMARKS
from .analysis import (
    SwingPhase,
    SWING_ORDER,
    PhaseInfo,
    PHASE_INFO,
    get_phase_info,
    SwingEvents,
    SwingSegmentation,
    AngleInfo,
)

__all__ = [
    "PoseLandmark",
    "PoseFrame",
    "BodyPart",
    "Recording",
    "NUM_LANDMARKS",
    "SwingPhase",
    "SWING_ORDER",
    "PhaseInfo",
    "PHASE_INFO",
    "get_phase_info",
    "SwingEvents",
    "SwingSegmentation",
    "AngleInfo",
]
