"""
API Schemas

Pydantic models for request/response validation.
"""

from .pose import (
    LandmarkSchema,
    AngleSchema,
    PoseFrameSchema,
    PoseDetectionRequest,
    PoseDetectionResponse,
    WebSocketMessageType,
    WebSocketMessage,
    FrameMessage,
    PoseResultMessage,
)

from .analysis import (
    SwingPhaseEnum,
    PhaseInfoSchema,
    SwingEventsSchema,
    AnalyzeFramesRequest,
    PhaseTimelineResponse,
    HealthResponse,
)

__all__ = [
    # Pose schemas
    "LandmarkSchema",
    "AngleSchema",
    "PoseFrameSchema",
    "PoseDetectionRequest",
    "PoseDetectionResponse",
    "WebSocketMessageType",
    "WebSocketMessage",
    "FrameMessage",
    "PoseResultMessage",
    # Analysis schemas
    "SwingPhaseEnum",
    "PhaseInfoSchema",
    "SwingEventsSchema",
    "AnalyzeFramesRequest",
    "PhaseTimelineResponse",
    "HealthResponse",
]
