"""
Analysis API Schemas

Pydantic models for swing phase segmentation requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional, List
from enum import Enum

from .pose import LandmarkSchema


class SwingPhaseEnum(str, Enum):
    """Swing phases for API."""
    ADDRESS = "address"
    TAKEAWAY = "takeaway"
    TOP = "top"
    DOWNSWING = "downswing"
    IMPACT = "impact"
    FOLLOW = "follow"
    FINISH = "finish"
    UNKNOWN = "unknown"


class PhaseInfoSchema(BaseModel):
    """
    Display metadata for one phase.
    """
    phase: SwingPhaseEnum = Field(..., description="Swing phase")
    label: str = Field(..., description="Display label")
    color: str = Field(..., description="Hex colour for timeline and label")


class SwingEventsSchema(BaseModel):
    """
    Key frame indices found by the segmenter.
    """
    takeaway_frame: int = Field(..., ge=0, description="Shoulders start turning")
    top_frame: int = Field(..., ge=0, description="Top of backswing")
    impact_frame: int = Field(..., ge=0, description="Impact")
    finish_frame: int = Field(..., ge=0, description="Hands come to rest")
    peak_speed: float = Field(..., ge=0.0, description="Horizontal wrist speed at impact")


class AnalyzeFramesRequest(BaseModel):
    """
    Request to segment pre-detected pose frames.

    Used when frontend has already done pose detection.
    Each entry is the 33 landmarks of one frame, or null when no body was found.
    """
    frames: List[Optional[List[LandmarkSchema]]] = Field(..., description="One entry per video frame")
    fps: Optional[float] = Field(None, gt=0.0, description="Sampling rate of the frames (server default if omitted)")

    class Config:
        json_schema_extra = {
            "example": {
                "frames": [None, [{"x": 0.5, "y": 0.2, "z": 0.0, "visibility": 0.99}]],
                "fps": 30.0
            }
        }


class PhaseTimelineResponse(BaseModel):
    """
    Per-frame swing phases for a recording.

    This is the main response from the analysis endpoints.
    """
    fps: float = Field(..., description="Sampling rate of the frames")
    total_frames: int = Field(..., ge=0, description="Number of frames labelled")
    detected_frames: int = Field(..., ge=0, description="Frames with a detected pose")
    duration_ms: int = Field(..., ge=0, description="Duration covered by the frames")
    phases: List[SwingPhaseEnum] = Field(default_factory=list, description="One phase per frame")
    events: Optional[SwingEventsSchema] = Field(None, description="Key frames (null if too few frames)")
    key_frames: Dict[str, int] = Field(default_factory=dict, description="Phase -> first frame index")

    class Config:
        json_schema_extra = {
            "example": {
                "fps": 30.0,
                "total_frames": 6,
                "detected_frames": 6,
                "duration_ms": 200,
                "phases": ["address", "takeaway", "top", "downswing", "impact", "finish"],
                "key_frames": {"address": 0, "top": 2, "impact": 4}
            }
        }


class HealthResponse(BaseModel):
    """
    Health check response.
    """
    status: str = Field("healthy", description="Service status")
    version: str = Field(..., description="API version")
    mediapipe_available: bool = Field(..., description="Whether MediaPipe is working")
