"""
REST API Routes

FastAPI routes for pose detection and swing phase segmentation.
"""

import os
import tempfile
import time
import logging
from typing import Generator, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, File, Form

from .schemas import (
    PoseDetectionRequest,
    PoseDetectionResponse,
    PoseFrameSchema,
    LandmarkSchema,
    AngleSchema,
    AnalyzeFramesRequest,
    PhaseTimelineResponse,
    PhaseInfoSchema,
    SwingEventsSchema,
    SwingPhaseEnum,
    HealthResponse,
)
from config import settings
from core.domain import (
    PoseFrame,
    PoseLandmark,
    BodyPart,
    AngleInfo,
    SwingSegmentation,
    PHASE_INFO,
    SWING_ORDER,
    SwingPhase,
)
from core.services import PoseDetector, SwingAnalyzer, AngleCalculator

# Configure logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


# =============================================================================
# Dependencies
# =============================================================================

def get_pose_detector() -> Generator[PoseDetector, None, None]:
    """Fresh MediaPipe detector for the duration of one request."""
    with PoseDetector(
        model_complexity=settings.model_complexity,
        min_detection_confidence=settings.min_detection_confidence,
        min_tracking_confidence=settings.min_tracking_confidence,
    ) as detector:
        yield detector


# =============================================================================
# Health Check
# =============================================================================

def probe_mediapipe() -> bool:
    """Load and release a MediaPipe model once to see whether it works."""
    try:
        with PoseDetector(model_complexity=settings.model_complexity) as detector:
            return detector.is_ready()
    except Exception as e:
        logger.warning(f"MediaPipe not available: {e}")
        return False


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health check endpoint"
)
async def health_check(request: Request) -> HealthResponse:
    """
    Check if the API is running and MediaPipe is available.

    The MediaPipe check runs at startup; its result is reused here.
    """
    mediapipe_ok = getattr(request.app.state, "mediapipe_available", None)
    if mediapipe_ok is None:
        mediapipe_ok = probe_mediapipe()
        request.app.state.mediapipe_available = mediapipe_ok

    return HealthResponse(
        status="healthy",
        version=settings.version,
        mediapipe_available=mediapipe_ok
    )


@router.get(
    "/phases",
    response_model=List[PhaseInfoSchema],
    tags=["Swing Analysis"],
    summary="Display labels and colours for every phase"
)
async def list_phases() -> List[PhaseInfoSchema]:
    """
    Phase display table used by the timeline and label renderers.
    """
    return [
        PhaseInfoSchema(
            phase=SwingPhaseEnum(info.phase.value),
            label=info.label,
            color=info.color,
        )
        for info in (PHASE_INFO[p] for p in (*SWING_ORDER, SwingPhase.UNKNOWN))
    ]


# =============================================================================
# Pose Detection
# =============================================================================

@router.post(
    "/pose/detect",
    response_model=PoseDetectionResponse,
    tags=["Pose Detection"],
    summary="Detect pose in a single image"
)
async def detect_pose(
    request: PoseDetectionRequest,
    detector: PoseDetector = Depends(get_pose_detector),
) -> PoseDetectionResponse:
    """
    Detect human pose in a base64-encoded image.

    For video, use the WebSocket endpoint instead - it keeps smoothing
    state across frames.

    Returns:
        Detected pose with 33 landmarks and overlay angles
    """
    start_time = time.time()

    try:
        pose_frame = detector.detect_from_base64(
            request.image_base64,
            timestamp_ms=request.timestamp_ms,
            frame_number=request.frame_number
        )

        processing_time = (time.time() - start_time) * 1000

        if pose_frame is None:
            return PoseDetectionResponse(
                success=False,
                pose=None,
                error="No person detected in image",
                processing_time_ms=processing_time
            )

        return PoseDetectionResponse(
            success=True,
            pose=pose_frame_to_schema(pose_frame),
            angles=angles_to_schema(AngleCalculator.calculate_angles(pose_frame)),
            error=None,
            processing_time_ms=processing_time
        )

    except Exception as e:
        logger.error(f"Pose detection failed: {e}")
        processing_time = (time.time() - start_time) * 1000
        return PoseDetectionResponse(
            success=False,
            pose=None,
            error=str(e),
            processing_time_ms=processing_time
        )


# =============================================================================
# Swing Analysis
# =============================================================================

@router.post(
    "/analysis/frames",
    response_model=PhaseTimelineResponse,
    tags=["Swing Analysis"],
    summary="Segment pre-detected pose frames into swing phases"
)
async def analyze_frames(request: AnalyzeFramesRequest) -> PhaseTimelineResponse:
    """
    Label every frame of a recording with a swing phase.

    The frontend sends the landmarks it detected while stepping
    through the video; null entries mark frames without a body.
    """
    fps = request.fps or settings.default_fps
    frames = [
        None if landmarks is None else landmarks_to_frame(
            landmarks,
            timestamp_ms=int(i / fps * 1000),
            frame_number=i,
        )
        for i, landmarks in enumerate(request.frames)
    ]

    try:
        result = SwingAnalyzer().analyze_frames(frames, fps=fps)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return segmentation_to_response(result)


@router.post(
    "/analysis/video",
    response_model=PhaseTimelineResponse,
    tags=["Swing Analysis"],
    summary="Segment a golf swing video into phases"
)
async def analyze_video(
    video: UploadFile = File(..., description="Video file (MP4, MOV)"),
    frame_skip: int = Form(1, ge=1, le=10, description="Sample every Nth frame"),
    detector: PoseDetector = Depends(get_pose_detector),
) -> PhaseTimelineResponse:
    """
    Segment a golf swing from an uploaded video file.

    The video will be:
    1. Saved temporarily
    2. Stepped through frame-by-frame with MediaPipe
    3. Segmented into phases from the wrist and shoulder trajectories
    """
    temp_path = None
    try:
        suffix = os.path.splitext(video.filename or ".mp4")[1]
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as temp_file:
            temp_path = temp_file.name
            content = await video.read()
            temp_file.write(content)

        analyzer = SwingAnalyzer(pose_detector=detector)
        result = analyzer.analyze_video(temp_path, frame_skip=frame_skip)

        return segmentation_to_response(result)

    except ValueError as e:
        logger.warning(f"Video rejected: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error(f"Video analysis failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    finally:
        if temp_path and os.path.exists(temp_path):
            os.unlink(temp_path)


# =============================================================================
# Helper Functions
# =============================================================================

def landmarks_to_frame(
    landmarks: List[LandmarkSchema],
    timestamp_ms: int = 0,
    frame_number: int = 0,
) -> PoseFrame:
    """Convert API landmarks to a domain PoseFrame."""
    domain_landmarks = []
    for i, lm in enumerate(landmarks):
        try:
            body_part: Optional[BodyPart] = BodyPart(i)
        except ValueError:
            body_part = None
        domain_landmarks.append(PoseLandmark(
            x=lm.x,
            y=lm.y,
            z=lm.z,
            visibility=lm.visibility,
            body_part=body_part,
        ))
    return PoseFrame.from_landmarks(
        domain_landmarks,
        timestamp_ms=timestamp_ms,
        frame_number=frame_number,
    )


def pose_frame_to_schema(frame: PoseFrame) -> PoseFrameSchema:
    """Convert domain PoseFrame to API schema."""
    return PoseFrameSchema(
        landmarks=[
            LandmarkSchema(
                x=lm.x,
                y=lm.y,
                z=lm.z,
                visibility=lm.visibility,
                body_part=lm.body_part.name if lm.body_part is not None else None
            )
            for lm in frame.landmarks
        ],
        timestamp_ms=frame.timestamp_ms,
        frame_number=frame.frame_number,
        confidence=frame.confidence
    )


def angles_to_schema(angles: List[AngleInfo]) -> List[AngleSchema]:
    return [
        AngleSchema(
            label=a.label,
            angle=a.angle,
            x=a.x,
            y=a.y,
            visibility=a.visibility,
        )
        for a in angles
    ]


def segmentation_to_response(result: SwingSegmentation) -> PhaseTimelineResponse:
    """Convert domain SwingSegmentation to API response schema."""
    events = None
    if result.events is not None:
        events = SwingEventsSchema(
            takeaway_frame=result.events.takeaway_frame,
            top_frame=result.events.top_frame,
            impact_frame=result.events.impact_frame,
            finish_frame=result.events.finish_frame,
            peak_speed=result.events.peak_speed,
        )

    return PhaseTimelineResponse(
        fps=result.fps,
        total_frames=len(result),
        detected_frames=result.detected_frames,
        duration_ms=result.duration_ms,
        phases=[SwingPhaseEnum(p.value) for p in result.phases],
        events=events,
        key_frames={k.value: v for k, v in result.key_frames.items()},
    )
