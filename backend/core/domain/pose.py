"""
Pose Domain Models

Data structures for representing human body pose landmarks
produced by the pose detector.

MediaPipe Pose returns 33 landmarks:
https://developers.google.com/mediapipe/solutions/vision/pose_landmarker

The landmark index schema below is the contract shared by the smoother,
the interpolator and the swing phase detector.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional


NUM_LANDMARKS = 33


class BodyPart(IntEnum):
    """
    MediaPipe Pose landmark indices.

    These map directly to MediaPipe's 33-point pose model.
    """
    # Face
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10

    # Upper body
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16

    # Hands
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22

    # Lower body
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28

    # Feet
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


@dataclass
class PoseLandmark:
    """
    A single body landmark with 3D coordinates and visibility.

    Attributes:
        x: Horizontal position (0.0 = left edge, 1.0 = right edge)
        y: Vertical position (0.0 = top edge, 1.0 = bottom edge)
        z: Depth (smaller = closer to camera), 0.0 when not estimated
        visibility: Confidence score (0.0 to 1.0)
        body_part: Which body part this landmark represents

    Note:
        Coordinates are normalized to image dimensions.
        To get pixel coordinates: pixel_x = x * image_width
    """
    x: float
    y: float
    z: float = 0.0
    visibility: float = 0.0
    body_part: Optional[BodyPart] = None

    def is_visible(self, threshold: float = 0.5) -> bool:
        """Check if landmark is visible above confidence threshold."""
        return self.visibility >= threshold


@dataclass
class PoseFrame:
    """
    A complete pose detection result for a single video frame.

    Attributes:
        landmarks: List of 33 body landmarks
        timestamp_ms: Video timestamp in milliseconds
        frame_number: Sequential frame number
        confidence: Overall detection confidence
    """
    landmarks: list[PoseLandmark]
    timestamp_ms: int = 0
    frame_number: int = 0
    confidence: float = 0.0

    @classmethod
    def from_landmarks(
        cls,
        landmarks: list[PoseLandmark],
        timestamp_ms: int = 0,
        frame_number: int = 0,
    ) -> "PoseFrame":
        """Build a frame whose confidence is the mean landmark visibility."""
        confidence = (
            sum(lm.visibility for lm in landmarks) / len(landmarks)
            if landmarks else 0.0
        )
        return cls(
            landmarks=landmarks,
            timestamp_ms=timestamp_ms,
            frame_number=frame_number,
            confidence=confidence,
        )

    def get_landmark(self, body_part: BodyPart) -> Optional[PoseLandmark]:
        """Get a specific landmark by body part."""
        index = body_part.value
        if 0 <= index < len(self.landmarks):
            return self.landmarks[index]
        return None

    @property
    def is_complete(self) -> bool:
        """True when the frame carries the full 33-point schema."""
        return len(self.landmarks) == NUM_LANDMARKS


@dataclass
class Recording:
    """
    An ordered sequence of frames sampled from one video.

    Frames where no body was detected are kept as None so that
    frame indices stay aligned with video time.

    Attributes:
        frames: One entry per sampled video frame
        fps: Sampling rate of the frames (not necessarily the native video rate)
    """
    frames: list[Optional[PoseFrame]] = field(default_factory=list)
    fps: float = 30.0

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def detected_count(self) -> int:
        """Number of frames where a body was found."""
        return sum(1 for f in self.frames if f is not None)
