"""
Pose Detector Service

Wrapper around MediaPipe Pose for detecting body landmarks in images/video.
Handles all MediaPipe-specific logic and converts to our domain models.

The detector is an explicit resource: nothing is loaded until init()
and everything is released by dispose(). The owner (request handler,
WebSocket connection, app lifespan) decides the lifecycle.

Note: MediaPipe's type stubs are incomplete, so we use type: ignore comments
for mp.solutions access. This is a known issue with the mediapipe package.
"""

import base64
import logging
from typing import Optional, List, Generator, Any

import cv2
import numpy as np

from ..domain.pose import PoseLandmark, PoseFrame, BodyPart, Recording

logger = logging.getLogger(__name__)


class PoseDetector:
    """
    Detects a single human body pose using MediaPipe Pose.

    MediaPipe Pose provides 33 body landmarks with 3D coordinates.
    This class wraps MediaPipe and converts results to our domain models.

    Usage:
        detector = PoseDetector()
        detector.init()

        # Single image
        frame = detector.detect(image, timestamp_ms=0)

        # Video file (None where no body was found)
        recording = detector.read_recording("swing.mp4")

        # Cleanup
        detector.dispose()

    Or use as context manager:
        with PoseDetector() as detector:
            frame = detector.detect(image)
    """

    _pose: Any

    def __init__(
        self,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ):
        """
        Configure the pose detector (the model is loaded by init()).

        Args:
            model_complexity: 0, 1, or 2. Higher = more accurate but slower.
                             1 is good balance for golf analysis.
            min_detection_confidence: Minimum confidence for person detection.
            min_tracking_confidence: Minimum confidence for landmark tracking.
        """
        self.model_complexity = model_complexity
        self.min_detection_confidence = min_detection_confidence
        self.min_tracking_confidence = min_tracking_confidence

        self._pose = None
        self._last_timestamp_ms = -1

    def __enter__(self) -> "PoseDetector":
        """Context manager entry - loads the model."""
        self.init()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any]
    ) -> None:
        """Context manager exit - cleanup resources."""
        self.dispose()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def init(self) -> None:
        """Load the MediaPipe model. Calling it twice is a no-op."""
        if self._pose is not None:
            return

        import mediapipe as mp

        # MediaPipe's type stubs don't include solutions, but it exists at runtime
        mp_pose = mp.solutions.pose  # type: ignore[attr-defined]
        self._pose = mp_pose.Pose(
            static_image_mode=False,
            model_complexity=self.model_complexity,
            smooth_landmarks=True,
            min_detection_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence,
        )
        self._last_timestamp_ms = -1
        logger.info(f"MediaPipe Pose loaded (complexity={self.model_complexity})")

    def is_ready(self) -> bool:
        """Whether init() has loaded the model."""
        return self._pose is not None

    def dispose(self) -> None:
        """Release MediaPipe resources."""
        if self._pose is not None:
            self._pose.close()
            self._pose = None
            logger.info("MediaPipe Pose released")
        self._last_timestamp_ms = -1

    # -------------------------------------------------------------------------
    # Core Detection Methods
    # -------------------------------------------------------------------------

    def detect(
        self,
        image: np.ndarray,
        timestamp_ms: int = 0,
        frame_number: int = 0
    ) -> Optional[PoseFrame]:
        """
        Detect pose in a single image.

        Timestamps must strictly increase within one detector lifetime
        (the tracker treats its input as a video stream).

        Args:
            image: BGR image (OpenCV format)
            timestamp_ms: Timestamp in milliseconds
            frame_number: Sequential frame number

        Returns:
            PoseFrame with 33 landmarks, or None if not ready, the
            timestamp went backwards, or no person was detected
        """
        if self._pose is None:
            return None

        if timestamp_ms <= self._last_timestamp_ms:
            logger.debug(
                f"Skipping frame {frame_number}: timestamp {timestamp_ms} "
                f"<= {self._last_timestamp_ms}"
            )
            return None
        self._last_timestamp_ms = timestamp_ms

        # Convert BGR to RGB if needed (MediaPipe expects RGB)
        if len(image.shape) == 3 and image.shape[2] == 3:
            image_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        else:
            image_rgb = image

        results = self._pose.process(image_rgb)

        if not results.pose_landmarks:
            return None

        landmarks = self._convert_landmarks(results.pose_landmarks.landmark)

        return PoseFrame.from_landmarks(
            landmarks,
            timestamp_ms=timestamp_ms,
            frame_number=frame_number,
        )

    def detect_from_base64(
        self,
        base64_image: str,
        timestamp_ms: int = 0,
        frame_number: int = 0
    ) -> Optional[PoseFrame]:
        """
        Detect pose from a base64-encoded image.

        Used for REST and WebSocket communication with frontend.

        Args:
            base64_image: Base64 encoded JPEG/PNG image
            timestamp_ms: Timestamp in milliseconds
            frame_number: Frame number

        Returns:
            PoseFrame or None if detection failed
        """
        image_bytes = base64.b64decode(base64_image)
        nparr = np.frombuffer(image_bytes, np.uint8)
        image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

        if image is None:
            return None

        return self.detect(image, timestamp_ms, frame_number)

    def process_video(
        self,
        video_path: str,
        frame_skip: int = 1,
    ) -> Generator[Optional[PoseFrame], None, None]:
        """
        Step through a video file and yield one entry per sampled frame.

        Args:
            video_path: Path to video file
            frame_skip: Sample every Nth frame (1 = all, 2 = every other, etc.)

        Yields:
            PoseFrame, or None where no person was detected - so the
            index of each yielded item maps back to video time
        """
        if frame_skip < 1:
            raise ValueError(f"frame_skip must be >= 1, got {frame_skip}")

        cap = cv2.VideoCapture(video_path)

        if not cap.isOpened():
            raise ValueError(f"Could not open video: {video_path}")

        fps = cap.get(cv2.CAP_PROP_FPS)
        frame_count = 0
        # A new video restarts the timestamp sequence
        self._last_timestamp_ms = -1

        try:
            while True:
                ret, frame = cap.read()

                if not ret:
                    break

                if frame_count % frame_skip != 0:
                    frame_count += 1
                    continue

                timestamp_ms = int((frame_count / fps) * 1000) if fps > 0 else frame_count

                yield self.detect(
                    frame,
                    timestamp_ms=timestamp_ms,
                    frame_number=frame_count
                )

                frame_count += 1

        finally:
            cap.release()

    def read_recording(self, video_path: str, frame_skip: int = 1) -> Recording:
        """
        Run detection over a whole video.

        Returns:
            Recording whose fps is the sampling rate (native fps / frame_skip)
        """
        cap = cv2.VideoCapture(video_path)
        native_fps = cap.get(cv2.CAP_PROP_FPS) if cap.isOpened() else 0.0
        cap.release()

        frames = list(self.process_video(video_path, frame_skip))
        fps = native_fps / frame_skip if native_fps > 0 else 30.0 / frame_skip

        logger.info(
            f"Read {len(frames)} frames from {video_path} at {fps:.1f} fps "
            f"({sum(1 for f in frames if f is not None)} with a pose)"
        )
        return Recording(frames=frames, fps=fps)

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    def _convert_landmarks(
        self,
        mp_landmarks: Any
    ) -> List[PoseLandmark]:
        """Convert MediaPipe landmarks to our domain model."""
        return [
            PoseLandmark(
                x=mp_lm.x,
                y=mp_lm.y,
                z=mp_lm.z,
                visibility=mp_lm.visibility,
                body_part=BodyPart(i),
            )
            for i, mp_lm in enumerate(mp_landmarks)
        ]
