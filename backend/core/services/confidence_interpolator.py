"""
Confidence Interpolator Service

Hides momentary low-confidence detections (occlusion, motion blur)
for individual joints by blending them with the previous frame.
"""

from dataclasses import replace
from typing import List, Optional

from ..domain.pose import PoseFrame, PoseLandmark


class ConfidenceInterpolator:
    """
    Ring buffer of recent frames with per-joint confidence repair.

    Usage:
        interpolator = ConfidenceInterpolator(buffer_size=3)
        interpolator.push(frame)
        repaired = interpolator.get_current()

    Not thread-safe; one instance per video session.
    """

    VISIBILITY_THRESHOLD = 0.5
    # Blended joints are derived values, not hard detections
    CONFIDENCE_DAMPING = 0.8
    MIN_BUFFER_SIZE = 3

    def __init__(self, buffer_size: int = 3):
        self.size = max(self.MIN_BUFFER_SIZE, buffer_size)
        self._buffer: List[Optional[PoseFrame]] = [None] * self.size
        self._head = 0
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def push(self, frame: PoseFrame) -> None:
        """Add a frame, overwriting the oldest one when full."""
        self._buffer[self._head] = frame
        self._head = (self._head + 1) % self.size
        if self._count < self.size:
            self._count += 1

    def get_current(self) -> Optional[PoseFrame]:
        """
        Return the most recent frame with weak joints repaired.

        A joint below the visibility threshold is blended with the
        previous frame's joint when that one is above the threshold.
        Otherwise it is returned as-is.

        Returns:
            Repaired PoseFrame, or None if nothing has been pushed
        """
        if self._count < 1:
            return None

        current = self._buffer[(self._head - 1) % self.size]
        if current is None:
            return None

        previous = None
        if self._count >= 2:
            previous = self._buffer[(self._head - 2) % self.size]

        landmarks = [
            self._repair(lm, self._landmark_at(previous, i))
            for i, lm in enumerate(current.landmarks)
        ]
        return replace(current, landmarks=landmarks)

    def reset(self) -> None:
        """Clear the buffer."""
        self._buffer = [None] * self.size
        self._head = 0
        self._count = 0

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    @staticmethod
    def _landmark_at(frame: Optional[PoseFrame], index: int) -> Optional[PoseLandmark]:
        if frame is None or index >= len(frame.landmarks):
            return None
        return frame.landmarks[index]

    def _repair(
        self,
        current: PoseLandmark,
        previous: Optional[PoseLandmark],
    ) -> PoseLandmark:
        vis = current.visibility
        if current.is_visible(self.VISIBILITY_THRESHOLD):
            return current

        if previous is None or not previous.is_visible(self.VISIBILITY_THRESHOLD):
            return current

        prev_vis = previous.visibility
        # Weight of the current sample; pulls towards the more confident one
        w = vis / (vis + prev_vis + 1e-6)

        return PoseLandmark(
            x=current.x * w + previous.x * (1 - w),
            y=current.y * w + previous.y * (1 - w),
            z=current.z * w + previous.z * (1 - w),
            visibility=max(vis, prev_vis) * self.CONFIDENCE_DAMPING,
            body_part=current.body_part,
        )
