"""
Swing Phase Detector Service

Splits a whole recording into swing phases using only joint
trajectories - no timing hints from outside.

Algorithm:
1. Take the lead hand's wrist trace (whichever wrist is more
   confident in each frame) and the shoulder line angle
2. Top of backswing = highest wrist position in the early/middle part
3. Impact = fastest lateral wrist motion after the top
4. Finish = first frame after impact where the hands have slowed down
5. Takeaway = first frame where the shoulders turn away from address
6. Everything in between is address / downswing / follow
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..domain.pose import PoseFrame, PoseLandmark, BodyPart
from ..domain.analysis import SwingPhase, SwingEvents, SwingSegmentation
from .angle_calculator import AngleCalculator

logger = logging.getLogger(__name__)


def moving_average(values: Sequence[float], window: int = 3) -> np.ndarray:
    """
    Centered moving average.

    Near the ends only the samples that exist are averaged,
    so the output has the same length as the input.
    """
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return values

    kernel = np.ones(window)
    sums = np.convolve(values, kernel, mode="full")
    counts = np.convolve(np.ones_like(values), kernel, mode="full")

    start = (window - 1) // 2
    return sums[start:start + values.size] / counts[start:start + values.size]


class SwingPhaseDetector:
    """
    Labels every frame of a recording with a swing phase.

    Stateless: analyze() is a pure function of its input, so a single
    instance can be shared freely.

    Usage:
        detector = SwingPhaseDetector()
        phases = detector.analyze(frames, fps=30)
        print(phases[45])  # SwingPhase.TOP
    """

    MIN_FRAMES = 5
    SMOOTHING_WINDOW = 3

    # Top search window as fraction of the recording
    TOP_SEARCH_START = 0.1
    TOP_SEARCH_END = 0.7

    # Impact is searched within this fraction of the recording after the top
    IMPACT_SEARCH_SPAN = 0.5

    # Finish = speed below this fraction of the impact peak
    FINISH_SPEED_RATIO = 0.15
    FINISH_SEARCH_OFFSET = 3

    # Shoulder turn (degrees) that marks the start of the takeaway
    TAKEAWAY_ANGLE_THRESHOLD = 3.0
    SHOULDER_MIN_VISIBILITY = 0.3

    # Position used when a wrist is missing from the frame entirely
    FALLBACK_COORDINATE = 0.5

    # -------------------------------------------------------------------------
    # Main Analysis Methods
    # -------------------------------------------------------------------------

    def analyze(
        self,
        frames: Sequence[Optional[PoseFrame]],
        fps: float = 30.0,
    ) -> List[SwingPhase]:
        """
        Label every frame with a swing phase.

        Args:
            frames: One entry per video frame; None where no body was found
            fps: Sampling rate of the frames

        Returns:
            One SwingPhase per input frame (all UNKNOWN for < 5 frames)
        """
        return self.segment(frames, fps).phases

    def segment(
        self,
        frames: Sequence[Optional[PoseFrame]],
        fps: float = 30.0,
    ) -> SwingSegmentation:
        """
        Same as analyze() but also returns the key frame indices.
        """
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")

        detected = sum(1 for f in frames if f is not None and f.landmarks)

        events = self.detect_events(frames, fps)
        if events is None:
            return SwingSegmentation(
                phases=[SwingPhase.UNKNOWN] * len(frames),
                fps=fps,
                detected_frames=detected,
            )

        return SwingSegmentation(
            phases=self.assign_phases(len(frames), events),
            fps=fps,
            events=events,
            detected_frames=detected,
        )

    def detect_events(
        self,
        frames: Sequence[Optional[PoseFrame]],
        fps: float = 30.0,
    ) -> Optional[SwingEvents]:
        """
        Locate takeaway, top, impact and finish.

        Returns:
            SwingEvents, or None if there are too few frames
        """
        n = len(frames)
        if n < self.MIN_FRAMES:
            return None

        wrist_x, wrist_y = self._lead_wrist_trace(frames)
        shoulder_angle = self._shoulder_angle_trace(frames)

        smooth_x = moving_average(wrist_x, self.SMOOTHING_WINDOW)
        smooth_y = moving_average(wrist_y, self.SMOOTHING_WINDOW)

        top_frame = self._find_top(smooth_y)

        speed = np.abs(np.diff(smooth_x, prepend=smooth_x[0])) * fps
        smooth_speed = moving_average(speed, self.SMOOTHING_WINDOW)

        impact_frame, peak_speed = self._find_impact(smooth_speed, top_frame)
        finish_frame = self._find_finish(smooth_speed, impact_frame, peak_speed)
        takeaway_frame = self._find_takeaway(shoulder_angle, top_frame)

        events = SwingEvents(
            takeaway_frame=takeaway_frame,
            top_frame=top_frame,
            impact_frame=impact_frame,
            finish_frame=finish_frame,
            peak_speed=peak_speed,
        )
        logger.debug(
            f"Swing events over {n} frames: takeaway={takeaway_frame} "
            f"top={top_frame} impact={impact_frame} finish={finish_frame} "
            f"peak_speed={peak_speed:.3f}"
        )
        return events

    @staticmethod
    def assign_phases(n: int, events: SwingEvents) -> List[SwingPhase]:
        """Turn key frame indices into one label per frame."""
        phases = []
        for i in range(n):
            if i < events.takeaway_frame:
                phase = SwingPhase.ADDRESS
            elif i < events.top_frame:
                phase = SwingPhase.TAKEAWAY
            elif i == events.top_frame:
                phase = SwingPhase.TOP
            elif i < events.impact_frame:
                phase = SwingPhase.DOWNSWING
            elif i <= events.impact_frame + 1:
                phase = SwingPhase.IMPACT
            elif i < events.finish_frame:
                phase = SwingPhase.FOLLOW
            else:
                phase = SwingPhase.FINISH
            phases.append(phase)
        return phases

    # -------------------------------------------------------------------------
    # Trajectory Extraction
    # -------------------------------------------------------------------------

    def _lead_wrist_trace(
        self,
        frames: Sequence[Optional[PoseFrame]],
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        X and Y of the more confident wrist in each frame.

        Picking the wrist per frame avoids assuming the player's handedness.
        """
        xs = []
        ys = []
        for frame in frames:
            wrist = self._lead_wrist(frame)
            if wrist is None:
                xs.append(self.FALLBACK_COORDINATE)
                ys.append(self.FALLBACK_COORDINATE)
            else:
                xs.append(wrist.x)
                ys.append(wrist.y)
        return np.array(xs), np.array(ys)

    @staticmethod
    def _lead_wrist(frame: Optional[PoseFrame]) -> Optional[PoseLandmark]:
        if frame is None:
            return None

        left = frame.get_landmark(BodyPart.LEFT_WRIST)
        right = frame.get_landmark(BodyPart.RIGHT_WRIST)
        left_vis = left.visibility if left else 0.0
        right_vis = right.visibility if right else 0.0

        # Ties go to the left wrist
        return left if left_vis >= right_vis else right

    def _shoulder_angle_trace(
        self,
        frames: Sequence[Optional[PoseFrame]],
    ) -> np.ndarray:
        """Shoulder line angle per frame, 0 where the shoulders are unreliable."""
        angles = []
        for frame in frames:
            left = frame.get_landmark(BodyPart.LEFT_SHOULDER) if frame else None
            right = frame.get_landmark(BodyPart.RIGHT_SHOULDER) if frame else None
            if (
                left is None or right is None
                or left.visibility < self.SHOULDER_MIN_VISIBILITY
                or right.visibility < self.SHOULDER_MIN_VISIBILITY
            ):
                angles.append(0.0)
            else:
                angles.append(AngleCalculator.calculate_horizontal_angle(left, right))
        return np.array(angles)

    # -------------------------------------------------------------------------
    # Event Search
    # -------------------------------------------------------------------------

    def _find_top(self, smooth_y: np.ndarray) -> int:
        """
        Highest wrist position (smallest y) in [10%, 70%) of the recording.

        The finish can be just as high, hence the upper bound.
        """
        n = smooth_y.size
        start = int(n * self.TOP_SEARCH_START)
        end = int(n * self.TOP_SEARCH_END)
        if end <= start:
            return 0
        return start + int(np.argmin(smooth_y[start:end]))

    def _find_impact(
        self,
        smooth_speed: np.ndarray,
        top_frame: int,
    ) -> Tuple[int, float]:
        """
        Fastest lateral wrist motion after the top.

        Returns:
            (impact frame, peak speed); defaults to the frame after the top
            with zero speed when the hands never move sideways
        """
        n = smooth_speed.size
        start = top_frame + 2
        end = min(n - 1, top_frame + int(n * self.IMPACT_SEARCH_SPAN))

        impact_frame = top_frame + 1
        peak_speed = 0.0
        if end > start:
            window = smooth_speed[start:end]
            best = int(np.argmax(window))
            if window[best] > 0:
                impact_frame = start + best
                peak_speed = float(window[best])
        return impact_frame, peak_speed

    def _find_finish(
        self,
        smooth_speed: np.ndarray,
        impact_frame: int,
        peak_speed: float,
    ) -> int:
        """First frame (from impact + 3) where speed falls below 15% of the peak."""
        n = smooth_speed.size
        start = impact_frame + self.FINISH_SEARCH_OFFSET
        threshold = peak_speed * self.FINISH_SPEED_RATIO

        if start < n:
            slow = np.nonzero(smooth_speed[start:] < threshold)[0]
            if slow.size:
                return start + int(slow[0])
        return n - 1

    def _find_takeaway(self, shoulder_angle: np.ndarray, top_frame: int) -> int:
        """First frame before the top where the shoulders turn more than 3 degrees."""
        base_angle = shoulder_angle[0]
        for i in range(1, top_frame):
            if abs(shoulder_angle[i] - base_angle) > self.TAKEAWAY_ANGLE_THRESHOLD:
                return i
        return max(1, int(top_frame * 0.1))
