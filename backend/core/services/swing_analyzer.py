"""
Swing Analyzer Service

High-level service that ties the pipeline together:

    detector -> smoother -> interpolator -> overlay   (per frame)
    detector -> recording -> phase detector           (per video)

This is the main entry point for analyzing golf swings.
"""

import logging
from typing import Optional, Sequence

from ..domain.pose import PoseFrame, Recording
from ..domain.analysis import SwingSegmentation
from .pose_detector import PoseDetector
from .landmark_smoother import LandmarkSmoother
from .confidence_interpolator import ConfidenceInterpolator
from .swing_phase_detector import SwingPhaseDetector

logger = logging.getLogger(__name__)


class PoseSession:
    """
    Per-video frame cleanup: smoothing followed by confidence repair.

    Create one per active video and reset() it whenever a new video
    is loaded, so no joint state leaks between recordings.

    Usage:
        session = PoseSession()
        for frame in frames:
            clean = session.process(frame, frame.timestamp_ms / 1000)
    """

    def __init__(
        self,
        min_cutoff: float = 1.7,
        beta: float = 0.01,
        d_cutoff: float = 1.0,
        buffer_size: int = 3,
    ):
        self.smoother = LandmarkSmoother(min_cutoff, beta, d_cutoff)
        self.interpolator = ConfidenceInterpolator(buffer_size)
        self.frames_processed = 0

    def process(self, frame: PoseFrame, timestamp: float) -> PoseFrame:
        """
        Clean one detected frame.

        Args:
            frame: Raw detector output (33 landmarks)
            timestamp: Time in seconds

        Returns:
            Smoothed frame with weak joints repaired
        """
        smoothed = self.smoother.smooth(frame, timestamp)
        self.interpolator.push(smoothed)
        self.frames_processed += 1
        return self.interpolator.get_current() or smoothed

    def reset(self) -> None:
        """Start over for a new video."""
        self.smoother.reset()
        self.interpolator.reset()
        logger.debug(f"Pose session reset after {self.frames_processed} frames")
        self.frames_processed = 0


class SwingAnalyzer:
    """
    Segments golf swings into phases from video or frame sequences.

    Usage:
        with PoseDetector() as detector:
            analyzer = SwingAnalyzer(detector)
            result = analyzer.analyze_video("swing.mp4")
        print(result.phase_at_time(1.5))

        # Or from pre-detected frames
        result = SwingAnalyzer().analyze_frames(frames, fps=30)
    """

    def __init__(
        self,
        pose_detector: Optional[PoseDetector] = None,
        phase_detector: Optional[SwingPhaseDetector] = None,
    ):
        self.pose_detector = pose_detector
        self.phase_detector = phase_detector or SwingPhaseDetector()

    # -------------------------------------------------------------------------
    # Main Analysis Methods
    # -------------------------------------------------------------------------

    def analyze_video(self, video_path: str, frame_skip: int = 1) -> SwingSegmentation:
        """
        Segment a golf swing from a video file.

        Args:
            video_path: Path to video file
            frame_skip: Sample every Nth frame (higher = faster but coarser)

        Returns:
            Per-frame phases for the sampled frames
        """
        if self.pose_detector is None:
            raise ValueError("No pose detector configured")

        recording = self.pose_detector.read_recording(video_path, frame_skip)

        if recording.detected_count == 0:
            raise ValueError("No poses detected in video")

        return self.analyze_recording(recording)

    def analyze_recording(self, recording: Recording) -> SwingSegmentation:
        """Segment a recording collected elsewhere."""
        return self.analyze_frames(recording.frames, recording.fps)

    def analyze_frames(
        self,
        frames: Sequence[Optional[PoseFrame]],
        fps: float = 30.0,
    ) -> SwingSegmentation:
        """
        Segment a golf swing from pre-detected pose frames.

        Args:
            frames: One entry per video frame (None = no body found)
            fps: Sampling rate of the frames

        Returns:
            SwingSegmentation with one phase per frame
        """
        result = self.phase_detector.segment(frames, fps)

        if result.events is None:
            logger.info(f"Not enough frames to segment ({len(frames)})")
        else:
            logger.info(
                f"Segmented {len(frames)} frames: "
                f"top={result.events.top_frame} impact={result.events.impact_frame}"
            )
        return result
