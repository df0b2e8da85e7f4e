"""
Swing Analysis Domain Models

Data structures for representing swing phase segmentation results
and the angle overlay shown on top of the video.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SwingPhase(Enum):
    """
    The seven phases of a golf swing, plus a fallback.

    Each phase has specific kinematic characteristics:
    - ADDRESS: Setup position, shoulders still level with the start
    - TAKEAWAY: Shoulders start turning, hands moving back and up
    - TOP: Highest point of the hand path
    - DOWNSWING: Hands dropping back towards the ball
    - IMPACT: Fastest lateral hand motion
    - FOLLOW: After impact, decelerating
    - FINISH: Hands have come to rest

    UNKNOWN is used when there is not enough data to segment.
    """
    ADDRESS = "address"
    TAKEAWAY = "takeaway"
    TOP = "top"
    DOWNSWING = "downswing"
    IMPACT = "impact"
    FOLLOW = "follow"
    FINISH = "finish"

    UNKNOWN = "unknown"

    @property
    def order(self) -> int:
        """Position in the swing sequence (-1 for UNKNOWN)."""
        if self is SwingPhase.UNKNOWN:
            return -1
        return SWING_ORDER.index(self)


# Phases in the order they occur during a swing
SWING_ORDER = (
    SwingPhase.ADDRESS,
    SwingPhase.TAKEAWAY,
    SwingPhase.TOP,
    SwingPhase.DOWNSWING,
    SwingPhase.IMPACT,
    SwingPhase.FOLLOW,
    SwingPhase.FINISH,
)


@dataclass(frozen=True)
class PhaseInfo:
    """Display metadata for a phase (timeline band and label chip)."""
    phase: SwingPhase
    label: str
    color: str


PHASE_INFO: dict[SwingPhase, PhaseInfo] = {
    SwingPhase.ADDRESS: PhaseInfo(SwingPhase.ADDRESS, "Address", "#88ccff"),
    SwingPhase.TAKEAWAY: PhaseInfo(SwingPhase.TAKEAWAY, "Takeaway", "#66ddaa"),
    SwingPhase.TOP: PhaseInfo(SwingPhase.TOP, "Top", "#ffcc44"),
    SwingPhase.DOWNSWING: PhaseInfo(SwingPhase.DOWNSWING, "Downswing", "#ff8844"),
    SwingPhase.IMPACT: PhaseInfo(SwingPhase.IMPACT, "Impact", "#ff4466"),
    SwingPhase.FOLLOW: PhaseInfo(SwingPhase.FOLLOW, "Follow-through", "#cc66ff"),
    SwingPhase.FINISH: PhaseInfo(SwingPhase.FINISH, "Finish", "#8888ff"),
    SwingPhase.UNKNOWN: PhaseInfo(SwingPhase.UNKNOWN, "---", "#666666"),
}


def get_phase_info(phase: SwingPhase) -> PhaseInfo:
    """Get display metadata for a phase."""
    return PHASE_INFO[phase]


@dataclass
class SwingEvents:
    """
    Key frame indices located by the phase detector.

    Attributes:
        takeaway_frame: First frame where the shoulders start to turn
        top_frame: Highest hand position (top of backswing)
        impact_frame: Fastest lateral hand motion after the top
        finish_frame: First frame where hand speed has died down
        peak_speed: Smoothed horizontal wrist speed at impact (units/second)
    """
    takeaway_frame: int
    top_frame: int
    impact_frame: int
    finish_frame: int
    peak_speed: float = 0.0


@dataclass
class SwingSegmentation:
    """
    Per-frame phase labels for a whole recording.

    This is the main result object returned after segmenting a swing.
    """
    phases: list[SwingPhase] = field(default_factory=list)
    fps: float = 30.0
    events: Optional[SwingEvents] = None
    detected_frames: int = 0

    def __len__(self) -> int:
        return len(self.phases)

    @property
    def duration_ms(self) -> int:
        if self.fps <= 0:
            return 0
        return int(len(self.phases) / self.fps * 1000)

    def phase_at_time(self, seconds: float) -> SwingPhase:
        """
        Look up the phase shown at a playback position.

        The frame index is the nearest sample (half rounds up),
        clamped to the recording.
        """
        if not self.phases:
            return SwingPhase.UNKNOWN
        index = int(math.floor(seconds * self.fps + 0.5))
        index = max(0, min(index, len(self.phases) - 1))
        return self.phases[index]

    @property
    def key_frames(self) -> dict[SwingPhase, int]:
        """First frame index carrying each (known) phase."""
        first: dict[SwingPhase, int] = {}
        for index, phase in enumerate(self.phases):
            if phase is not SwingPhase.UNKNOWN and phase not in first:
                first[phase] = index
        return first


@dataclass
class AngleInfo:
    """
    One angle label for the video overlay.

    Attributes:
        label: Short display name (e.g. "L Elbow")
        angle: Angle in degrees, rounded to 5 degree steps
        x: Horizontal label anchor (normalized)
        y: Vertical label anchor (normalized)
        visibility: Lowest visibility of the joints involved
    """
    label: str
    angle: float
    x: float
    y: float
    visibility: float
