"""
Angle Calculator Service

Joint and body-line angles shown as labels on top of the video.
All angles are calculated in degrees.

This is pure mathematics - no external dependencies except numpy.
"""

from typing import List, Optional

import numpy as np

from ..domain.pose import PoseLandmark, PoseFrame, BodyPart, NUM_LANDMARKS
from ..domain.analysis import AngleInfo


class AngleCalculator:
    """
    Calculates overlay angles from pose landmarks.

    Overlay angles:
    - Shoulder line tilt
    - Left / right elbow bend
    - Hip line tilt
    - Left / right knee flex

    All methods are static - no state needed.
    """

    # Minimum joint visibility for an angle label to be shown
    MIN_VISIBILITY = 0.4
    ROUND_STEP = 5

    # Label anchor offsets (normalized units)
    SHOULDER_LABEL_OFFSET = -0.04
    HIP_LABEL_OFFSET = 0.04
    JOINT_LABEL_OFFSET = -0.03

    # -------------------------------------------------------------------------
    # Core Angle Calculations
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate_angle(
        p1: PoseLandmark,
        p2: PoseLandmark,  # Vertex point
        p3: PoseLandmark
    ) -> float:
        """
        Calculate angle at p2 formed by p1-p2-p3.

        Args:
            p1: First point
            p2: Vertex point (where angle is measured)
            p3: Third point

        Returns:
            Angle in degrees (0-180), 0 if either arm has zero length

        Example:
            For elbow angle: shoulder -> elbow -> wrist
            angle = calculate_angle(shoulder, elbow, wrist)
        """
        v1 = np.array([p1.x - p2.x, p1.y - p2.y])
        v2 = np.array([p3.x - p2.x, p3.y - p2.y])

        norm1 = np.linalg.norm(v1)
        norm2 = np.linalg.norm(v2)
        if norm1 == 0 or norm2 == 0:
            return 0.0

        cos_angle = np.dot(v1, v2) / (norm1 * norm2)

        # Clamp to valid range (handles floating point errors)
        cos_angle = np.clip(cos_angle, -1.0, 1.0)

        return float(np.degrees(np.arccos(cos_angle)))

    @staticmethod
    def calculate_horizontal_angle(
        left: PoseLandmark,
        right: PoseLandmark
    ) -> float:
        """
        Angle of the line left -> right against the horizontal.

        0 when both points are level. Positive when the right point
        is lower on screen (image y grows downward).
        """
        return float(np.degrees(np.arctan2(right.y - left.y, right.x - left.x)))

    @classmethod
    def round_angle(cls, angle: float) -> float:
        """Round to the nearest 5 degrees."""
        return float(np.floor(angle / cls.ROUND_STEP + 0.5) * cls.ROUND_STEP)

    # -------------------------------------------------------------------------
    # Overlay Angles
    # -------------------------------------------------------------------------

    @classmethod
    def calculate_angles(cls, frame: PoseFrame) -> List[AngleInfo]:
        """
        Calculate all overlay angles for a frame.

        Only angles whose joints are all visible enough are returned.

        Args:
            frame: PoseFrame with all 33 landmarks

        Returns:
            AngleInfo list, empty for incomplete frames
        """
        if len(frame.landmarks) < NUM_LANDMARKS:
            return []

        angles = []

        shoulders = cls._line_angle(
            frame, "Shoulders",
            BodyPart.LEFT_SHOULDER, BodyPart.RIGHT_SHOULDER,
            cls.SHOULDER_LABEL_OFFSET,
        )
        left_elbow = cls._joint_angle(
            frame, "L Elbow",
            BodyPart.LEFT_SHOULDER, BodyPart.LEFT_ELBOW, BodyPart.LEFT_WRIST,
        )
        right_elbow = cls._joint_angle(
            frame, "R Elbow",
            BodyPart.RIGHT_SHOULDER, BodyPart.RIGHT_ELBOW, BodyPart.RIGHT_WRIST,
        )
        hips = cls._line_angle(
            frame, "Hips",
            BodyPart.LEFT_HIP, BodyPart.RIGHT_HIP,
            cls.HIP_LABEL_OFFSET,
        )
        left_knee = cls._joint_angle(
            frame, "L Knee",
            BodyPart.LEFT_HIP, BodyPart.LEFT_KNEE, BodyPart.LEFT_ANKLE,
        )
        right_knee = cls._joint_angle(
            frame, "R Knee",
            BodyPart.RIGHT_HIP, BodyPart.RIGHT_KNEE, BodyPart.RIGHT_ANKLE,
        )

        for info in (shoulders, left_elbow, right_elbow, hips, left_knee, right_knee):
            if info is not None:
                angles.append(info)

        return angles

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    @classmethod
    def _line_angle(
        cls,
        frame: PoseFrame,
        label: str,
        left_part: BodyPart,
        right_part: BodyPart,
        label_offset: float,
    ) -> Optional[AngleInfo]:
        left = frame.landmarks[left_part]
        right = frame.landmarks[right_part]

        vis = min(left.visibility, right.visibility)
        if vis <= cls.MIN_VISIBILITY:
            return None

        return AngleInfo(
            label=label,
            angle=cls.round_angle(cls.calculate_horizontal_angle(left, right)),
            x=(left.x + right.x) / 2,
            y=(left.y + right.y) / 2 + label_offset,
            visibility=vis,
        )

    @classmethod
    def _joint_angle(
        cls,
        frame: PoseFrame,
        label: str,
        first: BodyPart,
        vertex: BodyPart,
        last: BodyPart,
    ) -> Optional[AngleInfo]:
        p1 = frame.landmarks[first]
        p2 = frame.landmarks[vertex]
        p3 = frame.landmarks[last]

        vis = min(p1.visibility, p2.visibility, p3.visibility)
        if vis <= cls.MIN_VISIBILITY:
            return None

        return AngleInfo(
            label=label,
            angle=cls.round_angle(cls.calculate_angle(p1, p2, p3)),
            x=p2.x,
            y=p2.y + cls.JOINT_LABEL_OFFSET,
            visibility=vis,
        )
