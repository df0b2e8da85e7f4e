"""
Services Layer

Business logic services for golf swing analysis.
These services orchestrate domain models and external dependencies.
"""

from .pose_detector import PoseDetector
from .angle_calculator import AngleCalculator
from .landmark_smoother import LandmarkSmoother, OneEuroFilter
from .confidence_interpolator import ConfidenceInterpolator
from .swing_phase_detector import SwingPhaseDetector, moving_average
from .swing_analyzer import PoseSession, SwingAnalyzer

__all__ = [
    "PoseDetector",
    "AngleCalculator",
    "LandmarkSmoother",
    "OneEuroFilter",
    "ConfidenceInterpolator",
    "SwingPhaseDetector",
    "moving_average",
    "PoseSession",
    "SwingAnalyzer",
]
