"""
Landmark Smoother Service

Adaptive low-pass filtering of landmark coordinates (One Euro filter).
Strong smoothing while a joint is still, fast tracking while it moves -
a good match for a golf swing, which is mostly static with one burst
of very fast motion.

Reference:
    Casiez et al., "1 Euro Filter: A Simple Speed-based Low-pass Filter
    for Noisy Input in Interactive Systems", CHI 2012.
"""

import logging
from dataclasses import replace
from typing import Tuple

import numpy as np

from ..domain.pose import PoseFrame, PoseLandmark, NUM_LANDMARKS

logger = logging.getLogger(__name__)

# x, y, z
NUM_AXES = 3


class OneEuroFilter:
    """
    One Euro filter over a fixed-shape array of independent channels.

    Every element of the array is its own channel with its own
    filtered value, derivative estimate and last timestamp.

    Args:
        shape: Shape of the channel array
        min_cutoff: Cutoff frequency (Hz) when the signal is still
        beta: Speed coefficient - how much the cutoff rises with speed
        d_cutoff: Cutoff frequency (Hz) for the derivative estimate
    """

    def __init__(
        self,
        shape: Tuple[int, ...],
        min_cutoff: float = 1.0,
        beta: float = 0.007,
        d_cutoff: float = 1.0,
    ):
        self.shape = shape
        self.min_cutoff = min_cutoff
        self.beta = beta
        self.d_cutoff = d_cutoff
        self.reset()

    def reset(self) -> None:
        """Forget all history; the next sample passes through unchanged."""
        self._x_prev = np.zeros(self.shape)
        self._dx_prev = np.zeros(self.shape)
        # NaN marks a channel that has never seen a sample
        self._t_prev = np.full(self.shape, np.nan)

    @staticmethod
    def _alpha(te: np.ndarray, cutoff) -> np.ndarray:
        r = 2 * np.pi * cutoff * te
        return r / (r + 1)

    def __call__(self, x: np.ndarray, t: float) -> np.ndarray:
        """
        Filter one sample for every channel.

        Args:
            x: Raw values, same shape as the filter
            t: Timestamp in seconds

        Returns:
            Filtered values (new array)
        """
        x = np.asarray(x, dtype=float)
        if x.shape != self.shape:
            raise ValueError(f"Expected shape {self.shape}, got {x.shape}")

        fresh = np.isnan(self._t_prev)
        te = np.where(fresh, 0.0, t - np.nan_to_num(self._t_prev))
        active = ~fresh & (te > 0)

        # Channels with dt <= 0 keep their last filtered value
        out = self._x_prev.copy()

        if fresh.any():
            out[fresh] = x[fresh]
            self._x_prev[fresh] = x[fresh]
            self._t_prev[fresh] = t

        if active.any():
            te_a = te[active]
            x_a = x[active]
            x_prev = self._x_prev[active]

            dx = (x_a - x_prev) / te_a
            a_d = self._alpha(te_a, self.d_cutoff)
            dx_hat = a_d * dx + (1 - a_d) * self._dx_prev[active]

            cutoff = self.min_cutoff + self.beta * np.abs(dx_hat)
            a = self._alpha(te_a, cutoff)
            x_hat = a * x_a + (1 - a) * x_prev

            out[active] = x_hat
            self._x_prev[active] = x_hat
            self._dx_prev[active] = dx_hat
            self._t_prev[active] = t

        return out


class LandmarkSmoother:
    """
    Smooths all 33 landmarks (x, y, z) of a pose frame by frame.

    Each of the 99 coordinate channels is filtered independently.
    Visibility is passed through untouched.

    Usage:
        smoother = LandmarkSmoother()
        for frame, t in frames:
            smoothed = smoother.smooth(frame, t)

        # New video: no state must leak across recordings
        smoother.reset()

    Not thread-safe; one instance per video session.
    """

    def __init__(
        self,
        min_cutoff: float = 1.7,
        beta: float = 0.01,
        d_cutoff: float = 1.0,
    ):
        """
        Args:
            min_cutoff: Cutoff at low speed (lower = stronger smoothing)
            beta: Speed coefficient (higher = less lag on fast motion)
            d_cutoff: Derivative cutoff frequency
        """
        self._filter = OneEuroFilter(
            (NUM_LANDMARKS, NUM_AXES),
            min_cutoff=min_cutoff,
            beta=beta,
            d_cutoff=d_cutoff,
        )

    @property
    def min_cutoff(self) -> float:
        return self._filter.min_cutoff

    @property
    def beta(self) -> float:
        return self._filter.beta

    def smooth(self, frame: PoseFrame, timestamp: float) -> PoseFrame:
        """
        Filter one frame.

        Args:
            frame: Pose frame with 33 landmarks
            timestamp: Time in seconds

        Returns:
            New PoseFrame with filtered coordinates
        """
        if not frame.is_complete:
            raise ValueError(
                f"Expected {NUM_LANDMARKS} landmarks, got {len(frame.landmarks)}"
            )

        raw = np.array([[lm.x, lm.y, lm.z] for lm in frame.landmarks])
        filtered = self._filter(raw, timestamp)

        landmarks = [
            PoseLandmark(
                x=float(filtered[i, 0]),
                y=float(filtered[i, 1]),
                z=float(filtered[i, 2]),
                visibility=lm.visibility,
                body_part=lm.body_part,
            )
            for i, lm in enumerate(frame.landmarks)
        ]
        return replace(frame, landmarks=landmarks)

    def reset(self) -> None:
        """Discard all channel state."""
        self._filter.reset()
        logger.debug("Landmark smoother reset")
