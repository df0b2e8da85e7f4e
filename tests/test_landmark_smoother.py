import numpy as np
import pytest

from core.domain import BodyPart, PoseFrame
from core.services import LandmarkSmoother, OneEuroFilter


def test_first_sample_passes_through(make_frame):
    """A fresh smoother returns the first frame unchanged."""
    smoother = LandmarkSmoother()
    frame = make_frame({BodyPart.NOSE: {"x": 0.31, "y": 0.27, "z": -0.2}})

    result = smoother.smooth(frame, 0.0)

    for raw, out in zip(frame.landmarks, result.landmarks):
        assert out.x == raw.x
        assert out.y == raw.y
        assert out.z == raw.z


def test_first_sample_after_reset_passes_through(make_frame):
    smoother = LandmarkSmoother()
    smoother.smooth(make_frame(), 0.0)
    smoother.smooth(make_frame({BodyPart.NOSE: {"x": 0.9}}), 0.1)

    smoother.reset()
    frame = make_frame({BodyPart.NOSE: {"x": 0.1}})
    result = smoother.smooth(frame, 5.0)

    assert result.landmarks[BodyPart.NOSE].x == 0.1


def test_static_input_converges(make_frame):
    """Feeding a constant value drives the output to that value."""
    smoother = LandmarkSmoother()
    smoother.smooth(make_frame({BodyPart.LEFT_WRIST: {"x": 0.2}}), 0.0)

    target = make_frame({BodyPart.LEFT_WRIST: {"x": 0.8}})
    errors = []
    for step in range(1, 200):
        result = smoother.smooth(target, step / 30)
        errors.append(abs(result.landmarks[BodyPart.LEFT_WRIST].x - 0.8))

    assert errors[-1] < 1e-6
    assert all(later <= earlier for earlier, later in zip(errors[:30], errors[1:30]))


def test_non_increasing_timestamp_returns_previous_value(make_frame):
    smoother = LandmarkSmoother()
    smoother.smooth(make_frame(), 0.0)
    first = smoother.smooth(make_frame({BodyPart.NOSE: {"y": 0.9}}), 0.1)

    repeated = smoother.smooth(make_frame({BodyPart.NOSE: {"y": 0.1}}), 0.1)
    backwards = smoother.smooth(make_frame({BodyPart.NOSE: {"y": 0.2}}), 0.05)

    assert repeated.landmarks[BodyPart.NOSE].y == first.landmarks[BodyPart.NOSE].y
    assert backwards.landmarks[BodyPart.NOSE].y == first.landmarks[BodyPart.NOSE].y


def test_filtered_value_lies_between_previous_and_raw(make_frame):
    smoother = LandmarkSmoother()
    smoother.smooth(make_frame({BodyPart.NOSE: {"x": 0.4}}), 0.0)

    result = smoother.smooth(make_frame({BodyPart.NOSE: {"x": 0.6}}), 1 / 30)

    assert 0.4 < result.landmarks[BodyPart.NOSE].x < 0.6


def test_fast_motion_tracks_closer_than_slow_motion():
    """Higher apparent speed raises the cutoff and reduces lag."""
    slow = OneEuroFilter((1,), min_cutoff=1.7, beta=0.01)
    fast = OneEuroFilter((1,), min_cutoff=1.7, beta=0.01)

    dt = 1 / 30
    slow(np.array([0.0]), 0.0)
    fast(np.array([0.0]), 0.0)
    for step in range(1, 6):
        slow_out = slow(np.array([step * 0.001]), step * dt)
        fast_out = fast(np.array([step * 10.0]), step * dt)

    slow_lag = (5 * 0.001 - slow_out[0]) / (5 * 0.001)
    fast_lag = (5 * 10.0 - fast_out[0]) / (5 * 10.0)
    assert fast_lag < slow_lag


def test_visibility_is_not_filtered(make_frame):
    smoother = LandmarkSmoother()
    smoother.smooth(make_frame(visibility=0.9), 0.0)

    result = smoother.smooth(make_frame(visibility=0.2), 0.1)

    assert all(lm.visibility == 0.2 for lm in result.landmarks)


def test_channels_are_independent(make_frame):
    smoother = LandmarkSmoother()
    smoother.smooth(make_frame(), 0.0)

    result = smoother.smooth(make_frame({BodyPart.LEFT_KNEE: {"z": 0.7}}), 0.1)

    assert result.landmarks[BodyPart.LEFT_KNEE].z > 0.0
    assert result.landmarks[BodyPart.LEFT_KNEE].x == pytest.approx(0.5)
    assert result.landmarks[BodyPart.RIGHT_KNEE].z == 0.0


def test_input_frame_is_not_modified(make_frame):
    smoother = LandmarkSmoother()
    smoother.smooth(make_frame(), 0.0)
    frame = make_frame({BodyPart.NOSE: {"x": 0.9}})

    result = smoother.smooth(frame, 0.1)

    assert frame.landmarks[BodyPart.NOSE].x == 0.9
    assert result is not frame
    assert result.timestamp_ms == frame.timestamp_ms


def test_wrong_landmark_count_is_rejected(make_frame):
    smoother = LandmarkSmoother()
    frame = make_frame()

    with pytest.raises(ValueError):
        smoother.smooth(PoseFrame(landmarks=frame.landmarks[:10]), 0.0)
