import numpy as np
import pytest

from core.domain import BodyPart, PoseFrame, SwingPhase, SWING_ORDER
from core.services import SwingPhaseDetector, moving_average


@pytest.fixture
def detector():
    return SwingPhaseDetector()


def test_moving_average_is_centered_with_partial_edges():
    result = moving_average([3.0, 6.0, 9.0, 0.0], 3)

    assert result.tolist() == pytest.approx([4.5, 6.0, 5.0, 4.5])


def test_moving_average_of_empty_input():
    assert moving_average([], 3).size == 0


@pytest.mark.parametrize("n", [0, 1, 4])
def test_short_recording_is_all_unknown(detector, make_frame, n):
    phases = detector.analyze([make_frame() for _ in range(n)], fps=30)

    assert phases == [SwingPhase.UNKNOWN] * n


def test_short_recording_has_no_events(detector, make_frame):
    result = detector.segment([make_frame()] * 4, fps=30)

    assert result.events is None
    assert result.key_frames == {}


def test_synthetic_swing_key_frames(detector, swing_frames):
    events = detector.detect_events(swing_frames, fps=30)

    assert events.top_frame == 18
    assert events.impact_frame == 20
    assert 23 <= events.finish_frame <= 30
    assert events.takeaway_frame == 6
    assert events.peak_speed > 0


def test_synthetic_swing_labels(detector, swing_frames):
    phases = detector.analyze(swing_frames, fps=30)

    assert len(phases) == 60
    assert phases[:6] == [SwingPhase.ADDRESS] * 6
    assert phases[6:18] == [SwingPhase.TAKEAWAY] * 12
    assert phases[18] == SwingPhase.TOP
    assert phases[19] == SwingPhase.DOWNSWING
    assert phases[20:22] == [SwingPhase.IMPACT] * 2
    assert phases[-1] == SwingPhase.FINISH

    seen = [p for i, p in enumerate(phases) if i == 0 or phases[i - 1] != p]
    assert seen == list(SWING_ORDER)


def _assert_non_decreasing(phases):
    orders = [p.order for p in phases]
    assert all(a <= b for a, b in zip(orders, orders[1:]))


def test_labels_never_regress(detector, swing_frames):
    _assert_non_decreasing(detector.analyze(swing_frames, fps=30))


@pytest.mark.parametrize("seed", range(8))
def test_labels_never_regress_on_noise(detector, make_frame, seed):
    rng = np.random.default_rng(seed)
    n = int(rng.integers(5, 80))
    frames = []
    for _ in range(n):
        if rng.random() < 0.1:
            frames.append(None)
            continue
        frames.append(make_frame({
            BodyPart.LEFT_WRIST: {"x": rng.random(), "y": rng.random(), "visibility": rng.random()},
            BodyPart.RIGHT_WRIST: {"x": rng.random(), "y": rng.random(), "visibility": rng.random()},
            BodyPart.LEFT_SHOULDER: {"y": rng.random(), "visibility": rng.random()},
            BodyPart.RIGHT_SHOULDER: {"x": 0.7, "visibility": rng.random()},
        }))

    phases = detector.analyze(frames, fps=30)

    assert len(phases) == n
    assert SwingPhase.UNKNOWN not in phases
    _assert_non_decreasing(phases)


def test_absent_and_empty_frames_are_tolerated(detector, swing_frames):
    frames = list(swing_frames)
    frames[40] = None
    frames[45] = PoseFrame(landmarks=[])

    phases = detector.analyze(frames, fps=30)

    assert len(phases) == 60
    _assert_non_decreasing(phases)


def test_more_confident_wrist_is_followed(detector, swing_frames, make_frame):
    """Swapping which wrist carries the swing does not change the result."""
    mirrored = []
    for frame in swing_frames:
        left = frame.landmarks[BodyPart.LEFT_WRIST]
        right = frame.landmarks[BodyPart.RIGHT_WRIST]
        mirrored.append(make_frame({
            BodyPart.RIGHT_WRIST: {"x": left.x, "y": left.y, "visibility": left.visibility},
            BodyPart.LEFT_WRIST: {"x": right.x, "y": right.y, "visibility": right.visibility},
            BodyPart.LEFT_SHOULDER: {"x": 0.4, "y": frame.landmarks[BodyPart.LEFT_SHOULDER].y},
            BodyPart.RIGHT_SHOULDER: {"x": 0.6, "y": frame.landmarks[BodyPart.RIGHT_SHOULDER].y},
        }))

    assert detector.analyze(mirrored, fps=30) == detector.analyze(swing_frames, fps=30)


def test_takeaway_defaults_without_shoulder_turn(detector, swing_frames, make_frame):
    """Unreliable shoulders give no angle; takeaway falls back to 10% of the top."""
    frames = []
    for frame in swing_frames:
        wrist = frame.landmarks[BodyPart.LEFT_WRIST]
        frames.append(make_frame({
            BodyPart.LEFT_WRIST: {"x": wrist.x, "y": wrist.y, "visibility": 0.9},
            BodyPart.RIGHT_WRIST: {"visibility": 0.1},
            BodyPart.LEFT_SHOULDER: {"visibility": 0.2},
            BodyPart.RIGHT_SHOULDER: {"y": 0.9, "visibility": 0.2},
        }))

    events = detector.detect_events(frames, fps=30)

    assert events.takeaway_frame == 1


def test_no_lateral_motion_defaults(detector, make_frame):
    frames = [
        make_frame({BodyPart.LEFT_WRIST: {"y": 0.8 - 0.01 * i if i < 10 else 0.7}})
        for i in range(20)
    ]

    events = detector.detect_events(frames, fps=30)

    assert events.impact_frame == events.top_frame + 1
    assert events.peak_speed == 0.0
    assert events.finish_frame == 19


def test_analysis_is_deterministic(detector, swing_frames):
    assert detector.analyze(swing_frames, 30) == detector.analyze(swing_frames, 30)


def test_non_positive_fps_is_rejected(detector, swing_frames):
    with pytest.raises(ValueError):
        detector.analyze(swing_frames, fps=0)
