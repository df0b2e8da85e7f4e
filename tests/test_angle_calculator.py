import pytest

from core.domain import BodyPart, PoseFrame, PoseLandmark
from core.services import AngleCalculator


def _lm(x, y, visibility=1.0):
    return PoseLandmark(x=x, y=y, visibility=visibility)


def test_right_angle():
    angle = AngleCalculator.calculate_angle(_lm(0.5, 0.2), _lm(0.5, 0.5), _lm(0.8, 0.5))

    assert angle == pytest.approx(90.0)


def test_straight_line():
    angle = AngleCalculator.calculate_angle(_lm(0.2, 0.5), _lm(0.5, 0.5), _lm(0.8, 0.5))

    assert angle == pytest.approx(180.0)


def test_zero_length_arm_gives_zero():
    assert AngleCalculator.calculate_angle(_lm(0.5, 0.5), _lm(0.5, 0.5), _lm(0.8, 0.5)) == 0.0


def test_horizontal_angle_sign():
    assert AngleCalculator.calculate_horizontal_angle(_lm(0.4, 0.3), _lm(0.6, 0.3)) == 0.0
    # Right point lower on screen
    assert AngleCalculator.calculate_horizontal_angle(_lm(0.4, 0.3), _lm(0.6, 0.5)) == pytest.approx(45.0)


@pytest.mark.parametrize("raw, rounded", [(0.0, 0.0), (2.4, 0.0), (2.5, 5.0), (88.0, 90.0), (-7.6, -10.0)])
def test_round_to_five_degrees(raw, rounded):
    assert AngleCalculator.round_angle(raw) == rounded


def _arm_frame(make_frame, visibility=0.9):
    return make_frame(
        {
            BodyPart.LEFT_SHOULDER: {"x": 0.4, "y": 0.3},
            BodyPart.RIGHT_SHOULDER: {"x": 0.6, "y": 0.32},
            BodyPart.LEFT_ELBOW: {"x": 0.4, "y": 0.45},
            BodyPart.LEFT_WRIST: {"x": 0.52, "y": 0.45},
            BodyPart.RIGHT_ELBOW: {"x": 0.6, "y": 0.45},
            BodyPart.RIGHT_WRIST: {"x": 0.6, "y": 0.6},
            BodyPart.LEFT_HIP: {"x": 0.42, "y": 0.6},
            BodyPart.RIGHT_HIP: {"x": 0.58, "y": 0.6},
            BodyPart.LEFT_KNEE: {"x": 0.42, "y": 0.75},
            BodyPart.LEFT_ANKLE: {"x": 0.42, "y": 0.9},
            BodyPart.RIGHT_KNEE: {"x": 0.6, "y": 0.75},
            BodyPart.RIGHT_ANKLE: {"x": 0.58, "y": 0.9},
        },
        visibility=visibility,
    )


def test_overlay_angles_in_order(make_frame):
    angles = AngleCalculator.calculate_angles(_arm_frame(make_frame))

    assert [a.label for a in angles] == ["Shoulders", "L Elbow", "R Elbow", "Hips", "L Knee", "R Knee"]
    by_label = {a.label: a for a in angles}
    assert by_label["L Elbow"].angle == 90.0
    assert by_label["R Elbow"].angle == 180.0
    assert by_label["Hips"].angle == 0.0
    assert by_label["Shoulders"].angle == 5.0
    assert all(a.angle % 5 == 0 for a in angles)


def test_label_anchors(make_frame):
    angles = {a.label: a for a in AngleCalculator.calculate_angles(_arm_frame(make_frame))}

    assert angles["Shoulders"].x == pytest.approx(0.5)
    assert angles["Shoulders"].y == pytest.approx(0.31 - 0.04)
    assert angles["Hips"].y == pytest.approx(0.6 + 0.04)
    assert angles["L Elbow"].x == pytest.approx(0.4)
    assert angles["L Elbow"].y == pytest.approx(0.45 - 0.03)


def test_low_visibility_joints_are_skipped(make_frame):
    frame = _arm_frame(make_frame)
    frame.landmarks[BodyPart.LEFT_WRIST].visibility = 0.4

    labels = [a.label for a in AngleCalculator.calculate_angles(frame)]

    assert "L Elbow" not in labels
    assert "R Elbow" in labels


def test_reported_visibility_is_the_weakest_joint(make_frame):
    frame = _arm_frame(make_frame)
    frame.landmarks[BodyPart.RIGHT_KNEE].visibility = 0.6

    angles = {a.label: a for a in AngleCalculator.calculate_angles(frame)}

    assert angles["R Knee"].visibility == 0.6


def test_incomplete_frame_has_no_angles(make_frame):
    frame = make_frame()

    assert AngleCalculator.calculate_angles(PoseFrame(landmarks=frame.landmarks[:20])) == []
