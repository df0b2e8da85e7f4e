import pytest
from fastapi.testclient import TestClient

from main import app
from api.routes import get_pose_detector
from core.domain import PoseFrame, PoseLandmark, BodyPart, Recording, NUM_LANDMARKS


def build_frame(overrides=None, visibility=0.9, timestamp_ms=0, frame_number=0):
    """
    33 landmarks standing at the centre of the frame.

    overrides maps BodyPart -> dict of PoseLandmark fields.
    """
    overrides = overrides or {}
    landmarks = []
    for i in range(NUM_LANDMARKS):
        part = BodyPart(i)
        fields = {"x": 0.5, "y": 0.5, "z": 0.0, "visibility": visibility}
        fields.update(overrides.get(part, {}))
        landmarks.append(PoseLandmark(body_part=part, **fields))
    return PoseFrame.from_landmarks(landmarks, timestamp_ms=timestamp_ms, frame_number=frame_number)


def swing_wrist_y(i):
    # Address, backswing (hands rise 6 -> 18), sharp downswing, follow-through, plateau
    if i < 6:
        return 0.7
    if i <= 18:
        return 0.7 - (i - 6) * 0.03
    if i <= 22:
        return {19: 0.36, 20: 0.5, 21: 0.62, 22: 0.7}[i]
    if i <= 30:
        return 0.7 - (i - 22) * 0.025
    return 0.5


def swing_wrist_x(i):
    # Lateral hand speed spikes at frame 20
    return 0.5 if i < 20 else 0.8


def swing_shoulder_drop(i):
    # Trail shoulder dips as the shoulders turn, starting at frame 6
    if i < 6:
        return 0.0
    return 0.02 * (min(i, 18) - 5)


def build_swing_frame(i, fps=30.0):
    return build_frame(
        {
            BodyPart.LEFT_WRIST: {"x": swing_wrist_x(i), "y": swing_wrist_y(i), "visibility": 0.9},
            BodyPart.RIGHT_WRIST: {"x": 0.3, "y": 0.9, "visibility": 0.1},
            BodyPart.LEFT_SHOULDER: {"x": 0.4, "y": 0.3},
            BodyPart.RIGHT_SHOULDER: {"x": 0.6, "y": 0.3 + swing_shoulder_drop(i)},
        },
        timestamp_ms=int(i / fps * 1000),
        frame_number=i,
    )


@pytest.fixture
def make_frame():
    return build_frame


@pytest.fixture
def swing_frames():
    """60 frames at 30 fps: top at 18, impact at 20, still after 30."""
    return [build_swing_frame(i) for i in range(60)]


def frame_to_json(frame):
    return [
        {"x": lm.x, "y": lm.y, "z": lm.z, "visibility": lm.visibility}
        for lm in frame.landmarks
    ]


@pytest.fixture
def swing_frames_json(swing_frames):
    return [frame_to_json(f) for f in swing_frames]


class FakePoseDetector:
    """Stands in for MediaPipe: returns canned frames."""

    def __init__(self, frame=None, recording=None):
        self.frame = frame
        self.recording = recording
        self.ready = True
        self.video_calls = []

    def is_ready(self):
        return self.ready

    def detect_from_base64(self, base64_image, timestamp_ms=0, frame_number=0):
        return self.frame

    def read_recording(self, video_path, frame_skip=1):
        self.video_calls.append((video_path, frame_skip))
        return self.recording


@pytest.fixture
def fake_detector(swing_frames):
    detector = FakePoseDetector(
        frame=build_frame(
            {
                BodyPart.LEFT_SHOULDER: {"x": 0.4, "y": 0.3},
                BodyPart.RIGHT_SHOULDER: {"x": 0.6, "y": 0.3},
            }
        ),
        recording=Recording(frames=[None] + swing_frames[1:], fps=30.0),
    )
    return detector


@pytest.fixture
def client(fake_detector):
    app.dependency_overrides[get_pose_detector] = lambda: fake_detector
    # Not probed yet
    app.state.mediapipe_available = None
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()
    app.state.mediapipe_available = None
