"""
WebSocket Handler

Real-time pose cleanup via WebSocket connection.
The frontend streams frames (landmarks from a browser-side detector,
or raw images for server-side detection) and receives smoothed,
confidence-repaired landmarks plus overlay angles.
"""

import json
import time
import logging
from typing import Optional

from fastapi import WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState
from pydantic import ValidationError

from .schemas import (
    WebSocketMessageType,
    WebSocketMessage,
    FrameMessage,
    PoseResultMessage,
)
from .routes import landmarks_to_frame, pose_frame_to_schema, angles_to_schema
from config import settings
from core.services import PoseDetector, PoseSession, AngleCalculator

# Configure logging
logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ConnectionManager:
    """
    Manages WebSocket connections.

    Every connection owns its own PoseSession (smoothing state) and,
    once it sends an image, its own PoseDetector.
    """

    def __init__(self):
        self.active_connections: list[WebSocket] = []
        self.sessions: dict[WebSocket, PoseSession] = {}
        self.pose_detectors: dict[WebSocket, PoseDetector] = {}

    async def connect(self, websocket: WebSocket) -> None:
        """Accept new WebSocket connection."""
        await websocket.accept()
        self.active_connections.append(websocket)

        self.sessions[websocket] = PoseSession(
            min_cutoff=settings.smoother_min_cutoff,
            beta=settings.smoother_beta,
            d_cutoff=settings.smoother_d_cutoff,
            buffer_size=settings.interpolator_buffer_size,
        )

        logger.info(f"New WebSocket connection. Total: {len(self.active_connections)}")

    def disconnect(self, websocket: WebSocket) -> None:
        """Handle WebSocket disconnection."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

        self.sessions.pop(websocket, None)

        detector = self.pose_detectors.pop(websocket, None)
        if detector is not None:
            detector.dispose()

        logger.info(f"WebSocket disconnected. Remaining: {len(self.active_connections)}")

    def get_session(self, websocket: WebSocket) -> Optional[PoseSession]:
        """Get smoothing session for a connection."""
        return self.sessions.get(websocket)

    def get_detector(self, websocket: WebSocket) -> PoseDetector:
        """Get (loading on first use) the pose detector for a connection."""
        detector = self.pose_detectors.get(websocket)
        if detector is None:
            detector = PoseDetector(
                model_complexity=settings.model_complexity,
                min_detection_confidence=settings.min_detection_confidence,
                min_tracking_confidence=settings.min_tracking_confidence,
            )
            detector.init()
            self.pose_detectors[websocket] = detector
        return detector

    async def send_json(self, websocket: WebSocket, data: dict) -> None:
        """Send JSON data to a specific connection."""
        try:
            await websocket.send_json(data)
        except Exception as e:
            logger.error(f"Failed to send WebSocket message: {e}")

    async def send_message(
        self,
        websocket: WebSocket,
        msg_type: WebSocketMessageType,
        data: dict,
    ) -> None:
        """Wrap a payload in the standard message envelope and send it."""
        message = WebSocketMessage(type=msg_type, data=data, timestamp=_now_ms())
        await self.send_json(websocket, message.model_dump(mode="json"))

    async def send_error(self, websocket: WebSocket, error: str) -> None:
        await self.send_message(websocket, WebSocketMessageType.ERROR, {"error": error})


# Global connection manager
manager = ConnectionManager()


async def websocket_endpoint(websocket: WebSocket) -> None:
    """
    WebSocket endpoint for real-time pose cleanup.

    Protocol:
    1. Client connects
    2. Client sends start_session whenever a new video is loaded
    3. Client sends frames (landmarks or base64 images)
    4. Server responds with smoothed landmarks and angles
    5. Client sends end_session or disconnects when done

    Message format (client -> server):
    {
        "type": "frame",
        "data": {
            "landmarks": [{"x": 0.5, "y": 0.2, "z": 0.0, "visibility": 0.9}, ...],
            "frame_number": 0
        },
        "timestamp": 1500
    }

    "timestamp" is the video time in milliseconds.

    Message format (server -> client):
    {
        "type": "pose_result",
        "data": {
            "frame_number": 0,
            "pose": { ... },
            "angles": [ ... ],
            "processing_time_ms": 25.5
        },
        "timestamp": 1704067200025
    }
    """
    await manager.connect(websocket)

    try:
        await manager.send_message(
            websocket,
            WebSocketMessageType.SESSION_STARTED,
            {"message": "Connected to swing overlay pose stream"},
        )

        # Main message loop
        while True:
            try:
                data = await websocket.receive_json()

                if not isinstance(data, dict):
                    await manager.send_error(websocket, "Message must be a JSON object")
                    continue

                msg_type = data.get("type")

                if msg_type == WebSocketMessageType.FRAME.value:
                    await handle_frame(websocket, data)

                elif msg_type == WebSocketMessageType.START_SESSION.value:
                    session = manager.get_session(websocket)
                    if session is not None:
                        session.reset()
                    await manager.send_message(
                        websocket,
                        WebSocketMessageType.SESSION_STARTED,
                        {"message": "Session reset"},
                    )

                elif msg_type == WebSocketMessageType.END_SESSION.value:
                    await manager.send_message(
                        websocket,
                        WebSocketMessageType.SESSION_ENDED,
                        {"message": "Session ended"},
                    )
                    break

                else:
                    await manager.send_error(websocket, f"Unknown message type: {msg_type}")

            except json.JSONDecodeError:
                await manager.send_error(websocket, "Invalid JSON")

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        manager.disconnect(websocket)
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close()


async def handle_frame(websocket: WebSocket, message: dict) -> None:
    """
    Clean one frame and send back the overlay data.
    """
    start_time = time.time()

    try:
        frame_message = FrameMessage(**message.get("data", {}))
    except ValidationError as e:
        await manager.send_error(websocket, f"Invalid frame: {e.errors()[0]['msg']}")
        return
    except TypeError:
        await manager.send_error(websocket, "Invalid frame: data must be an object")
        return

    session = manager.get_session(websocket)
    if session is None:
        await manager.send_error(websocket, "Session not initialized")
        return

    try:
        timestamp_ms = int(message.get("timestamp", 0))
    except (TypeError, ValueError):
        await manager.send_error(websocket, f"Invalid timestamp: {message.get('timestamp')!r}")
        return

    try:
        if frame_message.landmarks is not None:
            pose_frame = landmarks_to_frame(
                frame_message.landmarks,
                timestamp_ms=timestamp_ms,
                frame_number=frame_message.frame_number,
            )
        elif frame_message.image_base64:
            detector = manager.get_detector(websocket)
            # The detector needs strictly increasing stream time,
            # independent of where the client seeks in the video
            pose_frame = detector.detect_from_base64(
                frame_message.image_base64,
                timestamp_ms=_now_ms(),
                frame_number=frame_message.frame_number,
            )
            if pose_frame is not None:
                pose_frame.timestamp_ms = timestamp_ms
        else:
            await manager.send_error(websocket, "No image or landmark data provided")
            return

        pose_schema = None
        angles = []
        if pose_frame is not None:
            cleaned = session.process(pose_frame, timestamp_ms / 1000)
            pose_schema = pose_frame_to_schema(cleaned)
            angles = angles_to_schema(AngleCalculator.calculate_angles(cleaned))

        processing_time = (time.time() - start_time) * 1000

        result = PoseResultMessage(
            frame_number=frame_message.frame_number,
            pose=pose_schema,
            angles=angles,
            processing_time_ms=processing_time,
        )

        await manager.send_message(
            websocket,
            WebSocketMessageType.POSE_RESULT,
            result.model_dump(),
        )

    except Exception as e:
        logger.error(f"Frame processing error: {e}")
        await manager.send_error(websocket, str(e))
