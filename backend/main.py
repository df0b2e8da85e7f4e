"""
Swing Overlay Backend API

FastAPI application that cleans up pose landmarks for the skeleton
overlay and segments golf swing videos into phases.

Run with:
    uvicorn main:app --reload --host 0.0.0.0 --port 8000

API docs available at:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from api.routes import router as api_router, probe_mediapipe
from api.websocket import websocket_endpoint

# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan (startup/shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup code before app starts accepting requests,
    and cleanup code when app shuts down.
    """
    logger.info(f"{settings.app_name} starting up...")
    logger.info("API docs: http://localhost:8000/docs")
    logger.info("WebSocket: ws://localhost:8000/ws/pose")

    # Test MediaPipe availability once; /api/health reports the result
    app.state.mediapipe_available = probe_mediapipe()
    logger.info(f"MediaPipe initialized: {app.state.mediapipe_available}")

    yield  # App runs here

    logger.info(f"{settings.app_name} shutting down...")


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="""
    **Golf swing skeleton overlay backend**

    ## Features

    - **Landmark smoothing** (One Euro filter) without lag on the fast part of the swing
    - **Confidence repair** of briefly occluded joints
    - **Swing phase segmentation** (address, takeaway, top, downswing, impact, follow, finish)
    - **Angle overlay** for shoulders, elbows, hips and knees

    ## Endpoints

    - `GET /api/health` - Health check
    - `GET /api/phases` - Phase labels and colours
    - `POST /api/pose/detect` - Single image pose detection
    - `POST /api/analysis/frames` - Segment pre-detected frames
    - `POST /api/analysis/video` - Segment an uploaded video
    - `WS /ws/pose` - Real-time landmark cleanup stream
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# CORS Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Routes
# =============================================================================

app.include_router(api_router, prefix="/api")

app.websocket("/ws/pose")(websocket_endpoint)


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "name": settings.app_name,
        "version": settings.version,
        "description": "Golf swing skeleton overlay and phase segmentation",
        "docs": "/docs",
        "health": "/api/health",
        "websocket": "ws://localhost:8000/ws/pose"
    }


# =============================================================================
# Run directly (for development)
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower()
    )
