"""FastAPI server for hand pose estimation."""

import time
from typing import List, Dict, Any, Optional
from datetime import datetime
import logging

import cv2
import numpy as np
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from fastapi.concurrency import run_in_threadpool
import uvicorn

from ..config import Config
from ..handpose import HandPose
from ..utils.tensor import to_input_tensor

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    timestamp: str
    pipeline_ready: bool
    models: Dict[str, str]


class LoadResponse(BaseModel):
    """Response model for model loading."""
    detector: Optional[str] = None
    skeleton: Optional[str] = None
    models: Dict[str, str]


class PredictResponse(BaseModel):
    """Response model for prediction."""
    hands: List[Dict[str, Any]]
    count: int
    width: int
    height: int
    elapsed_ms: float


def create_api_server(handpose: HandPose, config: Optional[Config] = None) -> FastAPI:
    """
    Create FastAPI server for hand pose estimation.

    Args:
        handpose: Hand pose estimator (loaded or not)
        config: Configuration used for loading and prediction

    Returns:
        FastAPI application
    """
    app = FastAPI(
        title="Hand Pose API",
        description="API for two-stage hand pose estimation",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.handpose = handpose
    app.state.config = config or Config()

    @app.get("/", response_class=JSONResponse)
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Hand Pose API",
            "version": "1.0.0",
            "status": "running",
            "timestamp": datetime.now().isoformat(),
            "endpoints": {
                "health": "/health",
                "load": "/load",
                "predict": "/predict",
                "documentation": "/docs"
            }
        }

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        hp = app.state.handpose
        models = hp.cache.status()
        ready = hp.pipeline is not None

        return HealthResponse(
            status="healthy" if ready and "failed" not in models.values() else "degraded",
            timestamp=datetime.now().isoformat(),
            pipeline_ready=ready,
            models=models
        )

    @app.post("/load", response_model=LoadResponse)
    async def load_models():
        """Load (or reuse cached) models and rebuild the pipeline."""
        hp = app.state.handpose
        detector, skeleton = await run_in_threadpool(hp.load, app.state.config)

        return LoadResponse(
            detector=detector.model_url if detector else None,
            skeleton=skeleton.model_url if skeleton else None,
            models=hp.cache.status()
        )

    @app.post("/predict", response_model=PredictResponse)
    async def predict(request: Request):
        """Estimate hands in an encoded image sent as the request body."""
        hp = app.state.handpose
        if hp.pipeline is None:
            raise HTTPException(status_code=503, detail="Models not loaded")

        body = await request.body()
        if not body:
            raise HTTPException(status_code=400, detail="Empty request body")

        frame = cv2.imdecode(np.frombuffer(body, dtype=np.uint8), cv2.IMREAD_COLOR)
        if frame is None:
            raise HTTPException(status_code=400, detail="Could not decode image")

        start = time.perf_counter()
        input_tensor = to_input_tensor(frame)
        hands = await run_in_threadpool(hp.predict, input_tensor, app.state.config)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        height, width = frame.shape[:2]
        return PredictResponse(
            hands=[hand.to_dict() for hand in hands],
            count=len(hands),
            width=width,
            height=height,
            elapsed_ms=elapsed_ms
        )

    logger.info("API server created")

    return app


def run_server(handpose: HandPose, config: Optional[Config] = None) -> None:
    """
    Run the API server.

    Args:
        handpose: Hand pose estimator
        config: Configuration (host and port are read from ``config.api``)
    """
    config = config or Config()
    app = create_api_server(handpose, config)

    uvicorn.run(
        app,
        host=config.api.host,
        port=config.api.port,
        log_level=config.logging.log_level.lower()
    )
