"""Entry point for the WebRTC call-signaling service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router as api_router
from api.signaling_routes import router as signaling_router
from config.settings import get_settings
from db.base import dispose_db, init_db
from signaling.history import CallHistoryRecorder
from signaling.hub import ConnectionHub
from signaling.state import SignalingState


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    state = SignalingState()
    state.start()
    app.state.hub = ConnectionHub(
        state,
        CallHistoryRecorder(enabled=settings.record_call_history),
    )
    yield
    await app.state.hub.close()
    await dispose_db()


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="Call Signaling Server",
    description="Presence and WebRTC offer/answer/ICE relay for one-to-one calls.",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
app.include_router(api_router, prefix="/api")
app.include_router(signaling_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
