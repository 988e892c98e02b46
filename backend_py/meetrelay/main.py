from __future__ import annotations

import logging

import socketio
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .deps import get_registry
from .registry import RoomRegistry
from .routes import rooms
from .sockets import sio

log = logging.getLogger("uvicorn.error")
log.setLevel(config.LOG_LEVEL)
logging.getLogger("meetrelay").setLevel(config.LOG_LEVEL)

app = FastAPI(title="meetrelay signaling API")


@app.on_event("startup")
def on_startup():
    log.info("Signaling relay ready (default capacity %d, chat history %d)",
             config.DEFAULT_MAX_CAPACITY, config.MAX_CHAT_HISTORY)


@app.get("/health")
def health(registry: RoomRegistry = Depends(get_registry)):
    return {"status": "ok", "rooms": len(registry)}


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=config.CORS_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(rooms.router, prefix="/api")


# Socket.IO + FastAPI combined ASGI app
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)
