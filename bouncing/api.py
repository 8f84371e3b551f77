"""Simple FastAPI backend streaming a bouncing ball world."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from starlette.websockets import WebSocketState

from .config import DEFAULT_CONFIG, SimConfig
from .metrics import summarize
from .presets import get_preset, list_presets
from .world import World

logger = logging.getLogger(__name__)

# ============================================================================
# Pydantic Models
# ============================================================================

class ConfigUpdate(BaseModel):
    """Update configuration parameters."""
    width: Optional[float] = Field(default=None, gt=0.0)
    height: Optional[float] = Field(default=None, gt=0.0)
    n_balls: Optional[int] = Field(default=None, ge=0, le=500)
    min_radius: Optional[float] = Field(default=None, ge=0.0)
    max_radius: Optional[float] = Field(default=None, ge=0.0)
    max_initial_speed: Optional[float] = Field(default=None, ge=0.0)
    gravity: Optional[float] = None
    bounce_factor: Optional[float] = None
    explode_every: Optional[int] = Field(default=None, ge=1)
    min_explode_radius: Optional[float] = Field(default=None, ge=0.0)
    max_balls: Optional[int] = Field(default=None, ge=1, le=10000)
    seed: Optional[int] = None


class BallCreate(BaseModel):
    """Add one ball to the world."""
    radius: float = Field(ge=0.0)
    x: Optional[float] = None
    y: Optional[float] = None
    dx: float = 0.0
    dy: float = 0.0
    color: Optional[str] = None


# ============================================================================
# FastAPI App with Lifespan
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the background simulation task and cancel it on shutdown."""
    global _simulation_task
    logger.info("Starting background simulation task")
    _simulation_task = asyncio.create_task(_simulation_loop())

    yield

    logger.info("Cancelling background simulation task")
    if _simulation_task:
        _simulation_task.cancel()
        try:
            await _simulation_task
        except asyncio.CancelledError:
            pass

app = FastAPI(title="Bouncing Balls", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global state
_config = DEFAULT_CONFIG
_world = World(_config)
_state_lock = asyncio.Lock()
_websocket_clients: set = set()
_simulation_task = None


# ============================================================================
# Helper Functions
# ============================================================================

def _snapshot() -> Dict[str, Any]:
    """World state plus config and metrics, ready to be sent as JSON."""
    state = _world.get_state()
    state["config"] = _world.config.as_dict()
    state["metrics"] = summarize(_world)
    return state


def _update_config(config_update: ConfigUpdate) -> SimConfig:
    """Create new config with the given fields applied."""
    changes = config_update.model_dump(exclude_unset=True)
    return _config.replace(**changes)


def _rebuild(config: SimConfig) -> None:
    """Swap in a new world built from config. Caller holds the lock."""
    global _config, _world
    world = World(config)
    _config = config
    _world = world
    logger.info(f"World rebuilt with {len(world.balls)} balls")


def _add_ball(request: BallCreate) -> Dict[str, Any]:
    ball = _world.add_ball(
        request.radius,
        x=request.x,
        y=request.y,
        speed=(request.dx, request.dy),
        color=request.color,
    )
    return {"id": len(_world.balls) - 1, **ball.as_dict()}


# ============================================================================
# Background Simulation Task
# ============================================================================

async def _simulation_loop():
    """Step the world and broadcast its state to all clients."""
    logger.info("Background simulation task started")

    while True:
        async with _state_lock:
            _world.step()
            state = _snapshot()

        # Broadcast to all connected clients (outside lock)
        message = {"type": "state", "payload": state}
        dead_clients = set()

        for client in list(_websocket_clients):
            try:
                if client.client_state == WebSocketState.CONNECTED:
                    await client.send_json(message)
                else:
                    dead_clients.add(client)
            except Exception as e:
                logger.warning(f"Error sending to client: {type(e).__name__}: {e}")
                dead_clients.add(client)

        if dead_clients:
            logger.info(f"Removing {len(dead_clients)} dead clients")
        _websocket_clients.difference_update(dead_clients)

        await asyncio.sleep(_world.config.frame_interval)


# ============================================================================
# REST Endpoints
# ============================================================================

@app.get("/health")
async def health() -> Dict[str, str]:
    """Health check."""
    return {"status": "ok"}


@app.get("/config")
async def get_config() -> Dict[str, Any]:
    """Get current configuration."""
    return {"config": _world.config.as_dict()}


@app.post("/config")
async def update_config(config_update: ConfigUpdate) -> Dict[str, Any]:
    """Update configuration and restart the world."""
    async with _state_lock:
        try:
            _rebuild(_update_config(config_update))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return await get_config()


@app.get("/state")
async def get_state() -> Dict[str, Any]:
    async with _state_lock:
        return _snapshot()


@app.post("/reset")
async def reset_world() -> Dict[str, str]:
    """Reset the world to a fresh population."""
    async with _state_lock:
        _world.reset()
        return {"status": "reset"}


@app.post("/halt")
async def halt_world() -> Dict[str, str]:
    """Stop every ball where it is."""
    async with _state_lock:
        _world.halt_all()
        return {"status": "halted"}


@app.get("/presets")
async def get_presets() -> List[Dict[str, Any]]:
    """List available presets."""
    return [
        {
            "name": p.name,
            "description": p.description,
            "gravity": p.gravity,
            "bounce_factor": p.bounce_factor,
            "n_balls": p.n_balls,
            "explode_every": p.explode_every,
        }
        for p in list_presets()
    ]


@app.post("/presets/{name}")
async def apply_preset(name: str) -> Dict[str, Any]:
    """Apply a preset scenario."""
    async with _state_lock:
        try:
            preset = get_preset(name)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))
        _rebuild(preset.apply(_config))
        return {"preset": preset.name, "config": _world.config.as_dict()}


@app.post("/balls")
async def add_ball(request: BallCreate) -> Dict[str, Any]:
    """Add a ball to the world."""
    async with _state_lock:
        try:
            return _add_ball(request)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))


@app.post("/balls/{index}/explode")
async def explode_ball(index: int) -> List[Dict[str, Any]]:
    """Replace one ball with its eight fragments."""
    async with _state_lock:
        try:
            children = _world.explode(index)
        except IndexError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return [child.as_dict() for child in children]


# ============================================================================
# WebSocket
# ============================================================================

def _handle_message(message: Dict[str, Any]) -> None:
    """Handle client commands. Caller holds the lock."""
    if not isinstance(message, dict):
        raise ValueError("Message must be a JSON object")

    msg_type = message.get("type")

    if msg_type == "explode":
        index = message.get("index")
        if index is None:
            raise ValueError("Message missing 'index'")
        _world.explode(int(index))

    elif msg_type == "reset":
        _world.reset()

    elif msg_type == "halt":
        _world.halt_all()

    elif msg_type == "use_preset":
        name = message.get("name")
        if name is None:
            raise ValueError("Message missing 'name'")
        _rebuild(get_preset(name).apply(_config))

    elif msg_type == "add_ball":
        fields = {k: v for k, v in message.items() if k != "type"}
        if "radius" not in fields:
            raise ValueError("Message missing 'radius'")
        _add_ball(BallCreate(**fields))

    else:
        raise ValueError(f"Unknown message type {msg_type!r}")


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint - clients receive state frames and send commands."""
    await websocket.accept()
    _websocket_clients.add(websocket)
    logger.info(f"WebSocket client connected, total clients: {len(_websocket_clients)}")

    try:
        async with _state_lock:
            state = _snapshot()
        await websocket.send_json({"type": "state", "payload": state})

        while True:
            message = await websocket.receive_json()
            try:
                async with _state_lock:
                    _handle_message(message)
                    state = _snapshot()
            except (ValueError, IndexError, TypeError) as exc:
                await websocket.send_json({"type": "error", "detail": str(exc)})
                continue
            await websocket.send_json({"type": "state", "payload": state})

    except WebSocketDisconnect as e:
        logger.info(f"WebSocket disconnected: {e.code}")
    finally:
        _websocket_clients.discard(websocket)
        logger.info(f"Client removed, remaining clients: {len(_websocket_clients)}")
