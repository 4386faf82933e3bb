from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..config import AppConfig
from ..loop import RenderLoop
from ..universe import Universe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    frame: int
    payload: str


class SimulationController:
    """Drives a Universe from a RenderLoop and streams snapshots to websocket clients."""

    def __init__(self, config: AppConfig, warm_up: bool = True):
        self.config = config
        self.universe = Universe(config.simulation)
        self._pending_warm_up = warm_up
        self.broadcast_interval = max(1, config.broadcast_interval)
        self.frame = 0
        self.loop = RenderLoop(
            self._on_frame,
            config.simulation.max_delta,
            frame_interval=config.simulation.frame_interval,
        )
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque(maxlen=max(1, config.snapshot_queue_limit))
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._control_lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self.loop.running

    async def warm_up(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self.universe.warm_up)

    async def start(self) -> None:
        async with self._control_lock:
            if self._pending_warm_up:
                self._pending_warm_up = False
                await self.warm_up()
            task = self._loop_task
            if task is not None and not task.done():
                if self.loop.running:
                    return
                # A stopped loop exits at its next frame boundary.
                await task
            self._loop_task = asyncio.create_task(self.loop.run())
            await asyncio.sleep(0)

    async def stop(self) -> None:
        async with self._control_lock:
            self.loop.stop()

    async def reset(self) -> None:
        async with self._lock:
            self.universe.reset()
            await asyncio.to_thread(self.universe.warm_up)
            self.frame = 0
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()

    async def resize(self, width: float, height: float) -> None:
        async with self._lock:
            self.universe.resize(width, height)

    async def pointer(self, x: float, y: float) -> None:
        async with self._lock:
            self.universe.set_pointer(x, y)

    async def _on_frame(self, delta: float) -> None:
        async with self._lock:
            self.universe.update(delta)
            self.frame += 1
        if self.frame % self.broadcast_interval == 0:
            await self._broadcast_snapshot()

    async def handle_message(self, payload: Dict[str, Any]) -> None:
        kind = payload.get("type")
        try:
            if kind == "ack":
                frame = payload.get("tick")
                if isinstance(frame, int):
                    await self.acknowledge(frame)
            elif kind == "resize":
                await self.resize(float(payload["width"]), float(payload["height"]))
            elif kind == "pointer":
                await self.pointer(float(payload["x"]), float(payload["y"]))
            elif kind == "avoid":
                async with self._lock:
                    self.universe.set_avoid_enabled(bool(payload.get("enabled", False)))
        except (KeyError, TypeError, ValueError) as exc:
            logger.debug("ignoring %s message: %s", kind, exc)

    async def acknowledge(self, frame: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].frame <= frame:
                self._snapshot_queue.popleft()

    def _serialize_snapshot(self) -> QueuedSnapshot:
        snapshot = self.universe.snapshot()
        payload = {
            "type": "snapshot",
            "tick": self.frame,
            "payload": snapshot.to_payload(),
        }
        return QueuedSnapshot(frame=self.frame, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.frame > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.frame
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        if not self.clients:
            return
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


app = FastAPI(title="Cat Flocking Simulation")
controller = SimulationController(AppConfig())


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.on_event("shutdown")
async def _shutdown() -> None:
    await controller.stop()


@app.get("/api/status")
async def status() -> JSONResponse:
    width, height = controller.universe.size
    return JSONResponse(
        {
            "running": controller.running,
            "frame": controller.frame,
            "tick": controller.universe.tick,
            "population": len(controller.universe.cats),
            "arena": {"width": width, "height": height},
        }
    )


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    await controller.start()
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    await controller.stop()
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "frame": controller.frame})


@app.post("/api/arena")
async def set_arena(payload: dict) -> JSONResponse:
    try:
        await controller.resize(float(payload["width"]), float(payload["height"]))
    except (KeyError, TypeError, ValueError) as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    width, height = controller.universe.size
    return JSONResponse({"width": width, "height": height})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    controller._client_last_sent[websocket] = -1
    logger.info("client connected (%d total)", len(controller.clients))
    await controller._send_pending_snapshots(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                logger.debug("ignoring malformed message")
                continue
            if isinstance(payload, dict):
                await controller.handle_message(payload)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)
        logger.info("client disconnected (%d total)", len(controller.clients))


__all__ = ["app", "controller"]
