"""
Motion Lab Web Server — Layer 3 (FastAPI + WebSocket)

Input/render boundary for the simulation drivers.  Each WebSocket connection
is one simulator dialog: it owns a free-fall driver and a uniform-motion
driver, and a frame pump that forwards their pending events to the browser.
One-shot calculators are also exposed as plain GET routes.
"""

import asyncio
import json
import logging
import os

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

import calculators
from bounce import BounceEffect
from controller import FreeFallController, UniformMotionController
from errors import SimulatorError
from logging_config import setup_logging
from presets import PRESETS

logger = logging.getLogger(__name__)

# ── Settings ────────────────────────────────────────────────────────────────

HOST = os.environ.get("MOTION_LAB_HOST", "0.0.0.0")
PORT = int(os.environ.get("MOTION_LAB_PORT", "8000"))
LOG_LEVEL = os.environ.get("MOTION_LAB_LOG_LEVEL", "INFO").upper()

TARGET_FPS = 60
FRAME_DT = 1.0 / TARGET_FPS

app = FastAPI(title="Motion Lab")


@app.exception_handler(SimulatorError)
async def simulator_error_handler(request, exc: SimulatorError):
    return JSONResponse(status_code=422,
                        content={"error": type(exc).__name__, "detail": str(exc)})


# ── One-shot calculators ────────────────────────────────────────────────────

@app.get("/api/free-fall/time-to-ground")
async def api_time_to_ground(height: str, velocity: str = "0"):
    return calculators.time_to_ground(height, velocity).to_dict()


@app.get("/api/uniform/time-to-reach")
async def api_time_to_reach(start: str, target: str = "", velocity: str = ""):
    return calculators.time_to_reach(start, target, velocity).to_dict()


@app.get("/api/uniform/required-velocity")
async def api_required_velocity(start: str, target: str = "", duration: str = ""):
    return calculators.required_velocity(start, target, duration).to_dict()


@app.get("/api/presets")
async def api_presets():
    return _presets_data()


@app.get("/api/presets/{name}/preview")
async def api_preset_preview(name: str, width: str = "", height: str = ""):
    """Closed-form path of a preset, mapped to a viewport of the given size."""
    if name not in PRESETS:
        raise HTTPException(status_code=404, detail=f"Unknown preset '{name}'.")
    preset = PRESETS[name]()
    cls = FreeFallController if preset["motion"] == FreeFallController.MOTION else UniformMotionController
    preview = cls.preview(**preset["inputs"], viewport=[width, height])
    return {
        "name":    name,
        "motion":  preset["motion"],
        "columns": preview["columns"],
        "path":    preview["path"].tolist(),
        "coords":  preview["coords"].tolist(),
    }


# ── Per-connection dialog ───────────────────────────────────────────────────

class Dialog:
    """The two drivers behind one open simulator window."""

    def __init__(self):
        self.free_fall = FreeFallController()
        self.uniform = UniformMotionController()

    @property
    def controllers(self):
        return (self.free_fall, self.uniform)

    def close(self) -> None:
        for ctrl in self.controllers:
            ctrl.stop()


def _build_frame_message(ctrl) -> str | None:
    """Serialize one driver's new events; None when nothing happened."""
    if not ctrl.pending_events:
        return None
    events = list(ctrl.pending_events)
    ctrl.pending_events.clear()
    frame = {
        "type":    "frame",
        "motion":  ctrl.MOTION,
        "events":  events,
        "status":  ctrl.status_msg,
        "running": ctrl.running,
        "mode":    ctrl.mode,
    }
    return json.dumps(frame, separators=(',', ':'), ensure_ascii=False)


async def frame_pump(ws: WebSocket, dialog: Dialog):
    """Forward driver events to the client at ~TARGET_FPS."""
    while True:
        for ctrl in dialog.controllers:
            msg = _build_frame_message(ctrl)
            if msg is None:
                continue
            try:
                await ws.send_text(msg)
            except (WebSocketDisconnect, RuntimeError):
                logger.debug("frame pump: client gone")
                return
        await asyncio.sleep(FRAME_DT)


def _presets_data() -> list:
    return [{"name": name, "doc": (fn.__doc__ or "").strip()} for name, fn in PRESETS.items()]


def _error_reply(msg: dict, error: str, detail: str) -> dict:
    return {"type": "error", "cmd": str(msg.get("cmd", "")), "error": error, "detail": detail}


def _handle_command(dialog: Dialog, msg: dict) -> dict | None:
    """Dispatch one client command. Returns a direct reply, or None."""
    cmd = str(msg.get("cmd", "")).lower().strip()

    if cmd == "start_free_fall":
        dialog.free_fall.start(
            msg.get("height"), msg.get("velocity"),
            variant=str(msg.get("variant") or "ball"), viewport=msg.get("viewport"),
        )
    elif cmd == "stop_free_fall":
        dialog.free_fall.stop()
    elif cmd == "start_uniform":
        dialog.uniform.start(
            msg.get("start"), msg.get("velocity"), msg.get("target"), msg.get("duration"),
            variant=str(msg.get("variant") or "car"), viewport=msg.get("viewport"),
        )
    elif cmd == "stop_uniform":
        dialog.uniform.stop()
    elif cmd == "calc_time_to_ground":
        result = calculators.time_to_ground(msg.get("height"), msg.get("velocity"))
        return {"type": "calc", "cmd": cmd, "result": result.to_dict()}
    elif cmd == "calc_time_to_reach":
        result = calculators.time_to_reach(msg.get("start"), msg.get("target"), msg.get("velocity"))
        return {"type": "calc", "cmd": cmd, "result": result.to_dict()}
    elif cmd == "calc_required_velocity":
        result = calculators.required_velocity(msg.get("start"), msg.get("target"), msg.get("duration"))
        return {"type": "calc", "cmd": cmd, "result": result.to_dict()}
    elif cmd == "get_presets":
        return {"type": "presets", "data": _presets_data()}
    elif cmd == "load_preset":
        name = str(msg.get("name", ""))
        if name not in PRESETS:
            return {"type": "error", "cmd": cmd, "error": "UnknownPreset",
                    "detail": f"Unknown preset '{name}'."}
        preset = PRESETS[name]()
        ctrl = dialog.free_fall if preset["motion"] == FreeFallController.MOTION else dialog.uniform
        ctrl.start(**preset["inputs"], viewport=msg.get("viewport"))
        return {"type": "preset_loaded", "name": name, "inputs": preset["inputs"]}
    else:
        return {"type": "error", "cmd": cmd, "error": "UnknownCommand",
                "detail": f"Unknown cmd '{cmd}'."}
    return None


# ── WebSocket endpoint ──────────────────────────────────────────────────────

@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    dialog = Dialog()

    await ws.send_text(json.dumps({
        "type": "init",
        "free_fall": {
            "tick_interval": FreeFallController.TICK_INTERVAL,
            "sim_dt": FreeFallController.SIM_DT,
            "default_viewport": FreeFallController.DEFAULT_VIEWPORT,
            "variants": FreeFallController.VARIANTS,
            "bounce_interval": BounceEffect.TICK_INTERVAL,
        },
        "uniform": {
            "tick_interval": UniformMotionController.TICK_INTERVAL,
            "sim_dt": UniformMotionController.SIM_DT,
            "default_viewport": UniformMotionController.DEFAULT_VIEWPORT,
        },
    }))

    pump = asyncio.create_task(frame_pump(ws, dialog))
    try:
        while True:
            data = await ws.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue
            if not isinstance(msg, dict):
                continue
            try:
                reply = _handle_command(dialog, msg)
            except SimulatorError as exc:
                reply = _error_reply(msg, type(exc).__name__, str(exc))
            except (TypeError, ValueError, KeyError) as exc:
                logger.warning("dialog: malformed command %r: %s", msg.get("cmd"), exc)
                reply = _error_reply(msg, "BadCommand", str(exc))
            if reply is not None:
                await ws.send_text(json.dumps(reply, ensure_ascii=False))
    except WebSocketDisconnect:
        pass
    finally:
        pump.cancel()
        dialog.close()
        await asyncio.gather(pump, return_exceptions=True)


# ── Run with uvicorn ────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    setup_logging(getattr(logging, LOG_LEVEL, logging.INFO))
    uvicorn.run("server:app", host=HOST, port=PORT, reload=False)
