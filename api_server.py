"""
Tarkov GPS – HTTP API for the web map.
Run: uvicorn api_server:app --reload --host 0.0.0.0 --port 8000
"""
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict

from map_core.maps import MAPS
from map_core.session import MapSession
from map_core.viewport import ImageRect

ROOT = Path(__file__).resolve().parent

app = FastAPI(title="Tarkov GPS API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_session: MapSession | None = None


def get_session() -> MapSession:
    global _session
    if _session is None:
        _session = MapSession(str(ROOT / "config" / "settings.yaml"))
    return _session


def set_session(session: MapSession | None) -> None:
    """Replace the process-wide session (used by tests and embedding apps)."""
    global _session
    _session = session


# --- Pydantic models ---

class MapSummary(BaseModel):
    map_id: int
    name: str
    image_source: str
    local_image: bool


class SelectMap(BaseModel):
    map_id: int


class CalibrationBody(BaseModel):
    # Raw values; the calibration store coerces them and keeps the prior value for non-numeric input
    offset_x: Any = None
    offset_z: Any = None
    scale_x: Any = None
    scale_z: Any = None
    flip_x: Any = None
    flip_z: Any = None
    swap_axes: Any = None


class Toggles(BaseModel):
    show_extracts: bool | None = None
    show_transits: bool | None = None
    show_calibration: bool | None = None


class TrackQuest(BaseModel):
    name: str


class ZoomBody(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    action: str = "in"  # in | out | set
    value: float | None = None


class WheelBody(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    delta_y: float


class PointerBody(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    # Either client coordinates with the image rect, or a percent position directly
    client_x: float | None = None
    client_y: float | None = None
    rect_left: float = 0.0
    rect_top: float = 0.0
    rect_width: float | None = None
    rect_height: float | None = None
    percent_x: float | None = None
    percent_z: float | None = None


class PointerPress(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    client_x: float
    client_y: float
    button: int = 0


def _map_summary(s: MapSession, descriptor) -> MapSummary:
    return MapSummary(
        map_id=descriptor.map_id,
        name=descriptor.name,
        image_source=s.image_source_for(descriptor),
        local_image=descriptor.local_image,
    )


@app.get("/api/maps")
def list_maps():
    s = get_session()
    return [_map_summary(s, m) for m in MAPS]


@app.get("/api/session")
def get_session_state():
    return get_session().to_dict()


@app.post("/api/session/map")
def select_map(body: SelectMap):
    s = get_session()
    try:
        s.select_map(body.map_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return s.to_dict()


@app.post("/api/session/toggles")
def set_toggles(body: Toggles):
    s = get_session()
    s.set_toggles(body.show_extracts, body.show_transits, body.show_calibration)
    return s.to_dict()


@app.get("/api/maps/{map_id}/calibration")
def get_calibration(map_id: int):
    s = get_session()
    if map_id not in s.calibrations:
        raise HTTPException(status_code=404, detail="Map not found")
    return s.calibrations.get(map_id).to_dict()


@app.put("/api/maps/{map_id}/calibration")
def update_calibration(map_id: int, body: CalibrationBody):
    """Merge the supplied fields; invalid numbers keep the previous value, zero scales are clamped."""
    s = get_session()
    partial = body.model_dump(exclude_none=True)
    try:
        merged = s.update_calibration(partial, map_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return merged.to_dict()


@app.post("/api/maps/{map_id}/calibration/reset")
def reset_calibration(map_id: int):
    s = get_session()
    try:
        return s.reset_calibration(map_id).to_dict()
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/api/quests/available")
def get_available_quests():
    """Quests with objectives on the active map that are not tracked yet."""
    s = get_session()
    return [q.name for q in s.untracked_available_quests()]


@app.get("/api/quests/{name}")
def get_quest(name: str):
    s = get_session()
    quest = s.quests_by_name.get(name)
    if quest is None:
        raise HTTPException(status_code=404, detail="Quest not found")
    return quest.to_dict()


@app.post("/api/quests/tracked")
def track_quest(body: TrackQuest):
    s = get_session()
    try:
        tq = s.add_quest(body.name)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"name": tq.name, "color": tq.color}


@app.delete("/api/quests/tracked/{name}")
def untrack_quest(name: str):
    s = get_session()
    if not s.remove_quest(name):
        raise HTTPException(status_code=404, detail="Quest not tracked")
    return {"ok": True}


@app.post("/api/quests/tracked/{name}/expand")
def expand_quest(name: str):
    s = get_session()
    try:
        expanded = s.toggle_expanded(name)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"expanded_quest": expanded}


@app.post("/api/viewport/zoom")
def zoom(body: ZoomBody):
    vp = get_session().viewport
    if body.action == "in":
        vp.zoom_in()
    elif body.action == "out":
        vp.zoom_out()
    elif body.action == "set" and body.value is not None:
        vp.set_zoom(body.value)
    else:
        raise HTTPException(status_code=400, detail="Invalid zoom action")
    return vp.to_dict()


@app.post("/api/viewport/wheel")
def wheel(body: WheelBody):
    vp = get_session().viewport
    vp.wheel(body.delta_y)
    return vp.to_dict()


@app.post("/api/viewport/reset")
def reset_viewport():
    vp = get_session().viewport
    vp.reset()
    return vp.to_dict()


@app.post("/api/pointer")
def pointer(body: PointerBody):
    """Convert a pointer position over the map image into the GAME POS readout."""
    s = get_session()
    if body.percent_x is not None and body.percent_z is not None:
        readout = s.pointer_at_percent(body.percent_x, body.percent_z)
        return readout.to_dict()
    if None in (body.client_x, body.client_y, body.rect_width, body.rect_height):
        raise HTTPException(status_code=400, detail="Pointer needs percent_x/percent_z or client position and rect")
    rect = ImageRect(body.rect_left, body.rect_top, body.rect_width, body.rect_height)
    readout = s.pointer_move(body.client_x, body.client_y, rect)
    if readout is None:
        raise HTTPException(status_code=400, detail="Image rect has no area")
    return readout.to_dict()


@app.post("/api/pointer/down")
def pointer_down(body: PointerPress):
    """Start panning the map image (primary button only)."""
    s = get_session()
    s.pointer_down(body.client_x, body.client_y, body.button)
    return s.viewport.to_dict()


@app.post("/api/pointer/up")
def pointer_up():
    s = get_session()
    s.pointer_up()
    return s.viewport.to_dict()


@app.get("/api/overlays")
def get_overlays():
    s = get_session()
    payload = s.overlays().to_dict()
    payload["map_id"] = s.selected_map_id
    payload["marker_scale"] = s.viewport.marker_scale
    return payload


@app.get("/api/logs")
def get_logs(tail: int = 100):
    return {"lines": get_session().get_recent_logs(tail)}


# Serve local background images (maps without a remote SVG) and the built frontend when present
_MAP_MEDIA_TYPES = {".png": "image/png", ".svg": "image/svg+xml", ".jpg": "image/jpeg", ".jpeg": "image/jpeg"}


@app.get("/maps/{filename:path}")
def serve_map_file(filename: str):
    base = get_session().local_image_dir.resolve()
    path = (base / filename).resolve()
    if not path.is_relative_to(base) or not path.is_file():
        raise HTTPException(status_code=404, detail="Not found")
    media_type = _MAP_MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")
    return FileResponse(path, media_type=media_type)


_dist = ROOT / "web" / "dist"
if _dist.exists():
    app.mount("/", StaticFiles(directory=str(_dist), html=True), name="app")
