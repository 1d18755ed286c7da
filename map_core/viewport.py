"""Pan/zoom state of the map view and pointer-to-percent conversion."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class ImageRect:
    """Bounding box of the rendered map image in client pixels."""
    left: float
    top: float
    width: float
    height: float


@dataclass
class Viewport:
    zoom: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    zoom_min: float = 0.5
    zoom_max: float = 10.0
    zoom_step: float = 0.5
    wheel_step: float = 0.1
    dragging: bool = False
    _drag_start: tuple[float, float] = (0.0, 0.0)

    @property
    def marker_scale(self) -> float:
        return 1 / self.zoom

    def set_zoom(self, value: float) -> float:
        self.zoom = max(self.zoom_min, min(self.zoom_max, value))
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom + self.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom - self.zoom_step)

    def wheel(self, delta_y: float) -> float:
        """Scroll down (positive delta) zooms out, scroll up zooms in."""
        step = -self.wheel_step if delta_y > 0 else self.wheel_step
        return self.set_zoom(self.zoom + step)

    def reset(self) -> None:
        self.zoom = 1.0
        self.offset_x = 0.0
        self.offset_y = 0.0
        self.dragging = False

    def begin_drag(self, client_x: float, client_y: float) -> None:
        self.dragging = True
        self._drag_start = (client_x - self.offset_x, client_y - self.offset_y)

    def drag_to(self, client_x: float, client_y: float) -> None:
        if not self.dragging:
            return
        self.offset_x = client_x - self._drag_start[0]
        self.offset_y = client_y - self._drag_start[1]

    def end_drag(self) -> None:
        self.dragging = False

    def to_dict(self) -> dict:
        return {
            "zoom": self.zoom,
            "offset_x": self.offset_x,
            "offset_y": self.offset_y,
            "marker_scale": self.marker_scale,
            "dragging": self.dragging,
        }


def pointer_percent(client_x: float, client_y: float, rect: ImageRect) -> Optional[tuple[float, float]]:
    """Pointer position as percent of the image's bounding box; None for a collapsed rect."""
    if rect.width <= 0 or rect.height <= 0:
        return None
    px = (client_x - rect.left) / rect.width * 100
    pz = (client_y - rect.top) / rect.height * 100
    return px, pz
