"""World <-> percent coordinate conversion for the tactical map overlay."""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .calibration import Calibration


@dataclass(frozen=True)
class WorldPoint:
    """Game-world position on the horizontal plane."""
    x: float
    z: float

    @classmethod
    def from_dict(cls, data: dict) -> Optional["WorldPoint"]:
        """Read {x, z}; legacy {x, y} entries are treated as {x, z}. Returns None if unusable."""
        if not isinstance(data, dict):
            return None
        x = data.get("x")
        z = data.get("z")
        if z is None:
            z = data.get("y")
        try:
            return cls(float(x), float(z))
        except (TypeError, ValueError):
            return None

    def to_dict(self) -> dict:
        return {"x": self.x, "z": self.z}


def world_to_percent(value: float, offset: float, scale: float, flip: bool) -> float:
    """Forward transform for one axis: world units -> percent of the map image."""
    direction = -1 if flip else 1
    return offset + value * scale * direction


def percent_to_world(percent: float, offset: float, scale: float, flip: bool) -> float:
    """Inverse transform for one axis. scale must be non-zero (the calibration store guarantees it)."""
    direction = -1 if flip else 1
    return (percent - offset) / (scale * direction)


def project_point(point: WorldPoint, calib: "Calibration") -> tuple[float, float]:
    """Convert a world point to (x%, y%) on the map image.

    Args:
        point: World position (x, z)
        calib: Active calibration of the map

    Returns:
        Tuple of (left_percent, top_percent)
    """
    first, second = point.x, point.z
    # Swapped maps feed world z into the X formula and world x into the Z formula
    if calib.swap_axes:
        first, second = second, first
    px = world_to_percent(first, calib.offset_x, calib.scale_x, calib.flip_x)
    pz = world_to_percent(second, calib.offset_z, calib.scale_z, calib.flip_z)
    return px, pz


def unproject_point(px: float, pz: float, calib: "Calibration") -> WorldPoint:
    """Convert a percent position on the map image back to world coordinates."""
    gx = percent_to_world(px, calib.offset_x, calib.scale_x, calib.flip_x)
    gz = percent_to_world(pz, calib.offset_z, calib.scale_z, calib.flip_z)
    if calib.swap_axes:
        gx, gz = gz, gx
    return WorldPoint(gx, gz)


def project_polygon(points: Iterable[WorldPoint], calib: "Calibration") -> list[tuple[float, float]]:
    """Project every vertex of an outline with the same calibration."""
    return [project_point(p, calib) for p in points]
