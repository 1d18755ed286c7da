"""Screen-space overlay primitives, styles and the render context passed to projectors."""
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .calibration import Calibration

# Icons used by the interactive map for feature markers
EXTRACT_PMC_ICON = "https://tarkov.dev/maps/interactive/extract_pmc.png"
EXTRACT_SCAV_ICON = "https://tarkov.dev/maps/interactive/extract_scav.png"
TRANSIT_ICON = "https://tarkov.dev/maps/interactive/extract_transit.png"

# Feature colors: (stroke, fill)
PMC_COLORS = ("#10b981", "rgba(16, 185, 129, 0.2)")
SCAV_COLORS = ("#f97316", "rgba(249, 115, 22, 0.2)")
TRANSIT_COLORS = ("#f91616ff", "rgba(249, 22, 22, 0.2)")

OUTLINE_STROKE_WIDTH = 0.2

# Draw order of overlay layers
Z_ORIGIN = 20
Z_OUTLINE = 25
Z_FEATURE = 26
Z_QUEST = 30
Z_QUEST_EXPANDED = 100

DEFAULT_EXPANDED_MULTIPLIER = 1.8


@dataclass(frozen=True)
class Marker:
    """A point overlay at (x, y) percent of the map image."""
    kind: str
    label: str
    x: float
    y: float
    scale: float
    z_index: int
    color: Optional[str] = None
    icon: Optional[str] = None
    title: Optional[str] = None
    key: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "label": self.label,
            "x": self.x,
            "y": self.y,
            "scale": self.scale,
            "z_index": self.z_index,
            "color": self.color,
            "icon": self.icon,
            "title": self.title,
            "key": self.key,
        }


@dataclass(frozen=True)
class Polygon:
    """A closed outline in percent space (viewBox 0 0 100 100)."""
    kind: str
    label: str
    points: tuple[tuple[float, float], ...]
    stroke: str
    fill: str
    stroke_width: float
    z_index: int = Z_OUTLINE

    @property
    def svg_points(self) -> str:
        """Points attribute for an SVG <polygon>: 'x,y x,y ...'."""
        return " ".join(f"{x},{y}" for x, y in self.points)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "label": self.label,
            "points": [list(p) for p in self.points],
            "svg_points": self.svg_points,
            "stroke": self.stroke,
            "fill": self.fill,
            "stroke_width": self.stroke_width,
            "z_index": self.z_index,
        }


@dataclass
class OverlaySet:
    """Everything the rendering layer needs for one frame."""
    markers: list[Marker] = field(default_factory=list)
    polygons: list[Polygon] = field(default_factory=list)

    def extend(self, other: "OverlaySet") -> None:
        self.markers.extend(other.markers)
        self.polygons.extend(other.polygons)

    def sorted_markers(self) -> list[Marker]:
        """Markers in draw order (stable for equal z-index)."""
        return sorted(self.markers, key=lambda m: m.z_index)

    def to_dict(self) -> dict:
        return {
            "markers": [m.to_dict() for m in self.sorted_markers()],
            "polygons": [p.to_dict() for p in self.polygons],
        }


@dataclass(frozen=True)
class RenderContext:
    """UI state a projection pass reads; passed explicitly instead of shared globals."""
    map_name: str
    calibration: "Calibration"
    zoom: float = 1.0
    show_extracts: bool = True
    show_transits: bool = True
    show_calibration: bool = False
    expanded_quest: Optional[str] = None
    expanded_multiplier: float = DEFAULT_EXPANDED_MULTIPLIER

    @property
    def marker_scale(self) -> float:
        """Counter-scale so markers keep their on-screen size at any zoom."""
        return 1 / self.zoom


def origin_overlay(ctx: RenderContext) -> OverlaySet:
    """Calibration crosshair at the percent-space origin of the active calibration."""
    calib = ctx.calibration
    marker = Marker(
        kind="origin",
        label="origin",
        x=calib.offset_x,
        y=calib.offset_z,
        scale=ctx.marker_scale,
        z_index=Z_ORIGIN,
        key="origin",
    )
    return OverlaySet(markers=[marker])
