"""Reusable tactical-map widgets for CLI and TUI."""
from typing import Any, List, Optional, Sequence, Tuple

from rich.panel import Panel
from rich.table import Table

from map_core.calibration import Calibration
from map_core.overlay import OverlaySet
from map_ui import theme


def map_panel(
    content: Any,
    title: Optional[str] = None,
    style: Optional[str] = None,
    border_style: Optional[str] = None,
) -> Panel:
    """Wrap content in a themed Panel."""
    return Panel(
        content,
        title=title,
        style=style or theme.panel_style,
        border_style=border_style or theme.panel_border_style,
        box=theme.MAP_BOX,
    )


def map_table(
    headers: Sequence[str],
    rows: List[Tuple[Any, ...]],
    title: Optional[str] = None,
) -> Table:
    t = Table(
        title=title,
        box=theme.MAP_BOX,
        border_style=theme.panel_border_style,
        header_style=theme.table_header_style,
    )
    for h in headers:
        t.add_column(h, style=theme.table_cell_style)
    for row in rows:
        t.add_row(*row)
    return t


def map_header(text: str, subtitle: Optional[str] = None) -> Panel:
    content = f"{text}  |  {subtitle}" if subtitle else text
    return Panel(content, style=theme.header_style, border_style=theme.MAP_BLUE, box=theme.MAP_BOX)


def map_footer(keys_text: str) -> Panel:
    return Panel(keys_text, style=theme.footer_style, border_style=theme.MAP_SLATE, box=theme.MAP_BOX)


def calibration_table(calib: Calibration, title: Optional[str] = None) -> Table:
    """Two-column field/value table of a calibration."""
    rows = [(name, str(value)) for name, value in calib.to_dict().items()]
    return map_table(("Field", "Value"), rows, title=title or theme.TITLE_CALIBRATION)


def overlay_table(overlays: OverlaySet, title: Optional[str] = None) -> Table:
    """Markers in draw order with their percent positions; outline vertex counts per label."""
    outlines = {}
    for polygon in overlays.polygons:
        outlines[(polygon.kind, polygon.label)] = len(polygon.points)
    rows = []
    for marker in overlays.sorted_markers():
        color = theme.hsl_to_hex(marker.color) if marker.color else None
        rows.append(
            (
                theme.style_marker(marker.kind, color),
                marker.label,
                f"{marker.x:.2f}",
                f"{marker.y:.2f}",
                f"{marker.scale:.2f}",
                str(outlines.get((marker.kind, marker.label), "-")),
            )
        )
    return map_table(("Kind", "Name", "X %", "Y %", "Scale", "Outline"), rows, title=title)
