"""Tactical map theme for the Tarkov GPS terminal views.
Central place for colors, borders, marker styles, and copy.
"""
import colorsys

from rich import box

# --- Box / border ---
MAP_BOX = box.SQUARE

# --- Colors (match the web map's slate palette) ---
MAP_BLUE = "#2563eb"
MAP_BLUE_LIGHT = "#60a5fa"
MAP_SLATE = "#334155"
MAP_SLATE_LIGHT = "#94a3b8"
MAP_TEXT = "#cbd5e1"
MAP_BG_DARK = "#0f172a"
MAP_PMC = "#10b981"
MAP_SCAV = "#f97316"
MAP_TRANSIT = "#f91616"
MAP_READOUT = "#ef4444"

# --- Panel style combinations ---
header_style = f"bold white on {MAP_BG_DARK}"
panel_style = f"{MAP_TEXT} on {MAP_BG_DARK}"
panel_border_style = MAP_SLATE
footer_style = f"bold {MAP_BLUE_LIGHT} on {MAP_BG_DARK}"
log_content_style = f"dim white on {MAP_BG_DARK}"
table_header_style = f"bold {MAP_SLATE_LIGHT}"
table_cell_style = MAP_TEXT

# --- Copy constants ---
TITLE_MAIN = "TARKOV GPS"
TITLE_FEATURES = "Map Features"
TITLE_CALIBRATION = "Calibration"
TITLE_EVENTS = "Events"
FOOTER_KEYS = "Ctrl+C to quit"

KIND_LABELS = {
    "extract": "EXTRACT",
    "transit": "TRANSIT",
    "quest": "QUEST",
    "origin": "ORIGIN",
}


def style_marker(kind: str, color: str | None = None) -> str:
    """Rich markup badge for a marker kind, tinted with the marker's own color when it has one."""
    label = KIND_LABELS.get(kind, kind.upper())
    style = color or {"transit": MAP_TRANSIT, "origin": MAP_READOUT}.get(kind, MAP_SLATE_LIGHT)
    return f"[{style}]{label}[/]"


def hsl_to_hex(color: str) -> str:
    """Convert an 'hsl(h, s%, l%)' string to '#rrggbb' for terminals; other strings pass through."""
    if not color.startswith("hsl("):
        return color
    try:
        hue, saturation, lightness = (part.strip().rstrip("%") for part in color[4:-1].split(","))
        r, g, b = colorsys.hls_to_rgb(float(hue) / 360, float(lightness) / 100, float(saturation) / 100)
    except ValueError:
        return color
    return "#{:02x}{:02x}{:02x}".format(round(r * 255), round(g * 255), round(b * 255))
