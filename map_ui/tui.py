"""Live terminal view of the active map's overlays."""
import time
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.text import Text

from map_core.session import MapSession

from map_ui import theme
from map_ui.widgets import (
    calibration_table,
    map_footer,
    map_header,
    map_panel,
    overlay_table,
)


def make_header(session: MapSession):
    readout = session.pointer
    subtitle = (
        f"{session.current_map.name}  |  zoom {session.viewport.zoom:.1f}x  |  "
        f"GAME POS X: {readout.game_x:.2f}, Z: {readout.game_z:.2f}"
    )
    return map_header(theme.TITLE_MAIN, subtitle)


def make_overlay_panel(session: MapSession):
    table = overlay_table(session.overlays())
    return map_panel(table, title=f"{session.current_map.name} TACTICAL ALIGNMENT")


def make_side_panel(session: MapSession, lines: int = 15):
    """Calibration values above the most recent session events."""
    layout = Layout()
    layout.split(
        Layout(calibration_table(session.calibration), name="calibration", size=11),
        Layout(name="events"),
    )
    recent = session.get_recent_logs(lines)
    if recent:
        content = Text.from_markup("\n".join(f"[dim {theme.MAP_TEXT}]{line}[/]" for line in recent))
    else:
        content = Text.from_markup(f"[dim {theme.MAP_TEXT}]No events yet.[/]")
    layout["events"].update(map_panel(content, title=theme.TITLE_EVENTS, style=theme.log_content_style))
    return layout


def make_footer():
    return map_footer(theme.FOOTER_KEYS)


def run_dashboard(session: MapSession) -> None:
    """Run the Rich Live dashboard until interrupted."""
    console = Console()
    layout = Layout()
    layout.split(
        Layout(name="header", size=3),
        Layout(name="body"),
        Layout(name="footer", size=3),
    )
    layout["body"].split_row(
        Layout(name="overlays", ratio=2),
        Layout(name="side", ratio=1),
    )

    def generate() -> Layout:
        layout["header"].update(make_header(session))
        layout["overlays"].update(make_overlay_panel(session))
        layout["side"].update(make_side_panel(session))
        layout["footer"].update(make_footer())
        return layout

    try:
        with Live(generate(), refresh_per_second=2, screen=True, console=console) as live:
            while True:
                time.sleep(1)
                live.update(generate())
    except KeyboardInterrupt:
        pass
