"""Command-line interface for the tactical map."""
import click
from pathlib import Path
from rich.console import Console

from map_core.maps import MAPS, MapDescriptor, find_map
from map_core.session import MapSession
from map_core.transform import WorldPoint, project_point
from map_ui import theme
from map_ui.widgets import calibration_table, map_table, overlay_table

console = Console()
_session: MapSession | None = None


def get_session() -> MapSession:
    """Get or create the session (config relative to project root)."""
    global _session
    if _session is None:
        root = Path(__file__).resolve().parent.parent
        _session = MapSession(str(root / "config" / "settings.yaml"))
    return _session


def _select(session: MapSession, key: str) -> MapDescriptor:
    descriptor = find_map(key)
    if descriptor is None:
        raise click.BadParameter(f"Unknown map: {key}", param_hint="MAP")
    if descriptor.map_id != session.selected_map_id:
        session.select_map(descriptor.map_id)
    return descriptor


def _apply_overrides(session: MapSession, overrides: tuple) -> None:
    """Apply FIELD=VALUE calibration edits to the active map."""
    partial = {}
    for item in overrides:
        if "=" not in item:
            raise click.BadParameter(f"Expected FIELD=VALUE, got {item}", param_hint="--set")
        name, value = item.split("=", 1)
        partial[name.strip()] = value.strip()
    if not partial:
        return
    try:
        session.update_calibration(partial)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--set")


calibration_option = click.option(
    "--set", "overrides", multiple=True, metavar="FIELD=VALUE",
    help="Calibration edit for this run (e.g. scale_x=0.1, flip_z=true)",
)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Tarkov GPS tactical map tools."""
    ctx.obj = get_session()


@cli.command()
@click.pass_obj
def maps(session: MapSession) -> None:
    """List supported maps and their background images."""
    rows = [
        (str(m.map_id), m.name, session.image_source_for(m))
        for m in MAPS
    ]
    console.print(map_table(("ID", "Map", "Image"), rows, title="Maps"))


@cli.command()
@click.argument("map_key", metavar="MAP")
@calibration_option
@click.option("--reset", is_flag=True, help="Show the default calibration")
@click.pass_obj
def calib(session: MapSession, map_key: str, overrides: tuple, reset: bool) -> None:
    """Show a map's calibration."""
    descriptor = _select(session, map_key)
    if reset:
        session.reset_calibration()
    _apply_overrides(session, overrides)
    console.print(calibration_table(session.calibration, title=f"{descriptor.name} calibration"))


@cli.command()
@click.argument("map_key", metavar="MAP")
@click.argument("x", type=float)
@click.argument("z", type=float)
@calibration_option
@click.pass_obj
def project(session: MapSession, map_key: str, x: float, z: float, overrides: tuple) -> None:
    """Convert world coordinates X Z to percent of the map image."""
    descriptor = _select(session, map_key)
    _apply_overrides(session, overrides)
    px, pz = project_point(WorldPoint(x, z), session.calibration)
    console.print(f"[bold]{descriptor.name}[/] world ({x:.2f}, {z:.2f}) -> [{theme.MAP_READOUT}]{px:.2f}%, {pz:.2f}%[/]")


@cli.command()
@click.argument("map_key", metavar="MAP")
@click.argument("px", type=float)
@click.argument("pz", type=float)
@calibration_option
@click.pass_obj
def locate(session: MapSession, map_key: str, px: float, pz: float, overrides: tuple) -> None:
    """Convert a percent position PX PZ on the map image to world coordinates."""
    descriptor = _select(session, map_key)
    _apply_overrides(session, overrides)
    readout = session.pointer_at_percent(px, pz)
    console.print(
        f"[bold]{descriptor.name}[/] GAME POS: "
        f"[{theme.MAP_READOUT}]X: {readout.game_x:.2f}, Z: {readout.game_z:.2f}[/]"
    )


@cli.command()
@click.argument("map_key", metavar="MAP")
@click.option("--extracts/--no-extracts", default=True, help="Include extracts")
@click.option("--transits/--no-transits", default=True, help="Include transits")
@calibration_option
@click.pass_obj
def features(session: MapSession, map_key: str, extracts: bool, transits: bool, overrides: tuple) -> None:
    """Show projected extracts and transits of a map."""
    descriptor = _select(session, map_key)
    _apply_overrides(session, overrides)
    session.set_toggles(show_extracts=extracts, show_transits=transits)
    overlays = session.overlays()
    if not overlays.markers:
        console.print(f"[dim]No features for {descriptor.name}[/]")
        return
    console.print(overlay_table(overlays, title=f"{descriptor.name} {theme.TITLE_FEATURES}"))


@cli.command()
@click.argument("map_key", metavar="MAP")
@click.pass_obj
def quests(session: MapSession, map_key: str) -> None:
    """List quests with objectives on a map."""
    descriptor = _select(session, map_key)
    rows = [
        (q.name, str(len(q.objectives)), f"+{q.experience} XP", q.wiki_link or "-")
        for q in session.available_quests()
    ]
    console.print(map_table(("Quest", "Objectives", "Reward", "Wiki"), rows, title=f"{descriptor.name} quests"))


@cli.command()
@click.argument("map_key", metavar="MAP")
@click.option("--quest", "quest_names", multiple=True, help="Quest to track")
@click.option("--expand", default=None, help="Tracked quest to show enlarged")
@click.option("--zoom", default=1.0, type=float, help="Viewport zoom")
@click.option("--no-features", is_flag=True, help="Hide extracts and transits")
@calibration_option
@click.pass_obj
def overlays(
    session: MapSession,
    map_key: str,
    quest_names: tuple,
    expand: str | None,
    zoom: float,
    no_features: bool,
    overrides: tuple,
) -> None:
    """Show every projected overlay of a map, in draw order."""
    descriptor = _select(session, map_key)
    _apply_overrides(session, overrides)
    if no_features:
        session.set_toggles(show_extracts=False, show_transits=False)
    session.viewport.set_zoom(zoom)
    for name in quest_names:
        try:
            tq = session.add_quest(name)
        except ValueError as e:
            console.print(f"[red]{e}[/]")
            continue
        console.print(f"[{theme.hsl_to_hex(tq.color)}]*[/] Tracking {tq.name}")
    if expand:
        try:
            session.toggle_expanded(expand)
        except ValueError as e:
            console.print(f"[red]{e}[/]")
    console.print(overlay_table(session.overlays(), title=f"{descriptor.name} overlays"))


@cli.command()
@click.argument("map_key", metavar="MAP", default="Customs")
@click.option("--quest", "quest_names", multiple=True, help="Quest to track")
@click.pass_obj
def dashboard(session: MapSession, map_key: str, quest_names: tuple) -> None:
    """Launch the live TUI dashboard."""
    from map_ui.tui import run_dashboard
    _select(session, map_key)
    for name in quest_names:
        try:
            session.add_quest(name)
        except ValueError as e:
            console.print(f"[red]{e}[/]")
    run_dashboard(session)


@cli.command()
@click.option("--tail", default=50, type=int, help="Number of lines to show")
@click.pass_obj
def logs(session: MapSession, tail: int) -> None:
    """Show session events."""
    for line in session.get_recent_logs(tail):
        console.print(line)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8000, type=int, help="Port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP API."""
    import uvicorn
    uvicorn.run("api_server:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
