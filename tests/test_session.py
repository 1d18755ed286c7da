from __future__ import annotations

import random
from pathlib import Path

import pytest

from map_core.maps import MAPS, get_map
from map_core.overlay import Z_QUEST_EXPANDED
from map_core.session import MapSession, random_quest_color
from map_core.viewport import ImageRect

CUSTOMS, FACTORY, GROUND_ZERO = 1, 0, 9


def test_defaults_from_settings(session: MapSession) -> None:
    assert session.selected_map_id == CUSTOMS
    assert session.current_map.name == "Customs"
    assert session.image_source == "https://assets.tarkov.dev/maps/svg/Customs.svg"
    assert session.calibration == get_map(CUSTOMS).default_calibration


def test_local_image_maps(session: MapSession) -> None:
    session.select_map(5)

    assert session.image_source == "/maps/labs.jpg"
    assert session.local_image_dir == session.root / "public" / "assets" / "maps"


def test_add_is_idempotent(session: MapSession) -> None:
    first = session.add_quest("Debut")
    again = session.add_quest("Debut")

    assert again is first
    assert [tq.name for tq in session.tracked] == ["Debut"]
    assert session.tracked[0].color == first.color


def test_add_unknown_quest_raises(session: MapSession) -> None:
    with pytest.raises(ValueError):
        session.add_quest("Not A Quest")
    assert session.tracked == []


def test_remove_clears_expansion(session: MapSession) -> None:
    session.add_quest("Debut")
    session.add_quest("Delivery from the Past")
    session.toggle_expanded("Debut")

    assert session.remove_quest("Debut") is True
    assert session.expanded_quest is None
    assert session.remove_quest("Debut") is False
    assert [tq.name for tq in session.tracked] == ["Delivery from the Past"]


def test_toggle_expanded_collapses_on_second_call(session: MapSession) -> None:
    session.add_quest("Debut")

    assert session.toggle_expanded("Debut") == "Debut"
    assert session.toggle_expanded("Debut") is None
    with pytest.raises(ValueError):
        session.toggle_expanded("Delivery from the Past")


def test_map_switch_resets_tracking_but_not_calibrations(session: MapSession) -> None:
    edited = session.update_calibration({"offset_x": 60.0, "flip_z": True})
    session.add_quest("Debut")
    session.toggle_expanded("Debut")
    session.viewport.set_zoom(4)
    before = session.calibrations.snapshot()

    session.select_map(FACTORY)

    assert session.tracked == []
    assert session.expanded_quest is None
    assert session.viewport.zoom == 1.0
    assert session.calibrations.snapshot() == before
    assert session.calibrations.get(CUSTOMS) is edited
    assert session.calibration == get_map(FACTORY).default_calibration

    session.select_map(CUSTOMS)
    assert session.calibration is edited


def test_select_unknown_map_raises(session: MapSession) -> None:
    with pytest.raises(ValueError):
        session.select_map(42)
    assert session.selected_map_id == CUSTOMS


def test_picker_excludes_tracked_and_dedupes(session: MapSession) -> None:
    names = [q.name for q in session.available_quests()]
    assert names == ["Debut", "Delivery from the Past", "Operation Aquarius - Part 1"]

    session.add_quest("Debut")
    assert "Debut" not in [q.name for q in session.untracked_available_quests()]


def test_extended_area_quests_on_ground_zero(session: MapSession) -> None:
    session.select_map(GROUND_ZERO)

    assert [q.name for q in session.available_quests()] == ["Shooting Cans"]


def test_pointer_readout_inverts_projection(session: MapSession) -> None:
    rect = ImageRect(left=0, top=0, width=1000, height=500)

    readout = session.pointer_move(558, 326.5, rect)

    assert readout.game_x == pytest.approx(100)
    assert readout.game_z == pytest.approx(50)
    assert readout.to_dict()["game_x"] == "100.00"


def test_pointer_pans_only_while_pressed(session: MapSession) -> None:
    rect = ImageRect(left=0, top=0, width=1000, height=500)

    session.pointer_move(300, 200, rect)
    assert (session.viewport.offset_x, session.viewport.offset_y) == (0, 0)

    assert session.pointer_down(300, 200) is True
    session.pointer_move(340, 180, rect)
    assert (session.viewport.offset_x, session.viewport.offset_y) == (40, -20)

    session.pointer_up()
    session.pointer_move(600, 400, rect)
    assert (session.viewport.offset_x, session.viewport.offset_y) == (40, -20)


def test_secondary_button_does_not_pan(session: MapSession) -> None:
    assert session.pointer_down(10, 10, button=2) is False

    session.pointer_move(90, 90, ImageRect(left=0, top=0, width=100, height=100))

    assert session.viewport.dragging is False
    assert session.viewport.offset_x == 0


def test_overlays_draw_order(session: MapSession) -> None:
    session.set_toggles(show_calibration=True)
    session.add_quest("Operation Aquarius - Part 1")
    session.add_quest("Delivery from the Past")
    session.toggle_expanded("Delivery from the Past")

    markers = session.overlays().sorted_markers()

    assert markers[0].kind == "origin"
    assert markers[-1].label == "Delivery from the Past"
    assert markers[-1].z_index == Z_QUEST_EXPANDED
    delivery = markers[-1]
    assert (delivery.x, delivery.y) == pytest.approx((33.5314, 42.764))
    assert len([m for m in markers if m.label == "Operation Aquarius - Part 1"]) == 4


def test_overlays_follow_calibration_edits(session: MapSession) -> None:
    before = {m.label: (m.x, m.y) for m in session.overlays().markers}
    session.update_calibration({"offset_x": 0})
    after = {m.label: (m.x, m.y) for m in session.overlays().markers}

    for label, (x, y) in before.items():
        assert after[label][0] == pytest.approx(x - 65.2)
        assert after[label][1] == y


def test_update_calibration_unknown_map(session: MapSession) -> None:
    with pytest.raises(ValueError):
        session.update_calibration({"offset_x": 1}, map_id=77)


def test_events_are_logged(session: MapSession) -> None:
    session.add_quest("Debut")
    session.select_map(FACTORY)

    recent = session.get_recent_logs(2)
    assert "[QUEST] Tracking Debut" in recent[0]
    assert recent[1].endswith("[MAP] Switched to Factory")
    assert session.get_recent_logs(0) == []
    assert session.get_recent_logs(-3) == []


def test_session_log_file(tmp_path: Path) -> None:
    config = tmp_path / "config" / "settings.yaml"
    config.parent.mkdir()
    config.write_text("log_directory: ./logs\ndata_directory: ./nodata\ndefault_map_id: 2\n", encoding="utf-8")

    session = MapSession(str(config))
    session.select_map(FACTORY)

    assert session.current_map.name == "Factory"
    assert session.quests == []
    log_text = (tmp_path / "logs" / "session.log").read_text(encoding="utf-8")
    assert "Switched to Factory" in log_text


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    session = MapSession(str(tmp_path / "config" / "settings.yaml"), features=None, quests=[])

    assert session.selected_map_id == CUSTOMS
    assert session.settings["zoom_max"] == 10.0
    assert len(session.calibrations.map_ids) == len(MAPS)


def test_quest_colors() -> None:
    color = random_quest_color(random.Random(1))

    assert color.startswith("hsl(") and color.endswith(", 90%, 65%)")
