from __future__ import annotations

import pytest

from map_core.calibration import Calibration
from map_core.overlay import Z_QUEST, Z_QUEST_EXPANDED, RenderContext
from map_core.quests import (
    TrackedQuest,
    available_quests,
    objective_applies,
    objective_points,
    parse_quests,
    project_quest_objectives,
)
from map_core.transform import WorldPoint, project_point

RAW = [
    {
        "name": "Water Hunt",
        "experience": "6200",
        "objectives": [
            {
                "description": "Find the stash",
                "maps": [{"name": "Customs"}],
                "zones": [{"position": {"x": 1, "z": 2}}],
                "possibleLocations": [
                    {"positions": [{"x": 3, "z": 4}, {"x": 5, "z": 6}]},
                    {"positions": [{"x": 7, "y": 8}]},
                ],
            },
            {
                "description": "Hand over on Factory",
                "maps": [{"name": "Factory"}],
                "zones": [{"position": {"x": 9, "z": 9}}],
            },
        ],
    },
    {
        "name": "Office Sweep",
        "objectives": [
            {"description": "Clear the office", "maps": [{"name": "Ground Zero 21+"}], "zones": [{"position": {"x": 0, "z": 0}}]},
        ],
    },
    {"name": "No Maps", "objectives": [{"description": "Talk", "zones": [{"position": {"x": 1, "z": 1}}]}]},
    {"name": "Water Hunt", "objectives": [{"description": "dup", "maps": [{"name": "Customs"}]}]},
    {"objectives": []},
]


@pytest.fixture
def quests():
    return parse_quests(RAW)


def test_parse(quests) -> None:
    assert [q.name for q in quests] == ["Water Hunt", "Office Sweep", "No Maps", "Water Hunt"]
    assert quests[0].experience == 6200
    assert quests[0].objectives[0].possible_locations[1] == (WorldPoint(7, 8),)


def test_objective_points_flatten_zones_then_locations(quests) -> None:
    objective = quests[0].objectives[0]

    assert objective_points(objective, "Customs") == [
        WorldPoint(1, 2),
        WorldPoint(3, 4),
        WorldPoint(5, 6),
        WorldPoint(7, 8),
    ]


def test_extended_area_variant_matches(quests) -> None:
    objective = quests[1].objectives[0]

    assert objective_applies(objective, "Ground Zero")
    assert not objective_applies(objective, "Ground")


def test_off_map_objective_contributes_nothing(quests) -> None:
    assert objective_points(quests[0].objectives[1], "Customs") == []
    assert objective_points(quests[2].objectives[0], "Customs") == []


def test_available_quests_unique_in_order(quests) -> None:
    assert [q.name for q in available_quests(quests, "Customs")] == ["Water Hunt"]
    assert [q.name for q in available_quests(quests, "Ground Zero")] == ["Office Sweep"]
    assert available_quests(quests, "Lighthouse") == []


def test_projection_colors_and_positions(quests, customs_calib: Calibration) -> None:
    by_name = {"Water Hunt": quests[0]}
    ctx = RenderContext(map_name="Customs", calibration=customs_calib, zoom=2.0)

    out = project_quest_objectives([TrackedQuest("Water Hunt", "hsl(10, 90%, 65%)")], by_name, ctx)

    assert len(out.markers) == 4
    assert {m.color for m in out.markers} == {"hsl(10, 90%, 65%)"}
    assert {m.scale for m in out.markers} == {0.5}
    assert {m.z_index for m in out.markers} == {Z_QUEST}
    first = out.markers[0]
    assert (first.x, first.y) == project_point(WorldPoint(1, 2), customs_calib)


def test_expanded_quest_is_enlarged_and_on_top(quests, customs_calib: Calibration) -> None:
    by_name = {"Water Hunt": quests[0], "Office Sweep": quests[1]}
    ctx = RenderContext(map_name="Customs", calibration=customs_calib, expanded_quest="Water Hunt")

    out = project_quest_objectives([TrackedQuest("Water Hunt", "red")], by_name, ctx)

    assert out.markers
    assert all(m.scale == pytest.approx(1.8) for m in out.markers)
    assert {m.z_index for m in out.markers} == {Z_QUEST_EXPANDED}


def test_untracked_or_unknown_quests_are_skipped(quests, customs_calib: Calibration) -> None:
    ctx = RenderContext(map_name="Customs", calibration=customs_calib)

    out = project_quest_objectives([TrackedQuest("Ghost", "red")], {"Water Hunt": quests[0]}, ctx)

    assert out.markers == []


def test_marker_keys_unique_across_objectives(customs_calib: Calibration) -> None:
    quest = parse_quests(
        [
            {
                "name": "Two Stops",
                "objectives": [
                    {"maps": [{"name": "Customs"}], "zones": [{"position": {"x": 1, "z": 1}}]},
                    {"maps": [{"name": "Customs"}], "zones": [{"position": {"x": 2, "z": 2}}]},
                ],
            }
        ]
    )[0]
    ctx = RenderContext(map_name="Customs", calibration=customs_calib)

    out = project_quest_objectives([TrackedQuest("Two Stops", "red")], {"Two Stops": quest}, ctx)

    keys = [m.key for m in out.markers]
    assert len(keys) == 2
    assert len(set(keys)) == 2
