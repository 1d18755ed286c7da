from __future__ import annotations

from dataclasses import replace

import pytest

from map_core.calibration import Calibration
from map_core.maps import MAPS
from map_core.transform import (
    WorldPoint,
    percent_to_world,
    project_point,
    project_polygon,
    unproject_point,
    world_to_percent,
)


def test_customs_scenario(customs_calib: Calibration) -> None:
    px, pz = project_point(WorldPoint(100, 50), customs_calib)

    assert px == pytest.approx(55.8)
    assert pz == pytest.approx(65.3)


def test_single_axis_formulas() -> None:
    assert world_to_percent(10, 50, 0.5, False) == pytest.approx(55)
    assert world_to_percent(10, 50, 0.5, True) == pytest.approx(45)
    assert percent_to_world(55, 50, 0.5, False) == pytest.approx(10)
    assert percent_to_world(45, 50, 0.5, True) == pytest.approx(10)


@pytest.mark.parametrize("descriptor", MAPS, ids=lambda m: m.name)
def test_round_trip_on_default_calibrations(descriptor) -> None:
    calib = descriptor.default_calibration
    for point in (WorldPoint(0, 0), WorldPoint(-312.5, 87.25), WorldPoint(640.0, -1200.75)):
        px, pz = project_point(point, calib)
        back = unproject_point(px, pz, calib)
        assert back.x == pytest.approx(point.x)
        assert back.z == pytest.approx(point.z)


def test_round_trip_with_swap_and_negative_scale(customs_calib: Calibration) -> None:
    calib = replace(customs_calib, swap_axes=True, scale_z=-0.25, flip_z=True)
    point = WorldPoint(-41.5, 903.0)

    back = unproject_point(*project_point(point, calib), calib)

    assert back.x == pytest.approx(point.x)
    assert back.z == pytest.approx(point.z)


def test_flip_z_leaves_x_untouched(customs_calib: Calibration) -> None:
    point = WorldPoint(123.0, -45.0)
    flipped = replace(customs_calib, flip_z=True)

    x1, z1 = project_point(point, customs_calib)
    x2, z2 = project_point(point, flipped)

    assert x1 == x2
    assert z1 != z2


def test_flip_x_leaves_z_untouched(customs_calib: Calibration) -> None:
    point = WorldPoint(123.0, -45.0)
    unflipped = replace(customs_calib, flip_x=False)

    x1, z1 = project_point(point, customs_calib)
    x2, z2 = project_point(point, unflipped)

    assert z1 == z2
    assert x1 != x2


def test_swap_exchanges_world_axes(customs_calib: Calibration) -> None:
    swapped = replace(customs_calib, swap_axes=True)

    assert project_point(WorldPoint(10, 0), swapped) == project_point(WorldPoint(0, 10), customs_calib)


def test_polygon_uses_same_transform_for_every_vertex(customs_calib: Calibration) -> None:
    swapped = replace(customs_calib, swap_axes=True)
    outline = [WorldPoint(1, 2), WorldPoint(3, 4), WorldPoint(5, 6)]

    assert project_polygon(outline, swapped) == [project_point(p, swapped) for p in outline]
    assert project_polygon([], swapped) == []


def test_world_point_reads_legacy_y_as_z() -> None:
    assert WorldPoint.from_dict({"x": 1, "y": 2}) == WorldPoint(1.0, 2.0)
    # Full 3D positions keep z; y is height there
    assert WorldPoint.from_dict({"x": 1, "y": 9, "z": 3}) == WorldPoint(1.0, 3.0)
    assert WorldPoint.from_dict({"x": 1}) is None
    assert WorldPoint.from_dict(None) is None
