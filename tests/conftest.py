from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from map_core.calibration import Calibration  # noqa: E402
from map_core.session import MapSession  # noqa: E402

SETTINGS = ROOT / "config" / "settings.yaml"


@pytest.fixture
def session() -> MapSession:
    """Session over the bundled datasets with a fixed color seed."""
    return MapSession(str(SETTINGS), rng=random.Random(7))


@pytest.fixture
def customs_calib() -> Calibration:
    return Calibration(
        offset_x=65.2,
        offset_z=56.3,
        scale_x=0.094,
        scale_z=0.18,
        flip_x=True,
        flip_z=False,
        swap_axes=False,
    )
