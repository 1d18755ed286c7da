"""Supported maps, their background images and default calibrations."""
from dataclasses import dataclass
from typing import Optional

from .calibration import Calibration

# Remote SVG renders of the map backgrounds; a few maps only ship local raster images
DEFAULT_IMAGE_BASE_URL = "https://assets.tarkov.dev/maps/svg"
DEFAULT_LOCAL_IMAGE_DIR = "public/assets/maps"
# URL prefix the API serves the local images under
DEFAULT_LOCAL_IMAGE_URL = "/maps"

# Suffix of the extended-area variant of a map name used by quest data (e.g. "Ground Zero 21+")
EXTENDED_AREA_SUFFIX = " 21+"


@dataclass(frozen=True)
class MapDescriptor:
    """Static description of one map."""
    map_id: int
    name: str
    svg: str
    default_calibration: Calibration
    local_image: bool = False

    def image_source(
        self,
        image_base_url: str = DEFAULT_IMAGE_BASE_URL,
        local_image_url: str = DEFAULT_LOCAL_IMAGE_URL,
    ) -> str:
        """Background image reference: local .jpg for raster maps, remote .svg otherwise."""
        if self.local_image:
            return f"{local_image_url.rstrip('/')}/{self.svg}.jpg"
        return f"{image_base_url.rstrip('/')}/{self.svg}.svg"

    def to_dict(self) -> dict:
        return {
            "map_id": self.map_id,
            "name": self.name,
            "svg": self.svg,
            "local_image": self.local_image,
            "default_calibration": self.default_calibration.to_dict(),
        }


def _map(map_id, name, svg, offset_x, offset_z, scale_x, scale_z, flip_x, flip_z, swap, local=False):
    return MapDescriptor(
        map_id=map_id,
        name=name,
        svg=svg,
        default_calibration=Calibration(
            offset_x=offset_x,
            offset_z=offset_z,
            scale_x=scale_x,
            scale_z=scale_z,
            flip_x=flip_x,
            flip_z=flip_z,
            swap_axes=swap,
        ),
        local_image=local,
    )


MAPS: tuple[MapDescriptor, ...] = (
    _map(0, "Factory", "Factory", 51.1, 54.3, 0.76, 0.7, True, True, True),
    _map(1, "Customs", "Customs", 65.2, 56.3, 0.094, 0.18, True, False, False),
    _map(2, "Woods", "Woods", 48.5, 67.3, 0.0759, 0.0729, True, False, False),
    _map(3, "Shoreline", "Shoreline", 32.5, 39.8, 0.0636, 0.0917, True, False, False),
    _map(4, "Interchange", "Interchange", 59.333, 49.238, 0.1123, 0.1083, True, False, False),
    _map(5, "The Lab", "labs", 161.3, 111, 0.33, 0.33, False, False, True, local=True),
    _map(6, "Reserve", "Reserve", 48.6, 50.856, 0.163, 0.1797, True, False, False),
    _map(7, "Lighthouse", "Lighthouse", 48.3, 58, 0.0955, 0.058, True, False, False),
    _map(8, "Streets of Tarkov", "StreetsOfTarkov", 53.6, 35.67, 0.1657, 0.1206, True, False, False),
    _map(9, "Ground Zero", "GroundZero", 71.5, 25.5, 0.28, 0.2, True, False, False),
    _map(10, "The Labyrinth", "labyrinth", 33.5, 50, 0.825, 0.83, False, False, True, local=True),
)

DEFAULT_MAP_ID = 1

_BY_ID = {m.map_id: m for m in MAPS}


def get_map(map_id: int) -> Optional[MapDescriptor]:
    return _BY_ID.get(map_id)


def find_map(key) -> Optional[MapDescriptor]:
    """Look a map up by id or by (case-insensitive) name or svg identifier."""
    if isinstance(key, int):
        return _BY_ID.get(key)
    text = str(key).strip()
    if text.isdigit():
        return _BY_ID.get(int(text))
    lowered = text.lower()
    for descriptor in MAPS:
        if descriptor.name.lower() == lowered or descriptor.svg.lower() == lowered:
            return descriptor
    return None


def map_name_matches(candidate: str, map_name: str) -> bool:
    """True if a dataset map name refers to map_name or its extended-area variant."""
    return candidate == map_name or candidate == f"{map_name}{EXTENDED_AREA_SUFFIX}"
