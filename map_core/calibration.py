"""Per-map calibration records and the store that owns them."""
import math
import threading
from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, Any, Dict, Iterable

if TYPE_CHECKING:
    from .maps import MapDescriptor

# Smallest scale magnitude accepted from the edit surface (range input minimum)
MIN_SCALE = 0.0001

# camelCase names used by map datasets and the web frontend
FIELD_ALIASES = {
    "offsetX": "offset_x",
    "offsetZ": "offset_z",
    "scaleX": "scale_x",
    "scaleZ": "scale_z",
    "flipX": "flip_x",
    "flipZ": "flip_z",
    "swapXZ": "swap_axes",
    "swapAxes": "swap_axes",
}

_TRUE_STRINGS = {"true", "1", "on", "yes"}
_FALSE_STRINGS = {"false", "0", "off", "no"}


@dataclass(frozen=True)
class Calibration:
    """Mapping parameters between world (x, z) and percent space for one map."""
    offset_x: float
    offset_z: float
    scale_x: float
    scale_z: float
    flip_x: bool = False
    flip_z: bool = False
    swap_axes: bool = False

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


FLOAT_FIELDS = ("offset_x", "offset_z", "scale_x", "scale_z")
BOOL_FIELDS = ("flip_x", "flip_z", "swap_axes")
SCALE_FIELDS = ("scale_x", "scale_z")


def _coerce_float(value: Any, prior: float) -> float:
    """Parse a numeric edit; non-numeric, NaN and infinite input keeps the prior value."""
    if isinstance(value, bool):
        return prior
    try:
        number = float(value)
    except (TypeError, ValueError):
        return prior
    if math.isnan(number) or math.isinf(number):
        return prior
    return number


def _clamp_scale(value: float) -> float:
    """Keep a scale usable as a divisor: magnitudes below MIN_SCALE are raised to it, sign preserved."""
    if abs(value) >= MIN_SCALE:
        return value
    return -MIN_SCALE if value < 0 else MIN_SCALE


def _coerce_bool(value: Any, prior: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return prior


def normalize_field_name(name: str) -> str:
    """Map a camelCase alias to its field name; raises ValueError for unknown fields."""
    canonical = FIELD_ALIASES.get(name, name)
    if canonical not in FLOAT_FIELDS and canonical not in BOOL_FIELDS:
        raise ValueError(f"Unknown calibration field: {name}")
    return canonical


def merge_calibration(current: Calibration, partial: Dict[str, Any]) -> Calibration:
    """Merge a sparse set of named fields into a calibration and return the new record.

    Fields not present in partial are left unchanged. Invalid values fall back to the
    current value; scales are clamped away from zero.
    """
    changes: Dict[str, Any] = {}
    for raw_name, value in partial.items():
        name = normalize_field_name(raw_name)
        prior = getattr(current, name)
        if name in FLOAT_FIELDS:
            number = _coerce_float(value, prior)
            if name in SCALE_FIELDS:
                number = _clamp_scale(number)
            changes[name] = number
        else:
            changes[name] = _coerce_bool(value, prior)
    if not changes:
        return current
    return replace(current, **changes)


class CalibrationStore:
    """Holds exactly one live calibration per map, keyed by map id."""

    def __init__(self, descriptors: Iterable["MapDescriptor"]) -> None:
        self._defaults: Dict[int, Calibration] = {}
        self._records: Dict[int, Calibration] = {}
        self._lock = threading.Lock()
        for descriptor in descriptors:
            self._defaults[descriptor.map_id] = descriptor.default_calibration
            self._records[descriptor.map_id] = descriptor.default_calibration

    def __contains__(self, map_id: object) -> bool:
        return map_id in self._records

    @property
    def map_ids(self) -> list[int]:
        return list(self._records)

    def get(self, map_id: int) -> Calibration:
        """Current calibration for a map. Unknown ids raise KeyError."""
        return self._records[map_id]

    def update(self, map_id: int, partial: Dict[str, Any]) -> Calibration:
        """Merge partial into the map's record and store the result atomically."""
        with self._lock:
            merged = merge_calibration(self._records[map_id], partial)
            self._records[map_id] = merged
        return merged

    def reset(self, map_id: int) -> Calibration:
        """Restore the map's default calibration; other maps are untouched."""
        with self._lock:
            default = self._defaults[map_id]
            self._records[map_id] = default
        return default

    def snapshot(self) -> Dict[int, Calibration]:
        with self._lock:
            return dict(self._records)
