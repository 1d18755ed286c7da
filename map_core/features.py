"""Static map features (extracts, transits) and their projection into overlay primitives."""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .overlay import (
    EXTRACT_PMC_ICON,
    EXTRACT_SCAV_ICON,
    OUTLINE_STROKE_WIDTH,
    PMC_COLORS,
    SCAV_COLORS,
    TRANSIT_COLORS,
    TRANSIT_ICON,
    Z_FEATURE,
    Z_OUTLINE,
    Marker,
    OverlaySet,
    Polygon,
    RenderContext,
)
from .transform import WorldPoint, project_point, project_polygon

EXTRACT = "extract"
TRANSIT = "transit"


@dataclass(frozen=True)
class Feature:
    """An extract or transit point with an optional outline."""
    kind: str
    name: str
    position: WorldPoint
    faction: Optional[str] = None
    outline: tuple[WorldPoint, ...] = ()
    description: Optional[str] = None

    @property
    def is_pmc(self) -> bool:
        return self.faction == "pmc"

    @property
    def title(self) -> str:
        if self.kind == TRANSIT:
            return self.description or "Transit"
        return f"{self.name} ({self.faction})"


@dataclass(frozen=True)
class MapFeatures:
    map_name: str
    extracts: tuple[Feature, ...] = ()
    transits: tuple[Feature, ...] = ()


EMPTY_FEATURES = MapFeatures(map_name="")


@dataclass
class FeatureDataset:
    """Per-map features keyed by map name; loaded once, read-only afterwards."""
    maps: dict[str, MapFeatures] = field(default_factory=dict)

    def for_map(self, map_name: str) -> MapFeatures:
        return features_for_map(self, map_name)


def _parse_outline(raw) -> tuple[WorldPoint, ...]:
    if not isinstance(raw, list):
        return ()
    points = (WorldPoint.from_dict(p) for p in raw)
    return tuple(p for p in points if p is not None)


def _parse_feature(kind: str, raw: dict, index: int) -> Optional[Feature]:
    """Build a Feature; entries without a usable position are dropped."""
    if not isinstance(raw, dict):
        return None
    position = WorldPoint.from_dict(raw.get("position"))
    if position is None:
        return None
    name = raw.get("name") or raw.get("description") or f"{kind}-{index}"
    return Feature(
        kind=kind,
        name=str(name),
        position=position,
        faction=raw.get("faction"),
        outline=_parse_outline(raw.get("outline")),
        description=raw.get("description"),
    )


def parse_features(data) -> FeatureDataset:
    """Build a dataset from the decoded maps.json list; malformed entries are skipped."""
    dataset = FeatureDataset()
    if not isinstance(data, list):
        return dataset
    for entry in data:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        extracts = [_parse_feature(EXTRACT, e, i) for i, e in enumerate(entry.get("extracts") or [])]
        transits = [_parse_feature(TRANSIT, t, i) for i, t in enumerate(entry.get("transits") or [])]
        dataset.maps[entry["name"]] = MapFeatures(
            map_name=entry["name"],
            extracts=tuple(f for f in extracts if f is not None),
            transits=tuple(f for f in transits if f is not None),
        )
    return dataset


def load_features(path: Path) -> FeatureDataset:
    """Load maps.json; a missing file yields an empty dataset."""
    if not path.exists():
        return FeatureDataset()
    with open(path, "r", encoding="utf-8") as f:
        return parse_features(json.load(f))


def features_for_map(dataset: FeatureDataset, map_name: str) -> MapFeatures:
    """Features of one map; unknown names give empty collections."""
    return dataset.maps.get(map_name, EMPTY_FEATURES)


def feature_colors(feature: Feature) -> tuple[str, str]:
    """(stroke, fill) for a feature. Presentation only."""
    if feature.kind == TRANSIT:
        return TRANSIT_COLORS
    return PMC_COLORS if feature.is_pmc else SCAV_COLORS


def feature_icon(feature: Feature) -> str:
    if feature.kind == TRANSIT:
        return TRANSIT_ICON
    return EXTRACT_PMC_ICON if feature.is_pmc else EXTRACT_SCAV_ICON


def project_feature(feature: Feature, ctx: RenderContext, index: int = 0) -> OverlaySet:
    """Marker for the feature position plus its outline polygon when it has one."""
    out = OverlaySet()
    scale = ctx.marker_scale
    stroke, fill = feature_colors(feature)
    if feature.outline:
        out.polygons.append(
            Polygon(
                kind=feature.kind,
                label=feature.name,
                points=tuple(project_polygon(feature.outline, ctx.calibration)),
                stroke=stroke,
                fill=fill,
                stroke_width=OUTLINE_STROKE_WIDTH * scale,
                z_index=Z_OUTLINE,
            )
        )
    x, y = project_point(feature.position, ctx.calibration)
    out.markers.append(
        Marker(
            kind=feature.kind,
            label=feature.name,
            x=x,
            y=y,
            scale=scale,
            z_index=Z_FEATURE,
            color=stroke,
            icon=feature_icon(feature),
            title=feature.title,
            key=f"{feature.kind}-{index}",
        )
    )
    return out


def project_features(features: MapFeatures, ctx: RenderContext) -> OverlaySet:
    """Project the enabled feature groups of one map with the context's calibration."""
    out = OverlaySet()
    if ctx.show_extracts:
        for i, feature in enumerate(features.extracts):
            out.extend(project_feature(feature, ctx, i))
    if ctx.show_transits:
        for i, feature in enumerate(features.transits):
            out.extend(project_feature(feature, ctx, i))
    return out
