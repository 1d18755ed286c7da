"""Quest dataset, objective geometry and quest marker projection."""
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

from .maps import map_name_matches
from .overlay import Z_QUEST, Z_QUEST_EXPANDED, Marker, OverlaySet, RenderContext
from .transform import WorldPoint, project_point


@dataclass(frozen=True)
class QuestObjective:
    description: str
    maps: tuple[str, ...] = ()
    zones: tuple[WorldPoint, ...] = ()
    # One tuple of candidate points per possible location
    possible_locations: tuple[tuple[WorldPoint, ...], ...] = ()


@dataclass(frozen=True)
class Quest:
    name: str
    objectives: tuple[QuestObjective, ...] = ()
    experience: int = 0
    wiki_link: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "experience": self.experience,
            "wiki_link": self.wiki_link,
            "objectives": [
                {"description": o.description, "maps": list(o.maps)} for o in self.objectives
            ],
        }


@dataclass(frozen=True)
class TrackedQuest:
    name: str
    color: str


def _points(raw: Iterable) -> tuple[WorldPoint, ...]:
    points = (WorldPoint.from_dict(p) for p in raw or [])
    return tuple(p for p in points if p is not None)


def _parse_objective(raw: dict) -> QuestObjective:
    maps = tuple(
        m["name"] for m in raw.get("maps") or [] if isinstance(m, dict) and m.get("name")
    )
    zones = _points(z.get("position") for z in raw.get("zones") or [] if isinstance(z, dict))
    locations = tuple(
        _points(loc.get("positions"))
        for loc in raw.get("possibleLocations") or []
        if isinstance(loc, dict)
    )
    return QuestObjective(
        description=str(raw.get("description") or ""),
        maps=maps,
        zones=zones,
        possible_locations=locations,
    )


def parse_quests(data) -> list[Quest]:
    """Build quests from the decoded quests.json list; entries without a name are skipped."""
    quests = []
    if not isinstance(data, list):
        return quests
    for entry in data:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        objectives = tuple(
            _parse_objective(o) for o in entry.get("objectives") or [] if isinstance(o, dict)
        )
        try:
            experience = int(entry.get("experience") or 0)
        except (TypeError, ValueError):
            experience = 0
        quests.append(
            Quest(
                name=str(entry["name"]),
                objectives=objectives,
                experience=experience,
                wiki_link=entry.get("wikiLink"),
            )
        )
    return quests


def load_quests(path: Path) -> list[Quest]:
    """Load quests.json; a missing file yields no quests."""
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as f:
        return parse_quests(json.load(f))


def objective_applies(objective: QuestObjective, map_name: str) -> bool:
    return any(map_name_matches(m, map_name) for m in objective.maps)


def objective_points(objective: QuestObjective, map_name: str) -> list[WorldPoint]:
    """Zone points then every possible-location candidate; empty off-map."""
    if not objective_applies(objective, map_name):
        return []
    points = list(objective.zones)
    for candidates in objective.possible_locations:
        points.extend(candidates)
    return points


def available_quests(quests: Iterable[Quest], map_name: str) -> list[Quest]:
    """Quests with at least one objective on the map, unique by name, in dataset order."""
    seen: set[str] = set()
    result = []
    for quest in quests:
        if quest.name in seen:
            continue
        if any(objective_applies(o, map_name) for o in quest.objectives):
            result.append(quest)
            seen.add(quest.name)
    return result


def project_quest(quest: Quest, color: str, ctx: RenderContext) -> OverlaySet:
    """One marker per objective point of a tracked quest."""
    out = OverlaySet()
    expanded = ctx.expanded_quest == quest.name
    scale = ctx.marker_scale * ctx.expanded_multiplier if expanded else ctx.marker_scale
    z_index = Z_QUEST_EXPANDED if expanded else Z_QUEST
    for obj_idx, objective in enumerate(quest.objectives):
        for idx, point in enumerate(objective_points(objective, ctx.map_name)):
            x, y = project_point(point, ctx.calibration)
            out.markers.append(
                Marker(
                    kind="quest",
                    label=quest.name,
                    x=x,
                    y=y,
                    scale=scale,
                    z_index=z_index,
                    color=color,
                    title=objective.description or quest.name,
                    key=f"{quest.name}-{obj_idx}-{idx}",
                )
            )
    return out


def project_quest_objectives(
    tracked: Iterable[TrackedQuest],
    quests_by_name: Mapping[str, Quest],
    ctx: RenderContext,
) -> OverlaySet:
    """Project every tracked quest; names missing from the dataset contribute nothing."""
    out = OverlaySet()
    for tq in tracked:
        quest = quests_by_name.get(tq.name)
        if quest is None:
            continue
        out.extend(project_quest(quest, tq.color, ctx))
    return out
