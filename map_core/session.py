"""Map session - owns the UI state of the tactical map and builds overlay frames."""
import random
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .calibration import Calibration, CalibrationStore
from .features import FeatureDataset, features_for_map, load_features, project_features
from .maps import DEFAULT_IMAGE_BASE_URL, DEFAULT_LOCAL_IMAGE_DIR, DEFAULT_LOCAL_IMAGE_URL, DEFAULT_MAP_ID, MAPS, MapDescriptor, get_map
from .overlay import DEFAULT_EXPANDED_MULTIPLIER, OverlaySet, RenderContext, origin_overlay
from .quests import Quest, TrackedQuest, available_quests, load_quests, project_quest_objectives
from .transform import WorldPoint, unproject_point
from .viewport import ImageRect, Viewport, pointer_percent


def random_quest_color(rng: Optional[random.Random] = None) -> str:
    """Bright random hue for a tracked quest, e.g. 'hsl(212, 90%, 65%)'."""
    h = (rng or random).randrange(360)
    return f"hsl({h}, 90%, 65%)"


@dataclass
class PointerReadout:
    """Last pointer position: percent over the image and the matching world position."""
    percent_x: float = 0.0
    percent_z: float = 0.0
    game_x: float = 0.0
    game_z: float = 0.0

    def to_dict(self) -> dict:
        return {
            "x": f"{self.percent_x:.2f}",
            "z": f"{self.percent_z:.2f}",
            "game_x": f"{self.game_x:.2f}",
            "game_z": f"{self.game_z:.2f}",
            "raw_perc_x": self.percent_x,
            "raw_perc_z": self.percent_z,
        }


class MapSession:
    """Active map, tracked quests, feature toggles and viewport for one map viewer."""

    def __init__(
        self,
        config_path: str = "config/settings.yaml",
        features: Optional[FeatureDataset] = None,
        quests: Optional[List[Quest]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config_path = Path(config_path).resolve()
        self.root = self.config_path.parent.parent
        self.settings = self._load_settings()
        self._rng = rng

        self.calibrations = CalibrationStore(MAPS)
        self.features = features if features is not None else load_features(self._data_path("maps_file"))
        self.quests: List[Quest] = quests if quests is not None else load_quests(self._data_path("quests_file"))
        self.quests_by_name: Dict[str, Quest] = {}
        for quest in self.quests:
            self.quests_by_name.setdefault(quest.name, quest)

        self.logs: deque = deque(maxlen=1000)
        self._log_path = self._resolve_log_path()

        default_id = self.settings.get("default_map_id", DEFAULT_MAP_ID)
        self.selected_map_id = default_id if get_map(default_id) else DEFAULT_MAP_ID
        self.tracked: List[TrackedQuest] = []
        self.expanded_quest: Optional[str] = None
        self.show_extracts = True
        self.show_transits = True
        self.show_calibration = False
        self.viewport = self._new_viewport()
        self.pointer = PointerReadout()

        self.add_log(
            f"Loaded {len(self.features.maps)} feature maps, {len(self.quests)} quests", "SESSION"
        )

    # --- settings ---

    def _load_settings(self) -> dict:
        """Load settings.yaml merged over defaults."""
        settings = self._get_default_settings()
        if not self.config_path.exists():
            return settings
        with open(self.config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if isinstance(loaded, dict):
            settings.update(loaded)
        return settings

    def _get_default_settings(self) -> dict:
        return {
            "data_directory": "./data",
            "maps_file": "maps.json",
            "quests_file": "quests.json",
            "default_map_id": DEFAULT_MAP_ID,
            "image_base_url": DEFAULT_IMAGE_BASE_URL,
            "local_image_directory": DEFAULT_LOCAL_IMAGE_DIR,
            "local_image_url": DEFAULT_LOCAL_IMAGE_URL,
            "zoom_min": 0.5,
            "zoom_max": 10.0,
            "zoom_step": 0.5,
            "wheel_step": 0.1,
            "expanded_marker_multiplier": DEFAULT_EXPANDED_MULTIPLIER,
            "log_directory": None,
        }

    def _data_path(self, key: str) -> Path:
        data_dir = Path(self.settings["data_directory"])
        if not data_dir.is_absolute():
            data_dir = self.root / data_dir
        return data_dir / self.settings[key]

    def _resolve_log_path(self) -> Optional[Path]:
        log_dir = self.settings.get("log_directory")
        if not log_dir:
            return None
        path = Path(log_dir)
        if not path.is_absolute():
            path = self.root / path
        return path / "session.log"

    def _new_viewport(self) -> Viewport:
        return Viewport(
            zoom_min=float(self.settings["zoom_min"]),
            zoom_max=float(self.settings["zoom_max"]),
            zoom_step=float(self.settings["zoom_step"]),
            wheel_step=float(self.settings["wheel_step"]),
        )

    # --- logging ---

    def add_log(self, message: str, source: str = "SESSION") -> None:
        """Add a log entry to the in-memory buffer and the session log file when configured."""
        timestamp = datetime.now().strftime("%H:%M:%S")
        entry = f"[{timestamp}] [{source}] {message}"
        self.logs.append(entry)
        if self._log_path is None:
            return
        try:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._log_path, "a", encoding="utf-8") as f:
                f.write(entry + "\n")
        except OSError:
            self._log_path = None

    def get_recent_logs(self, count: int = 50) -> list[str]:
        if count <= 0:
            return []
        return list(self.logs)[-count:]

    # --- map selection ---

    @property
    def current_map(self) -> MapDescriptor:
        return get_map(self.selected_map_id)

    @property
    def calibration(self) -> Calibration:
        return self.calibrations.get(self.selected_map_id)

    @property
    def image_source(self) -> str:
        return self.image_source_for(self.current_map)

    def image_source_for(self, descriptor: MapDescriptor) -> str:
        return descriptor.image_source(self.settings["image_base_url"], self.settings["local_image_url"])

    @property
    def local_image_dir(self) -> Path:
        """Directory holding the local background images served under local_image_url."""
        path = Path(self.settings["local_image_directory"])
        if not path.is_absolute():
            path = self.root / path
        return path

    def select_map(self, map_id: int) -> MapDescriptor:
        """Switch the active map. Tracked quests and expansion are cleared; calibrations are kept."""
        descriptor = get_map(map_id)
        if descriptor is None:
            raise ValueError(f"Map not found: {map_id}")
        self.selected_map_id = map_id
        self.tracked = []
        self.expanded_quest = None
        self.viewport.reset()
        self.add_log(f"Switched to {descriptor.name}", "MAP")
        return descriptor

    def set_toggles(
        self,
        show_extracts: Optional[bool] = None,
        show_transits: Optional[bool] = None,
        show_calibration: Optional[bool] = None,
    ) -> None:
        if show_extracts is not None:
            self.show_extracts = show_extracts
        if show_transits is not None:
            self.show_transits = show_transits
        if show_calibration is not None:
            self.show_calibration = show_calibration

    # --- calibration ---

    def update_calibration(self, partial: Dict[str, Any], map_id: Optional[int] = None) -> Calibration:
        """Edit a map's calibration (the active map by default)."""
        target = self.selected_map_id if map_id is None else map_id
        if target not in self.calibrations:
            raise ValueError(f"Map not found: {target}")
        merged = self.calibrations.update(target, partial)
        self.add_log(f"Calibration {get_map(target).name}: {partial}", "CALIB")
        return merged

    def reset_calibration(self, map_id: Optional[int] = None) -> Calibration:
        target = self.selected_map_id if map_id is None else map_id
        if target not in self.calibrations:
            raise ValueError(f"Map not found: {target}")
        self.add_log(f"Calibration {get_map(target).name} reset to default", "CALIB")
        return self.calibrations.reset(target)

    # --- quests ---

    def available_quests(self) -> List[Quest]:
        return available_quests(self.quests, self.current_map.name)

    def untracked_available_quests(self) -> List[Quest]:
        """Quests the add-quest picker offers: on the map and not yet tracked."""
        tracked = {tq.name for tq in self.tracked}
        return [q for q in self.available_quests() if q.name not in tracked]

    def get_tracked(self, name: str) -> Optional[TrackedQuest]:
        for tq in self.tracked:
            if tq.name == name:
                return tq
        return None

    def add_quest(self, name: str) -> TrackedQuest:
        """Track a quest; already-tracked quests are returned unchanged (no recolor)."""
        existing = self.get_tracked(name)
        if existing is not None:
            return existing
        if name not in self.quests_by_name:
            raise ValueError(f"Quest not found: {name}")
        tq = TrackedQuest(name=name, color=random_quest_color(self._rng))
        self.tracked.append(tq)
        self.add_log(f"Tracking {name} ({tq.color})", "QUEST")
        return tq

    def remove_quest(self, name: str) -> bool:
        """Stop tracking a quest; clears expansion when it was the expanded one."""
        before = len(self.tracked)
        self.tracked = [tq for tq in self.tracked if tq.name != name]
        if self.expanded_quest == name:
            self.expanded_quest = None
        removed = len(self.tracked) != before
        if removed:
            self.add_log(f"Untracked {name}", "QUEST")
        return removed

    def toggle_expanded(self, name: str) -> Optional[str]:
        """Expand a tracked quest, or collapse it when it is already expanded."""
        if self.get_tracked(name) is None:
            raise ValueError(f"Quest not tracked: {name}")
        self.expanded_quest = None if self.expanded_quest == name else name
        return self.expanded_quest

    # --- pointer ---

    def pointer_down(self, client_x: float, client_y: float, button: int = 0) -> bool:
        """Start panning on a primary-button press; other buttons are ignored."""
        if button != 0:
            return False
        self.viewport.begin_drag(client_x, client_y)
        return True

    def pointer_up(self) -> None:
        self.viewport.end_drag()

    def pointer_move(self, client_x: float, client_y: float, rect: ImageRect) -> Optional[PointerReadout]:
        """Update the GAME POS readout from a pointer event; also pans while dragging."""
        self.viewport.drag_to(client_x, client_y)
        percent = pointer_percent(client_x, client_y, rect)
        if percent is None:
            return None
        return self.pointer_at_percent(*percent)

    def pointer_at_percent(self, px: float, pz: float) -> PointerReadout:
        world: WorldPoint = unproject_point(px, pz, self.calibration)
        self.pointer = PointerReadout(percent_x=px, percent_z=pz, game_x=world.x, game_z=world.z)
        return self.pointer

    # --- rendering ---

    def render_context(self) -> RenderContext:
        return RenderContext(
            map_name=self.current_map.name,
            calibration=self.calibration,
            zoom=self.viewport.zoom,
            show_extracts=self.show_extracts,
            show_transits=self.show_transits,
            show_calibration=self.show_calibration,
            expanded_quest=self.expanded_quest,
            expanded_multiplier=float(self.settings["expanded_marker_multiplier"]),
        )

    def overlays(self) -> OverlaySet:
        """Project all visible overlays of the active map for the current state."""
        ctx = self.render_context()
        out = OverlaySet()
        if ctx.show_calibration:
            out.extend(origin_overlay(ctx))
        out.extend(project_features(features_for_map(self.features, ctx.map_name), ctx))
        out.extend(project_quest_objectives(self.tracked, self.quests_by_name, ctx))
        return out

    def to_dict(self) -> dict:
        descriptor = self.current_map
        return {
            "map": descriptor.to_dict(),
            "image_source": self.image_source,
            "calibration": self.calibration.to_dict(),
            "show_extracts": self.show_extracts,
            "show_transits": self.show_transits,
            "show_calibration": self.show_calibration,
            "tracked": [{"name": tq.name, "color": tq.color} for tq in self.tracked],
            "expanded_quest": self.expanded_quest,
            "viewport": self.viewport.to_dict(),
            "pointer": self.pointer.to_dict(),
        }
