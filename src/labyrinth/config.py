from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ConfigError
from .items.schema import validate_config_dict

logger = logging.getLogger(__name__)


@dataclass
class LabyrinthConfig:
    """Tunable constants of a labyrinth session.

    Defaults mirror ``labyrinth/data/default_config.yaml``. Small grids and a
    reduced floor count are handy for tests; the engine reads every constant
    from here instead of module globals.
    """

    map_width: int = 20
    map_height: int = 20
    num_floors: int = 3

    player_max_health: int = 100
    player_base_attack: int = 10
    player_base_defense: int = 2
    initial_search_radius: int = 1
    max_search_radius: int = 4

    items_per_floor: int = 5
    static_items_per_floor: int = 2
    base_enemies: int = 3
    enemies_per_floor: int = 2

    torch_chance: float = 0.1
    torch_lit_chance: float = 0.3
    hidden_passage_chance: float = 0.1
    boss_ambient_chance: float = 0.05

    perception_bonus: int = 2
    trap_damage: int = 10
    # Enemy tick cadence per floor; the last value applies to deeper floors
    enemy_tick_ms: List[int] = field(default_factory=lambda: [2000, 1500, 1000, 500])

    @property
    def final_floor(self) -> int:
        return self.num_floors - 1

    def enemies_for_floor(self, floor: int) -> int:
        return self.base_enemies + floor * self.enemies_per_floor

    def tick_interval_ms(self, floor: int) -> int:
        if floor < len(self.enemy_tick_ms):
            return self.enemy_tick_ms[floor]
        return self.enemy_tick_ms[-1]

    def validate(self) -> "LabyrinthConfig":
        """Raise ConfigError when a value would make generation impossible."""
        # Types and per-field bounds first; the checks below compare fields
        validate_config_dict(dataclasses.asdict(self))
        if not 0 < self.initial_search_radius <= self.max_search_radius:
            raise ConfigError(
                f"Search radius bounds invalid: initial={self.initial_search_radius}, max={self.max_search_radius}"
            )
        return self

    # ---- Loading ---------------------------------------------------------
    @staticmethod
    def _load_yaml(path: Path) -> dict:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Malformed config file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    @classmethod
    def _deep_merge(cls, base: dict, overlay: dict) -> dict:
        merged = dict(base)
        for k, v in (overlay or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                merged[k] = cls._deep_merge(base[k], v)
            else:
                merged[k] = v
        return merged

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LabyrinthConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            kwargs[key] = value
        try:
            cfg = cls(**kwargs)
        except TypeError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc
        return cfg.validate()

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "LabyrinthConfig":
        """Load configuration from packaged defaults and an optional user file.

        If user_path is provided and exists, its values overlay the defaults.
        """
        try:
            with resources.files("labyrinth.data").joinpath("default_config.yaml").open("r", encoding="utf-8") as f:
                default_data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Default config not found; falling back to dataclass defaults.")
            default_data = dataclasses.asdict(cls())

        user_data: dict = {}
        if user_path is not None:
            user_path = Path(user_path)
            if user_path.exists():
                user_data = cls._load_yaml(user_path)
                logger.info("Loaded user config from %s", user_path)
            else:
                logger.warning("User config file not found: %s", user_path)

        merged = cls._deep_merge(default_data, user_data)
        cfg = cls.from_dict(merged)
        logger.debug("Config merged: %s", cfg)
        return cfg

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(dataclasses.asdict(self), f, sort_keys=False)
        logger.info("Saved config to %s", path)
