from __future__ import annotations

import logging
import random
import re
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..enemies import EnemyTemplate
from ..exceptions import CatalogError
from .models import Item, ItemType
from .schema import validate_enemy_dict, validate_item_dict

logger = logging.getLogger(__name__)


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class Catalog:
    """Static item, fixture and enemy definitions for one session.

    Templates come from ``labyrinth/data/catalog.yaml`` (or an explicit
    mapping) and are schema-validated on load. Each template receives a fresh
    unique id when the catalog is built; ids are drawn from the supplied RNG so
    a seeded session gets stable ids.

    The catalog owns no placement state.
    """

    def __init__(self, data: Dict[str, Any], rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._items: Dict[str, Item] = {}
        self._by_name: Dict[str, str] = {}
        self.regular_pool: List[str] = []
        self.quest_items: List[str] = []
        self.static_pool: List[str] = []
        self.enemy_templates: List[EnemyTemplate] = []
        self.boss_name: str = ""
        self.boss_description: str = ""
        self._build(data or {})

    # ---- Construction ----------------------------------------------------
    @classmethod
    def load(cls, path: Optional[Path] = None, rng: Optional[random.Random] = None) -> "Catalog":
        """Load the packaged catalog, or a YAML file at path."""
        try:
            if path is None:
                text = resources.files("labyrinth.data").joinpath("catalog.yaml").read_text(encoding="utf-8")
                logger.debug("Loaded embedded catalog resource")
            else:
                text = Path(path).read_text(encoding="utf-8")
                logger.debug("Loaded catalog from path: %s", path)
            raw = yaml.safe_load(text) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise CatalogError(f"Unable to read catalog: {exc}") from exc
        return cls(raw, rng=rng)

    def _build(self, data: Dict[str, Any]) -> None:
        for section, pool in (
            ("items", self.regular_pool),
            ("quest_items", self.quest_items),
            ("static_items", self.static_pool),
        ):
            for entry in data.get(section) or []:
                validate_item_dict(entry)
                item = self._register(entry)
                if (section == "static_items") != item.is_static:
                    raise CatalogError(f"'{item.name}' does not belong in section '{section}'")
                pool.append(item.id)

        for entry in data.get("enemies") or []:
            validate_enemy_dict(entry)
            self.enemy_templates.append(
                EnemyTemplate(
                    name=entry["name"],
                    description=entry.get("description", ""),
                    health=int(entry["health"]),
                    attack=int(entry["attack"]),
                    defense=int(entry["defense"]),
                )
            )

        boss = data.get("boss") or {}
        if not boss.get("name"):
            raise CatalogError("Catalog must define a boss with a name")
        self.boss_name = str(boss["name"])
        self.boss_description = str(boss.get("description", ""))
        logger.info(
            "Catalog built: %d items, %d quest items, %d static items, %d enemy archetypes",
            len(self.regular_pool),
            len(self.quest_items),
            len(self.static_pool),
            len(self.enemy_templates),
        )

    def _register(self, entry: Dict[str, Any]) -> Item:
        name = entry["name"]
        if name in self._by_name:
            raise CatalogError(f"Duplicate item name in catalog: {name}")
        item_id = self.new_id(name)
        item = Item.from_dict(item_id, entry)
        self._items[item_id] = item
        self._by_name[name] = item_id
        return item

    def new_id(self, name: str) -> str:
        return f"{_slug(name)}-{self._rng.getrandbits(32):08x}"

    # ---- Lookup ----------------------------------------------------------
    def get(self, item_id: str) -> Optional[Item]:
        return self._items.get(item_id)

    def by_name(self, name: str) -> Item:
        try:
            return self._items[self._by_name[name]]
        except KeyError:
            raise CatalogError(f"Unknown item template: {name}") from None

    def has_name(self, name: str) -> bool:
        return name in self._by_name

    def items(self) -> List[Item]:
        return list(self._items.values())

    def of_type(self, item_type: ItemType) -> List[Item]:
        return [i for i in self._items.values() if i.type == item_type]
