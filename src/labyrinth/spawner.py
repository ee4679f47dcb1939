from __future__ import annotations

import logging
import random
from typing import Dict, Optional, Tuple

from .config import LabyrinthConfig
from .constants import ARTISAN_TOOLS
from .dungeon.grid import Decoration, FloorGrid, SpatialGrid
from .enemies import Enemy, EnemyTemplate
from .items.catalog import Catalog
from .items.schema import validate_enemy_dict
from .placement import PlacementIndex, random_unoccupied_room
from .rng import RNGManager

logger = logging.getLogger(__name__)

TORCH_LIT = "torch_lit"
TORCH_UNLIT = "torch_unlit"


class EntitySpawner:
    """Populates a generated labyrinth with items, fixtures, enemies and torches.

    Each floor draws from its own ``placement`` RNG stream. Every placement
    goes through the combined unoccupied-room filter; when a floor runs out of
    rooms the remaining placements are skipped with a warning.
    """

    def __init__(self, catalog: Catalog, config: LabyrinthConfig, rngm: RNGManager) -> None:
        self.catalog = catalog
        self.config = config
        self.rngm = rngm

    def populate(self, grid: SpatialGrid, index: PlacementIndex) -> Tuple[Dict[str, Enemy], Optional[str]]:
        """Fill every floor. Returns all enemies by id and the boss id (if placed)."""
        enemies: Dict[str, Enemy] = {}
        boss_id: Optional[str] = None
        for floor_grid in grid.floors:
            rng = self.rngm.context_rng("placement", floor_grid.floor)
            self._place_quest_items(floor_grid, index, rng)
            self._place_items(floor_grid, index, rng)
            self._place_statics(floor_grid, index, rng)
            enemies.update(self._place_enemies(floor_grid, index, rng))
            if floor_grid.floor == self.config.final_floor:
                boss = self._place_boss(floor_grid, index)
                if boss is not None:
                    enemies[boss.id] = boss
                    boss_id = boss.id
            self._place_torches(floor_grid, index, rng)
        logger.info("Populated %d floors: %d enemies, %d items, %d static items",
                    len(grid), len(enemies), len(index.items), len(index.static_items))
        return enemies, boss_id

    # ---- Items -----------------------------------------------------------
    def _place_quest_items(self, floor_grid: FloorGrid, index: PlacementIndex, rng: random.Random) -> None:
        # The floor-1 objective tool is guaranteed before the random pool fills the floor
        if floor_grid.floor != 1 or floor_grid.floor == self.config.final_floor:
            return
        if not self.catalog.has_name(ARTISAN_TOOLS):
            logger.warning("Catalog lacks %s; floor 1 objective cannot be completed", ARTISAN_TOOLS)
            return
        room = random_unoccupied_room(rng, floor_grid, index)
        if room is None:
            logger.warning("No room for %s on floor %d", ARTISAN_TOOLS, floor_grid.floor)
            return
        index.place_item(room.coord, self.catalog.by_name(ARTISAN_TOOLS).id)

    def _place_items(self, floor_grid: FloorGrid, index: PlacementIndex, rng: random.Random) -> None:
        if not self.catalog.regular_pool:
            return
        for _ in range(self.config.items_per_floor):
            room = random_unoccupied_room(rng, floor_grid, index)
            if room is None:
                logger.warning("Floor %d exhausted while placing items", floor_grid.floor)
                return
            index.place_item(room.coord, rng.choice(self.catalog.regular_pool))

    def _place_statics(self, floor_grid: FloorGrid, index: PlacementIndex, rng: random.Random) -> None:
        if not self.catalog.static_pool:
            return
        for _ in range(self.config.static_items_per_floor):
            room = random_unoccupied_room(rng, floor_grid, index)
            if room is None:
                logger.warning("Floor %d exhausted while placing static items", floor_grid.floor)
                return
            index.place_static(room.coord, rng.choice(self.catalog.static_pool))

    # ---- Enemies ---------------------------------------------------------
    def _place_enemies(self, floor_grid: FloorGrid, index: PlacementIndex, rng: random.Random) -> Dict[str, Enemy]:
        placed: Dict[str, Enemy] = {}
        if not self.catalog.enemy_templates:
            return placed
        speed = self.config.tick_interval_ms(floor_grid.floor)
        for _ in range(self.config.enemies_for_floor(floor_grid.floor)):
            room = random_unoccupied_room(rng, floor_grid, index)
            if room is None:
                logger.warning("Floor %d exhausted while placing enemies", floor_grid.floor)
                break
            template = rng.choice(self.catalog.enemy_templates)
            enemy = Enemy.spawn(self.catalog.new_id(template.name), template, floor_grid.floor, speed)
            index.place_enemy(room.coord, enemy.id)
            placed[enemy.id] = enemy
        logger.debug("Placed %d enemies on floor %d", len(placed), floor_grid.floor)
        return placed

    def boss_template(self) -> EnemyTemplate:
        cfg = self.config
        stats = {
            "name": self.catalog.boss_name,
            "description": self.catalog.boss_description,
            "health": cfg.player_max_health * 5,
            "attack": cfg.player_base_attack * 2,
            "defense": cfg.player_base_defense * 2,
        }
        validate_enemy_dict(stats)
        return EnemyTemplate(**stats)

    def _place_boss(self, floor_grid: FloorGrid, index: PlacementIndex) -> Optional[Enemy]:
        room = floor_grid.find("has_boss")
        if room is None:
            logger.warning("Final floor has no boss room; boss not placed")
            return None
        template = self.boss_template()
        speed = max(1, self.config.tick_interval_ms(floor_grid.floor) // 2)
        boss = Enemy.spawn(self.catalog.new_id(template.name), template, floor_grid.floor, speed)
        boss.is_boss = True
        if not index.place_enemy(room.coord, boss.id):
            return None
        logger.info("Boss %s placed at %s", boss.name, room.coord)
        return boss

    # ---- Decorations -----------------------------------------------------
    def _place_torches(self, floor_grid: FloorGrid, index: PlacementIndex, rng: random.Random) -> None:
        count = 0
        for room in floor_grid.rooms():
            if rng.random() >= self.config.torch_chance:
                continue
            kind = TORCH_LIT if rng.random() < self.config.torch_lit_chance else TORCH_UNLIT
            decoration = Decoration(type=kind, id=f"{kind}-{room.x}-{room.y}-{room.floor}")
            room.decorations.append(decoration)
            index.decorations[room.coord] = decoration
            count += 1
        logger.debug("Placed %d torches on floor %d", count, floor_grid.floor)
