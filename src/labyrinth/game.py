from __future__ import annotations

import dataclasses
import logging
import random
from typing import Dict, List, Optional, Set, Tuple, Union

from .actions import ActionResolver
from .ai import EnemyAI
from .combat import CombatResolver
from .config import LabyrinthConfig
from .constants import Direction
from .dungeon.generator import MazeGenerator
from .dungeon.grid import Coord, Decoration, Room
from .enemies import Enemy
from .events import EventBus
from .items.catalog import Catalog
from .items.models import EquipmentSlot, Item
from .objectives import Objective, evaluate
from .placement import PlacementIndex
from .player.inventory import InventoryEntry
from .player.player import ActiveEffect, Player
from .rng import RNGManager
from .spawner import EntitySpawner
from .state import GameResult, GameState, ResultType

logger = logging.getLogger(__name__)

__all__ = ["GameResult", "Labyrinth", "ResultType"]


class Labyrinth:
    """
    One complete game session.

    Construction generates every floor, populates it and puts the player on the
    floor-0 entrance. Mutators never raise on invalid actions; they decline and
    leave a message instead. Queries return copies unless noted otherwise.

    The instance is single-threaded: callers serialize player actions and ticks.
    """

    def __init__(
        self,
        initial_deaths: int = 0,
        config: Optional[LabyrinthConfig] = None,
        seed: Optional[Union[int, str, bytes]] = None,
        catalog: Optional[Catalog] = None,
    ) -> None:
        self.config = (config or LabyrinthConfig()).validate()
        self.rngm = RNGManager(seed)
        self.catalog = catalog or Catalog.load(rng=self.rngm.context_rng("catalog_ids"))
        logger.info("New labyrinth (seed=%s)", self.rngm.get_master_seed_hex())

        grid, stairs = MazeGenerator(self.rngm, self.config).generate()
        index = PlacementIndex()
        enemies, boss_id = EntitySpawner(self.catalog, self.config, self.rngm).populate(grid, index)

        entrance = grid.floor(0).find("has_entrance")
        start = entrance.coord if entrance is not None else Coord(0, 0, 0)
        player = Player(
            location=start,
            max_health=self.config.player_max_health,
            base_attack=self.config.player_base_attack,
            base_defense=self.config.player_base_defense,
            search_radius=self.config.initial_search_radius,
            max_search_radius=self.config.max_search_radius,
            deaths=initial_deaths,
        )
        self.state = GameState(
            config=self.config,
            grid=grid,
            stairs=stairs,
            index=index,
            catalog=self.catalog,
            player=player,
            rng=self.rngm.context_rng("gameplay"),
            enemies=enemies,
            boss_id=boss_id,
        )
        self.state.relocate_player(start)

        self.combat = CombatResolver(self.state)
        self.actions = ActionResolver(self.state, self.combat)
        self.ai = EnemyAI(self.state, self.combat)
        self.state.message("Welcome to the Labyrinth. Find your way down and beware what lurks in the dark.")

    # ---- Collaborators ---------------------------------------------------
    @property
    def rng(self) -> random.Random:
        """Gameplay randomness (search, mechanisms, boss ambience). Replaceable."""
        return self.state.rng

    @rng.setter
    def rng(self, value: random.Random) -> None:
        self.state.rng = value

    @property
    def events(self) -> EventBus:
        return self.state.events

    # ---- Mutators --------------------------------------------------------
    def move(self, direction: Union[Direction, str], player_name: str = "", elapsed_time: float = 0) -> bool:
        self.state.stamp(player_name, elapsed_time)
        return self.actions.move(direction)

    def search(self) -> bool:
        return self.actions.search()

    def interact(self, player_name: str = "", elapsed_time: float = 0) -> bool:
        self.state.stamp(player_name, elapsed_time)
        return self.actions.interact()

    def use_item(self, item_id: str, player_name: str = "", elapsed_time: float = 0) -> bool:
        self.state.stamp(player_name, elapsed_time)
        return self.actions.use_item(item_id)

    def process_enemy_movement(self, player_name: str = "", elapsed_time: float = 0) -> None:
        self.state.stamp(player_name, elapsed_time)
        self.ai.tick()

    def process_boss_logic(self) -> None:
        self.ai.boss_tick()

    def initiate_combat(self, enemy_id: str) -> bool:
        return self.combat.initiate_combat(enemy_id)

    def take_damage(self, amount: int, cause: str) -> int:
        return self.combat.take_damage(amount, cause)

    def revive_player(self) -> bool:
        """Restore full health and clear a defeat. Deaths are kept.

        A won game stays won, and a living player is left untouched.
        Returns True when the player was revived.
        """
        result = self.state.result
        if result is not None and result.type == ResultType.VICTORY:
            self.state.message("You have already escaped the Labyrinth.")
            return False
        if self.state.player.alive and result is None:
            self.state.message("You are still standing.")
            return False
        self.state.player.revive()
        self.state.result = None
        self.state.message("You feel life flow back into you. The Labyrinth is not done with you yet.")
        logger.info("Player revived (deaths=%d)", self.state.player.deaths)
        return True

    # ---- Player queries --------------------------------------------------
    def get_player_location(self) -> Coord:
        return self.state.player.location

    def get_player_health(self) -> int:
        return self.state.player.health

    def get_player_max_health(self) -> int:
        return self.state.player.max_health

    def get_deaths(self) -> int:
        return self.state.player.deaths

    def get_current_floor(self) -> int:
        return self.state.current_floor

    def get_inventory(self) -> List[InventoryEntry]:
        return [dataclasses.replace(e) for e in self.state.player.inventory.entries()]

    def get_equipped(self) -> Dict[EquipmentSlot, Optional[Item]]:
        inventory = self.state.player.inventory
        return {slot: inventory.equipped_item(slot) for slot in EquipmentSlot}

    def get_current_attack(self) -> int:
        return self.state.player.attack

    def get_current_defense(self) -> int:
        return self.state.player.defense

    def get_search_radius(self) -> int:
        return self.state.player.search_radius

    def get_active_effects(self) -> List[ActiveEffect]:
        return [dataclasses.replace(e) for e in self.state.player.effects]

    @property
    def player(self) -> Player:
        """Live player record."""
        return self.state.player

    # ---- World queries ---------------------------------------------------
    def get_map_grid(self, floor: Optional[int] = None) -> List[List[Room]]:
        """Row-major snapshot ``[y][x]`` of a floor, defaulting to the current one."""
        floor_grid = self.state.floor_grid(floor)
        rows: List[List[Room]] = [[] for _ in range(floor_grid.height)]
        for room in floor_grid.rooms():
            rows[room.y].append(room.copy())
        return rows

    def get_visited_cells(self) -> Set[Tuple[int, int]]:
        return self.state.visited_cells()

    def get_enemy(self, enemy_id: str) -> Optional[Enemy]:
        """Live enemy record, or None."""
        return self.state.enemies.get(enemy_id)

    def get_item(self, item_id: str) -> Optional[Item]:
        return self.catalog.get(item_id)

    def get_revealed_static_items(self) -> Set[Coord]:
        return {c for c in self.state.index.revealed if c in self.state.index.static_items}

    def get_decorations(self) -> Dict[Coord, Decoration]:
        return dict(self.state.index.decorations)

    def get_current_objective(self) -> Objective:
        return evaluate(self.state)

    def get_compass_heading(self) -> Optional[Direction]:
        """Direction toward this floor's way onward while a True Compass is equipped."""
        compass = self.state.player.inventory.equipped_item(EquipmentSlot.COMPASS)
        if compass is None or compass.effect != "reveal_exit":
            return None
        floor_grid = self.state.floor_grid()
        target = floor_grid.find("has_stairs_down") or floor_grid.find("has_exit")
        if target is None:
            return None
        here = self.state.player.location
        dx, dy = target.x - here.x, target.y - here.y
        if not dx and not dy:
            return None
        if abs(dx) >= abs(dy):
            return Direction.EAST if dx > 0 else Direction.WEST
        return Direction.SOUTH if dy > 0 else Direction.NORTH

    def get_tick_interval_ms(self) -> int:
        return self.config.tick_interval_ms(self.state.current_floor)

    # ---- Outcome ---------------------------------------------------------
    def is_game_over(self) -> bool:
        return self.state.player.is_game_over

    def get_game_result(self) -> Optional[GameResult]:
        return self.state.result

    def is_boss_defeated(self) -> bool:
        return self.state.player.boss_defeated

    # ---- Messages --------------------------------------------------------
    def get_messages(self) -> List[str]:
        return self.state.messages.snapshot()

    def clear_messages(self) -> None:
        self.state.messages.clear()

    def render(self, floor: Optional[int] = None) -> str:
        floor_grid = self.state.floor_grid(floor)
        player = self.state.player.location if floor_grid.floor == self.state.current_floor else None
        return "\n".join(floor_grid.to_str_lines(player))
