from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Set, Tuple

from .config import LabyrinthConfig
from .dungeon.generator import StairLink
from .dungeon.grid import Coord, FloorGrid, Room, SpatialGrid
from .enemies import Enemy
from .events import EventBus, MessageLog, SoundCue
from .items.catalog import Catalog
from .items.models import Item
from .placement import PlacementIndex
from .player.player import Player

logger = logging.getLogger(__name__)


class ResultType(str, Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"


@dataclass
class GameResult:
    type: ResultType
    name: str
    time: float
    deaths: int
    cause_of_death: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type.value,
            "name": self.name,
            "time": self.time,
            "deaths": self.deaths,
        }
        if self.cause_of_death is not None:
            data["cause_of_death"] = self.cause_of_death
        return data


@dataclass
class GameState:
    """Everything one session mutates, shared by the resolvers."""

    config: LabyrinthConfig
    grid: SpatialGrid
    stairs: Dict[int, StairLink]
    index: PlacementIndex
    catalog: Catalog
    player: Player
    rng: random.Random
    enemies: Dict[str, Enemy] = field(default_factory=dict)
    messages: MessageLog = field(default_factory=MessageLog)
    events: EventBus = field(default_factory=EventBus)
    current_floor: int = 0
    result: Optional[GameResult] = None
    boss_id: Optional[str] = None
    player_name: str = ""
    elapsed_time: float = 0

    # ---- Location --------------------------------------------------------
    def floor_grid(self, floor: Optional[int] = None) -> FloorGrid:
        return self.grid.floor(self.current_floor if floor is None else floor)

    def current_room(self) -> Room:
        room = self.grid.room_at(self.player.location)
        assert room is not None, f"player off-grid at {self.player.location}"
        return room

    def relocate_player(self, coord: Coord) -> Room:
        """Move the player marker to coord and mark the destination visited."""
        old = self.grid.room_at(self.player.location)
        if old is not None:
            old.has_player = False
        new = self.grid.room_at(coord)
        assert new is not None, f"relocation off-grid to {coord}"
        new.has_player = True
        new.visited = True
        self.player.location = coord
        self.current_floor = coord.floor
        return new

    def visited_cells(self) -> Set[Tuple[int, int]]:
        return {(r.x, r.y) for r in self.floor_grid().rooms() if r.visited}

    # ---- Feedback --------------------------------------------------------
    def message(self, msg: str) -> None:
        self.messages.add(msg)

    def sound(self, cue: SoundCue) -> None:
        self.events.sound(cue)

    def stamp(self, player_name: str, elapsed_time: float) -> None:
        if player_name:
            self.player_name = player_name
        if elapsed_time:
            self.elapsed_time = elapsed_time

    def finish(self, result_type: ResultType) -> GameResult:
        """Record the terminal result and announce it on the bus."""
        self.player.is_game_over = True
        self.result = GameResult(
            type=result_type,
            name=self.player_name,
            time=self.elapsed_time,
            deaths=self.player.deaths,
            cause_of_death=self.player.cause_of_death if result_type == ResultType.DEFEAT else None,
        )
        logger.info("Game over: %s", self.result)
        self.events.emit("game_over", self.result)
        return self.result

    # ---- Inventory helpers -----------------------------------------------
    def give_item(self, item: Item) -> None:
        self.player.inventory.add_item(item)
        self.sound(SoundCue.PICKUP)

    def has_item(self, name: str) -> bool:
        return self.player.inventory.has_item_named(name)
