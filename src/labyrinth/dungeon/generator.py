from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from ..config import LabyrinthConfig
from ..constants import Direction
from ..placement import random_unoccupied_room
from ..rng import RNGManager
from .grid import Coord, FloorGrid, Room, SpatialGrid

logger = logging.getLogger(__name__)

Frontier = Tuple[Tuple[int, int], Tuple[int, int], Direction]


@dataclass(frozen=True)
class StairLink:
    """Stairs-down room on ``down.floor`` leading to the entrance one floor below."""

    down: Coord
    up: Coord


class MazeGenerator:
    """Deterministic multi-floor maze generator.

    Each floor is carved as a spanning tree with a randomized frontier
    (Prim's-style) walk seeded per floor via RNGManager, so the same
    (seed, floor) always yields the same layout and markers.
    """

    def __init__(self, rngm: RNGManager, config: LabyrinthConfig) -> None:
        self.rngm = rngm
        self.config = config

    def generate(self) -> Tuple[SpatialGrid, Dict[int, StairLink]]:
        cfg = self.config
        grid = SpatialGrid(cfg.num_floors, cfg.map_width, cfg.map_height)
        for floor in range(cfg.num_floors):
            self.generate_floor(grid.floor(floor))
        links = self.connect_floors(grid)
        return grid, links

    def generate_floor(self, floor_grid: FloorGrid) -> FloorGrid:
        floor = floor_grid.floor
        rng = self.rngm.context_rng("floor_layout", floor)
        logger.info("Generating floor %d (%dx%d)", floor, floor_grid.width, floor_grid.height)
        self.carve(floor_grid, rng)
        self.place_markers(floor_grid, rng)
        return floor_grid

    # ---- Carving ---------------------------------------------------------
    @staticmethod
    def carve(floor_grid: FloorGrid, rng: random.Random) -> None:
        start = (rng.randrange(floor_grid.width), rng.randrange(floor_grid.height))
        visited: Set[Tuple[int, int]] = {start}
        frontier: List[Frontier] = []

        def push_neighbors(cell: Tuple[int, int]) -> None:
            for direction, nb in floor_grid.neighbors_4(*cell):
                frontier.append(((nb.x, nb.y), cell, direction))

        push_neighbors(start)
        while frontier:
            # Uniform random pop; swap-remove keeps it O(1)
            i = rng.randrange(len(frontier))
            frontier[i], frontier[-1] = frontier[-1], frontier[i]
            cell, source, direction = frontier.pop()
            if cell in visited:
                continue
            visited.add(cell)
            floor_grid.open_passage(floor_grid.room(*source), direction)
            push_neighbors(cell)
        logger.debug("Carved floor %d: %d rooms connected", floor_grid.floor, len(visited))

    # ---- Markers ---------------------------------------------------------
    def place_markers(self, floor_grid: FloorGrid, rng: random.Random) -> None:
        is_final = floor_grid.floor == self.config.final_floor
        self._mark(floor_grid, rng, "has_entrance")
        self._mark(floor_grid, rng, "has_exit" if is_final else "has_stairs_down")
        if is_final:
            self._mark(floor_grid, rng, "has_boss")
            self._mark(floor_grid, rng, "has_boss_entrance")
            self._mark(floor_grid, rng, "has_boss_exit")

    @staticmethod
    def _mark(floor_grid: FloorGrid, rng: random.Random, flag: str) -> Optional[Room]:
        room = random_unoccupied_room(rng, floor_grid)
        if room is None:
            logger.warning("No unoccupied room left for %s on floor %d; skipping", flag, floor_grid.floor)
            return None
        setattr(room, flag, True)
        logger.debug("Placed %s at (%d,%d) on floor %d", flag, room.x, room.y, floor_grid.floor)
        return room

    @staticmethod
    def connect_floors(grid: SpatialGrid) -> Dict[int, StairLink]:
        """Pair each floor's stairs-down room with the next floor's entrance."""
        links: Dict[int, StairLink] = {}
        for floor in range(len(grid) - 1):
            down = grid.floor(floor).find("has_stairs_down")
            up = grid.floor(floor + 1).find("has_entrance")
            if down is None or up is None:
                logger.warning("Cannot link floor %d to %d: missing stairs or entrance", floor, floor + 1)
                continue
            up.has_stairs_up = True
            links[floor] = StairLink(down=down.coord, up=up.coord)
            logger.debug("Linked floor %d %s -> floor %d %s", floor, down.coord, floor + 1, up.coord)
        return links
