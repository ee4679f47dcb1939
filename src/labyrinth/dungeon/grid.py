from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Set, Tuple

from ..constants import Direction

logger = logging.getLogger(__name__)

MARKER_FLAGS: Tuple[str, ...] = (
    "has_entrance",
    "has_exit",
    "has_boss",
    "has_boss_entrance",
    "has_boss_exit",
    "has_stairs_up",
    "has_stairs_down",
)


class Coord(NamedTuple):
    """Composite (x, y, floor) key shared by every spatial map."""

    x: int
    y: int
    floor: int

    def step(self, direction: Direction) -> "Coord":
        dx, dy = direction.delta
        return Coord(self.x + dx, self.y + dy, self.floor)

    def manhattan(self, other: "Coord") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)


@dataclass
class Decoration:
    type: str
    id: str


@dataclass
class Room:
    """One logical cell of a floor: four passage flags plus marker flags."""

    x: int
    y: int
    floor: int
    exits: Dict[Direction, bool] = field(default_factory=lambda: {d: False for d in Direction})
    visited: bool = False
    searched: bool = False
    has_player: bool = False
    has_entrance: bool = False
    has_exit: bool = False
    has_boss: bool = False
    has_boss_entrance: bool = False
    has_boss_exit: bool = False
    has_stairs_up: bool = False
    has_stairs_down: bool = False
    decorations: List[Decoration] = field(default_factory=list)

    @property
    def coord(self) -> Coord:
        return Coord(self.x, self.y, self.floor)

    def has_marker(self) -> bool:
        return any(getattr(self, name) for name in MARKER_FLAGS)

    def is_open(self, direction: Direction) -> bool:
        return self.exits[direction]

    def closed_directions(self) -> List[Direction]:
        return [d for d in Direction if not self.exits[d]]

    def copy(self) -> "Room":
        clone = Room(
            x=self.x,
            y=self.y,
            floor=self.floor,
            exits=dict(self.exits),
            decorations=[Decoration(d.type, d.id) for d in self.decorations],
        )
        for name in ("visited", "searched", "has_player") + MARKER_FLAGS:
            setattr(clone, name, getattr(self, name))
        return clone


class FloorGrid:
    """A width x height lattice of rooms for one floor.

    Storage and coordinate math only; carving lives in the maze generator.
    All room access is bounds-checked.
    """

    def __init__(self, floor: int, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Invalid floor size")
        self.floor = floor
        self.width = width
        self.height = height
        self._rooms: List[List[Room]] = [[Room(x, y, floor) for x in range(width)] for y in range(height)]

    # ---- Safety / Bounds -------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def room(self, x: int, y: int) -> Optional[Room]:
        if not self.in_bounds(x, y):
            return None
        return self._rooms[y][x]

    def rooms(self) -> Iterator[Room]:
        for row in self._rooms:
            yield from row

    def neighbor(self, room: Room, direction: Direction) -> Optional[Room]:
        dx, dy = direction.delta
        return self.room(room.x + dx, room.y + dy)

    def neighbors_4(self, x: int, y: int) -> Iterable[Tuple[Direction, Room]]:
        # Ordered for deterministic traversal
        for direction in Direction:
            dx, dy = direction.delta
            r = self.room(x + dx, y + dy)
            if r is not None:
                yield direction, r

    # ---- Passages --------------------------------------------------------
    def open_passage(self, room: Room, direction: Direction) -> bool:
        """Open the passage on both sides. Returns False at the grid edge."""
        other = self.neighbor(room, direction)
        if other is None:
            logger.error("Attempt to open passage %s out of bounds at (%d,%d)", direction.value, room.x, room.y)
            return False
        room.exits[direction] = True
        other.exits[direction.opposite] = True
        return True

    def closed_passages(self, room: Room) -> List[Direction]:
        """Closed directions of room that lead to an in-bounds neighbour."""
        return [d for d in room.closed_directions() if self.neighbor(room, d) is not None]

    # ---- Search ----------------------------------------------------------
    def reachable_from(self, start: Room) -> Set[Tuple[int, int]]:
        """BFS over open passages. Deterministic neighbour ordering."""
        seen = {(start.x, start.y)}
        dq = deque([start])
        while dq:
            r = dq.popleft()
            for direction in Direction:
                if not r.exits[direction]:
                    continue
                n = self.neighbor(r, direction)
                if n is None or (n.x, n.y) in seen:
                    continue
                seen.add((n.x, n.y))
                dq.append(n)
        return seen

    def find(self, flag: str) -> Optional[Room]:
        for r in self.rooms():
            if getattr(r, flag):
                return r
        return None

    # ---- Export ----------------------------------------------------------
    def to_str_lines(self, player: Optional[Coord] = None) -> List[str]:
        """ASCII rendering: rooms as cells, walls between closed passages."""
        lines: List[str] = ["#" * (self.width * 2 + 1)]
        for y in range(self.height):
            row = ["#"]
            below = ["#"]
            for x in range(self.width):
                r = self._rooms[y][x]
                if player is not None and (player.x, player.y) == (x, y):
                    symbol = "@"
                elif r.has_boss:
                    symbol = "B"
                elif r.has_exit:
                    symbol = "X"
                elif r.has_stairs_down:
                    symbol = ">"
                elif r.has_stairs_up:
                    symbol = "<"
                elif r.has_entrance:
                    symbol = "E"
                else:
                    symbol = "."
                row.append(symbol)
                row.append(" " if r.exits[Direction.EAST] else "#")
                below.append(" " if r.exits[Direction.SOUTH] else "#")
                below.append("#")
            lines.append("".join(row))
            lines.append("".join(below))
        return lines


class SpatialGrid:
    """All floors of one labyrinth, addressable by Coord."""

    def __init__(self, num_floors: int, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.floors: List[FloorGrid] = [FloorGrid(f, width, height) for f in range(num_floors)]

    def __len__(self) -> int:
        return len(self.floors)

    def floor(self, index: int) -> FloorGrid:
        return self.floors[index]

    def room_at(self, coord: Coord) -> Optional[Room]:
        if not 0 <= coord.floor < len(self.floors):
            return None
        return self.floors[coord.floor].room(coord.x, coord.y)
