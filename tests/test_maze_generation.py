import random

import pytest

from labyrinth.config import LabyrinthConfig
from labyrinth.constants import Direction
from labyrinth.dungeon.generator import MazeGenerator
from labyrinth.dungeon.grid import Coord, FloorGrid, SpatialGrid
from labyrinth.rng import RNGManager


def _generate(seed=42, **overrides):
    cfg = LabyrinthConfig(**overrides)
    return MazeGenerator(RNGManager(seed), cfg).generate(), cfg


@pytest.mark.parametrize("seed", [1, 42, "labyrinth"])
def test_every_floor_is_fully_connected(seed):
    (grid, _), cfg = _generate(seed)
    for floor_grid in grid.floors:
        start = floor_grid.room(0, 0)
        assert len(floor_grid.reachable_from(start)) == cfg.map_width * cfg.map_height


def test_passages_are_symmetric():
    (grid, _), _ = _generate(7)
    for floor_grid in grid.floors:
        for room in floor_grid.rooms():
            for direction in Direction:
                other = floor_grid.neighbor(room, direction)
                if other is None:
                    assert not room.is_open(direction)
                else:
                    assert room.is_open(direction) == other.is_open(direction.opposite)


def test_carving_yields_spanning_tree():
    floor_grid = FloorGrid(0, 8, 5)
    MazeGenerator.carve(floor_grid, random.Random(3))
    open_edges = sum(
        1 for room in floor_grid.rooms() for d in (Direction.EAST, Direction.SOUTH) if room.is_open(d)
    )
    assert open_edges == 8 * 5 - 1
    assert len(floor_grid.reachable_from(floor_grid.room(4, 2))) == 40


def test_markers_per_floor():
    (grid, _), cfg = _generate(11)
    for floor_grid in grid.floors:
        is_final = floor_grid.floor == cfg.final_floor
        assert floor_grid.find("has_entrance") is not None
        assert (floor_grid.find("has_exit") is not None) == is_final
        assert (floor_grid.find("has_stairs_down") is not None) == (not is_final)
        for flag in ("has_boss", "has_boss_entrance", "has_boss_exit"):
            assert (floor_grid.find(flag) is not None) == is_final


def test_markers_use_distinct_rooms():
    (grid, _), cfg = _generate(5)
    final = grid.floor(cfg.final_floor)
    flags = ("has_entrance", "has_exit", "has_boss", "has_boss_entrance", "has_boss_exit")
    coords = {final.find(flag).coord for flag in flags}
    assert len(coords) == len(flags)


def test_connect_floors_links_stairs_to_next_entrance():
    (grid, links), cfg = _generate(9)
    assert sorted(links) == list(range(cfg.num_floors - 1))
    for floor, link in links.items():
        down_room = grid.room_at(link.down)
        up_room = grid.room_at(link.up)
        assert down_room.has_stairs_down
        assert up_room.has_entrance and up_room.has_stairs_up
        assert link.up.floor == floor + 1
    assert grid.floor(0).find("has_stairs_up") is None


def test_same_seed_same_layout():
    (a, _), _ = _generate("repeatable", map_width=10, map_height=10)
    (b, _), _ = _generate("repeatable", map_width=10, map_height=10)
    for fa, fb in zip(a.floors, b.floors):
        for ra, rb in zip(fa.rooms(), fb.rooms()):
            assert ra.exits == rb.exits
            assert ra.has_entrance == rb.has_entrance
            assert ra.has_stairs_down == rb.has_stairs_down


def test_marker_exhaustion_skips_without_failing(caplog):
    (grid, links), _ = _generate(1, map_width=2, map_height=2, num_floors=1)
    floor_grid = grid.floor(0)
    assert all(room.has_marker() for room in floor_grid.rooms())
    # Four rooms for five final-floor markers: the last one is dropped
    assert floor_grid.find("has_boss_exit") is None
    assert links == {}
    assert "No unoccupied room left" in caplog.text


def test_spatial_grid_room_at_bounds():
    grid = SpatialGrid(2, 3, 3)
    assert grid.room_at(Coord(2, 2, 1)) is not None
    assert grid.room_at(Coord(3, 0, 0)) is None
    assert grid.room_at(Coord(0, 0, 2)) is None
