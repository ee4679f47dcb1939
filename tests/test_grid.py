import pytest

from labyrinth.constants import Direction
from labyrinth.dungeon.grid import Coord, FloorGrid


def test_direction_parse_accepts_names_and_enums():
    assert Direction.parse("North") is Direction.NORTH
    assert Direction.parse(Direction.WEST) is Direction.WEST
    with pytest.raises(ValueError):
        Direction.parse("up")


def test_coord_step_and_distance():
    c = Coord(2, 2, 0)
    assert c.step(Direction.NORTH) == Coord(2, 1, 0)
    assert c.step(Direction.EAST) == Coord(3, 2, 0)
    assert c.manhattan(Coord(0, 5, 0)) == 5


def test_open_passage_updates_both_rooms():
    grid = FloorGrid(0, 3, 3)
    a = grid.room(1, 1)
    assert grid.open_passage(a, Direction.SOUTH)
    assert a.is_open(Direction.SOUTH)
    assert grid.room(1, 2).is_open(Direction.NORTH)


def test_open_passage_refuses_grid_edge():
    grid = FloorGrid(0, 3, 3)
    corner = grid.room(0, 0)
    assert grid.open_passage(corner, Direction.NORTH) is False
    assert not corner.is_open(Direction.NORTH)


def test_closed_passages_skip_edges():
    grid = FloorGrid(0, 3, 3)
    corner = grid.room(0, 0)
    assert set(corner.closed_directions()) == set(Direction)
    assert set(grid.closed_passages(corner)) == {Direction.EAST, Direction.SOUTH}


def test_room_copy_is_detached():
    grid = FloorGrid(0, 2, 2)
    room = grid.room(0, 0)
    room.has_entrance = True
    clone = room.copy()
    clone.exits[Direction.EAST] = True
    assert clone.has_entrance
    assert not room.is_open(Direction.EAST)


def test_invalid_floor_size():
    with pytest.raises(ValueError):
        FloorGrid(0, 0, 5)


def test_ascii_render_dimensions():
    grid = FloorGrid(0, 4, 3)
    lines = grid.to_str_lines(player=Coord(1, 1, 0))
    assert len(lines) == 3 * 2 + 1
    assert all(len(line) == 4 * 2 + 1 for line in lines)
    assert lines[3][3] == "@"
