from .grid import Coord, Decoration, FloorGrid, Room, SpatialGrid

__all__ = ["Coord", "Decoration", "FloorGrid", "Room", "SpatialGrid"]
