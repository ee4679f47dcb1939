from importlib.metadata import version, PackageNotFoundError

from .game import GameResult, Labyrinth

__all__ = ["Labyrinth", "GameResult", "__version__"]

try:
    __version__ = version("labyrinth-engine")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"
