import logging
import os
import sys

PACKAGE_LOGGER = "labyrinth"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is when a record is emitted."""

    def __init__(self) -> None:
        super().__init__()

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def resolve_level(default_level: int = logging.INFO) -> int:
    """Level from LABYRINTH_LOG_LEVEL (a name such as DEBUG), else the default."""
    level_name = os.getenv("LABYRINTH_LOG_LEVEL")
    if not level_name:
        return default_level
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else default_level


def configure_logging(default_level: int = logging.INFO) -> logging.Logger:
    """Attach one stderr handler to the ``labyrinth`` logger.

    The root logger is left alone so a host application keeps its own
    logging setup. Calling this again only updates the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(resolve_level(default_level))
    if not any(isinstance(h, _StderrHandler) for h in logger.handlers):
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
