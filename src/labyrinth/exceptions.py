class LabyrinthError(Exception):
    """Base exception for the labyrinth engine."""


class ConfigError(LabyrinthError):
    """Raised when configuration values are invalid or unreadable."""


class CatalogError(LabyrinthError):
    """Raised when catalog data fails validation or a template is unknown."""
