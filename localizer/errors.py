"""Exception types raised by the workspace and core operations."""


class LocalizerError(Exception):
    """Base class for all localizer failures."""


class NotFoundError(LocalizerError, FileNotFoundError):
    """A language folder, baseline folder or translation file is missing."""


class StructuralMismatchError(LocalizerError, ValueError):
    """A translation file's shape disagrees with what the baseline requires."""


class TreeIOError(LocalizerError, OSError):
    """A translation file could not be read, parsed or written."""


class LanguageExistsError(LocalizerError):
    """Attempted to create a language folder that already exists."""


class InvalidLanguageError(LocalizerError, ValueError):
    """The language code cannot be used as a folder name."""
