"""Exceptions raised by the renamer."""
from pathlib import Path


class RenamerError(Exception):
    """Base class for renamer errors."""


class InvalidEpisodeError(RenamerError):
    """An episode cannot be renamed because its season/episode is unknown."""

    def __init__(self, title: str, season: int, episode: int):
        super().__init__(
            f"invalid season/episode number for '{title}': S{season} E{episode}"
        )
        self.title = title
        self.season = season
        self.episode = episode


class FileOperationError(RenamerError):
    """A single move, copy or delete failed."""

    def __init__(self, message: str, source: Path, target: Path | None = None):
        super().__init__(message)
        self.source = source
        self.target = target
