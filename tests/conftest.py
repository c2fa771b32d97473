"""
Pytest configuration and fixtures for tvrenamer tests.
"""

import os
import sys
from datetime import date
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tvrenamer.models import Episode, MediaFile, MediaFileType, Show  # noqa: E402
from tvrenamer.settings import RenamerSettings  # noqa: E402


@pytest.fixture
def settings() -> RenamerSettings:
    """Default settings snapshot."""
    return RenamerSettings()


@pytest.fixture
def library(tmp_path: Path) -> Path:
    """Data source folder holding the shows."""
    path = tmp_path / "TV"
    path.mkdir()
    return path


@pytest.fixture
def make_file():
    """Create a file on disk and return its MediaFile."""
    def _make(path: Path, file_type: MediaFileType, content: str = "data", **kwargs) -> MediaFile:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return MediaFile(path, file_type, **kwargs)
    return _make


@pytest.fixture
def breaking_bad(library: Path, make_file) -> Show:
    """
    A badly named show on disk:

        TV/breaking.bad/poster.jpeg
        TV/breaking.bad/tvshow.nfo
        TV/breaking.bad/season01-poster.jpg
        TV/breaking.bad/S01/bb.s01e01.mkv
        TV/breaking.bad/S01/bb.s01e01.nfo
        TV/breaking.bad/S01/bb.s01e01.en.srt
    """
    root = library / "breaking.bad"
    show = Show(path=root, data_source=library, title="Breaking Bad", year=2008)
    show.media_files = [
        make_file(root / "poster.jpeg", MediaFileType.POSTER, mtime=1.0),
        make_file(root / "tvshow.nfo", MediaFileType.NFO, content="<tvshow/>"),
    ]

    episode = show.add_episode(Episode(season=1, episode=1, title="Pilot", first_aired=date(2008, 1, 20)))
    episode.media_files = [
        make_file(root / "S01" / "bb.s01e01.mkv", MediaFileType.VIDEO, content="video"),
        make_file(root / "S01" / "bb.s01e01.nfo", MediaFileType.NFO, content="<episodedetails/>"),
        make_file(root / "S01" / "bb.s01e01.en.srt", MediaFileType.SUBTITLE, content="1\n"),
    ]
    episode.path = root / "S01"

    season = show.get_season(1)
    season.media_files = [make_file(root / "season01-poster.jpg", MediaFileType.SEASON_POSTER)]
    return show


def paths(media_files) -> set[Path]:
    """Paths of media files, for set comparisons."""
    return {mf.path for mf in media_files}


@pytest.fixture
def as_paths():
    """Fixture providing the paths() helper."""
    return paths
