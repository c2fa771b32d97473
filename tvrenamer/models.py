"""Data models for the tvrenamer package."""
from __future__ import annotations

import copy
import os
import re
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from pathlib import Path


class MediaFileType(Enum):
    """Discrete type tag of a file belonging to a show, season or episode."""
    VIDEO = "video"
    NFO = "nfo"
    POSTER = "poster"
    FANART = "fanart"
    BANNER = "banner"
    CLEARART = "clearart"
    THUMB = "thumb"
    LOGO = "logo"
    CLEARLOGO = "clearlogo"
    CHARACTERART = "characterart"
    KEYART = "keyart"
    DISC = "disc"
    EXTRAFANART = "extrafanart"
    GRAPHIC = "graphic"
    SUBTITLE = "subtitle"
    TRAILER = "trailer"
    SAMPLE = "sample"
    MEDIAINFO = "mediainfo"
    VSMETA = "vsmeta"
    EXTRA = "extra"
    VIDEO_EXTRA = "video_extra"
    AUDIO = "audio"
    TEXT = "text"
    UNKNOWN = "unknown"
    SEASON_POSTER = "season_poster"
    SEASON_FANART = "season_fanart"
    SEASON_BANNER = "season_banner"
    SEASON_THUMB = "season_thumb"


# Artwork renamed 1:N from the newest file of each type
ARTWORK_TYPES = (
    MediaFileType.FANART,
    MediaFileType.POSTER,
    MediaFileType.BANNER,
    MediaFileType.CLEARART,
    MediaFileType.THUMB,
    MediaFileType.LOGO,
    MediaFileType.CLEARLOGO,
    MediaFileType.DISC,
    MediaFileType.CHARACTERART,
    MediaFileType.KEYART,
)

SEASON_ARTWORK_TYPES = (
    MediaFileType.SEASON_POSTER,
    MediaFileType.SEASON_FANART,
    MediaFileType.SEASON_BANNER,
    MediaFileType.SEASON_THUMB,
)

GRAPHIC_TYPES = frozenset(
    ARTWORK_TYPES
    + SEASON_ARTWORK_TYPES
    + (MediaFileType.EXTRAFANART, MediaFileType.GRAPHIC)
)

# Folders forming a DVD / Blu-ray / HD-DVD structure
DISC_FOLDERS = ("bdmv", "video_ts", "hvdvd_ts")

DISC_FILE_PATTERN = re.compile(
    r'(video_ts|vts_\d\d_\d)\.(vob|bup|ifo)|(index\.bdmv|movieobject\.bdmv|\d{5}\.m2ts)'
)


def is_disc_filename(filename: str) -> bool:
    """Check if a bare filename is part of a DVD or Blu-ray structure."""
    return DISC_FILE_PATTERN.fullmatch(filename.lower()) is not None


@dataclass(frozen=True)
class SubtitleTrack:
    """Stream metadata of a subtitle file."""
    language: str = ""
    forced: bool = False
    sdh: bool = False
    title: str = ""


@dataclass(frozen=True, eq=False)
class MediaFile:
    """A single file on disk.

    Two media files are equal when they point to the same normalized
    absolute path; every other attribute is descriptive only.
    """
    path: Path
    type: MediaFileType = MediaFileType.UNKNOWN
    stacking_marker: str = ""
    stacking: int = 0
    subtitles: tuple[SubtitleTrack, ...] = ()
    mtime: float = 0.0
    container_format: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(os.path.abspath(self.path)))

    @property
    def key(self) -> str:
        return os.path.normcase(str(self.path))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MediaFile):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def basename(self) -> str:
        """Filename without the last extension."""
        name = self.path.name
        dot = name.rfind(".")
        return name[:dot] if dot > 0 else name

    @property
    def extension(self) -> str:
        """Last extension without the dot, or an empty string."""
        name = self.path.name
        dot = name.rfind(".")
        return name[dot + 1:] if dot > 0 else ""

    @property
    def is_graphic(self) -> bool:
        return self.type in GRAPHIC_TYPES

    @property
    def is_disc_file(self) -> bool:
        """True for disc folders and the well known files inside them."""
        if self.path.name.lower() in DISC_FOLDERS:
            return True
        return is_disc_filename(self.path.name)

    def with_path(self, path: Path | str) -> MediaFile:
        """Return a copy of this file pointing to *path*."""
        return replace(self, path=Path(path))

    def replace_path_prefix(self, old: Path, new: Path) -> MediaFile:
        """Rebase this file from folder *old* onto folder *new*.

        Files outside *old* are returned unchanged.
        """
        try:
            relative = self.path.relative_to(Path(os.path.abspath(old)))
        except ValueError:
            return self
        return self.with_path(Path(os.path.abspath(new)) / relative)


@dataclass
class MediaInfo:
    """Technical stream facts of an episode's main video file."""
    video_codec: str = ""
    video_format: str = ""
    video_resolution: str = ""
    aspect_ratio: float = 0.0
    video_bit_depth: int = 0
    video_bitrate: int = 0
    audio_codecs: list[str] = field(default_factory=list)
    audio_channels: list[str] = field(default_factory=list)
    audio_languages: list[str] = field(default_factory=list)
    subtitle_languages: list[str] = field(default_factory=list)
    video_3d_format: str = ""
    hdr_format: str = ""
    filesize: int = 0


@dataclass(eq=False)
class Episode:
    """A single episode of a show.

    Season and episode numbers use ``-1`` for "unknown". Episodes of a
    multi-episode file each carry their own number and share the same
    video file.
    """
    season: int = -1
    episode: int = -1
    title: str = ""
    original_title: str = ""
    dvd_season: int = -1
    dvd_episode: int = -1
    first_aired: date | None = None
    year: int | None = None
    ids: dict[str, str] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    note: str = ""
    media_source: str = ""
    original_filename: str = ""
    disc: bool = False
    media_info: MediaInfo = field(default_factory=MediaInfo)
    media_files: list[MediaFile] = field(default_factory=list)
    path: Path | None = None
    show: Show | None = field(default=None, repr=False)

    @property
    def season_entity(self) -> Season | None:
        if self.show is None:
            return None
        return self.show.get_season(self.season)

    @property
    def main_video_file(self) -> MediaFile | None:
        for mf in self.media_files:
            if mf.type is MediaFileType.VIDEO:
                return mf
        return None

    @property
    def episode_numbers(self) -> list[int]:
        """All episode numbers stored in this episode's video file."""
        video = self.main_video_file
        if self.show is None or video is None:
            return [self.episode]
        return [ep.episode for ep in self.show.episodes_for_file(video)]

    def media_files_of_type(self, *types: MediaFileType) -> list[MediaFile]:
        return [mf for mf in self.media_files if mf.type in types]

    def media_files_except_type(self, *types: MediaFileType) -> list[MediaFile]:
        return [mf for mf in self.media_files if mf.type not in types]

    def newest_media_file(self, file_type: MediaFileType) -> MediaFile | None:
        return newest_of(self.media_files_of_type(file_type))

    def set_media_files(self, media_files: list[MediaFile]) -> None:
        self.media_files = list(media_files)

    def replace_path_prefix(self, old: Path, new: Path) -> None:
        """Rebase the episode folder and all of its files."""
        self.media_files = [mf.replace_path_prefix(old, new) for mf in self.media_files]
        if self.path is not None:
            self.path = MediaFile(self.path).replace_path_prefix(old, new).path

    def sort_key(self) -> tuple[int, int]:
        return self.season, self.episode


@dataclass(eq=False)
class Season:
    """A season of a show; episodes are resolved through the show."""
    number: int
    title: str = ""
    media_files: list[MediaFile] = field(default_factory=list)
    show: Show | None = field(default=None, repr=False)

    @property
    def episodes(self) -> list[Episode]:
        if self.show is None:
            return []
        return [ep for ep in self.show.episodes if ep.season == self.number]

    def newest_media_file(self, file_type: MediaFileType) -> MediaFile | None:
        return newest_of([mf for mf in self.media_files if mf.type is file_type])


@dataclass(eq=False)
class Show:
    """A TV show rooted at ``path`` inside the data source ``data_source``."""
    path: Path
    data_source: Path
    title: str = ""
    original_title: str = ""
    year: int | None = None
    note: str = ""
    status: str = ""
    ids: dict[str, str] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    media_files: list[MediaFile] = field(default_factory=list)
    seasons: list[Season] = field(default_factory=list)
    episodes: list[Episode] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.path = Path(os.path.abspath(self.path))
        self.data_source = Path(os.path.abspath(self.data_source))
        for season in self.seasons:
            season.show = self
        for episode in self.episodes:
            episode.show = self

    def add_episode(self, episode: Episode) -> Episode:
        """Attach *episode* and make sure its season exists."""
        episode.show = self
        self.episodes.append(episode)
        if episode.season >= 0 and self.get_season(episode.season) is None:
            self.add_season(Season(episode.season))
        return episode

    def add_season(self, season: Season) -> Season:
        season.show = self
        self.seasons.append(season)
        return season

    def get_season(self, number: int) -> Season | None:
        for season in self.seasons:
            if season.number == number:
                return season
        return None

    def episodes_for_file(self, media_file: MediaFile) -> list[Episode]:
        """Episodes sharing *media_file*, ordered by season and episode."""
        eps = [ep for ep in self.episodes if media_file in ep.media_files]
        return sorted(eps, key=Episode.sort_key)

    def newest_media_file(self, file_type: MediaFileType) -> MediaFile | None:
        return newest_of([mf for mf in self.media_files if mf.type is file_type])

    def all_media_files(self) -> list[MediaFile]:
        """Show, season and episode files, without duplicates."""
        seen: dict[MediaFile, None] = dict.fromkeys(self.media_files)
        for season in self.seasons:
            seen.update(dict.fromkeys(season.media_files))
        for episode in self.episodes:
            seen.update(dict.fromkeys(episode.media_files))
        return list(seen)

    def replace_path_prefix(self, old: Path, new: Path) -> None:
        """Rebase every file of the show after its folder moved."""
        self.media_files = [mf.replace_path_prefix(old, new) for mf in self.media_files]
        for season in self.seasons:
            season.media_files = [mf.replace_path_prefix(old, new) for mf in season.media_files]
        for episode in self.episodes:
            episode.replace_path_prefix(old, new)

    def clone(self) -> Show:
        """Deep copy of the show graph, back references included."""
        return copy.deepcopy(self)


def newest_of(media_files: list[MediaFile]) -> MediaFile | None:
    """Return the most recently modified file; later entries win ties."""
    newest = None
    for mf in media_files:
        if newest is None or mf.mtime >= newest.mtime:
            newest = mf
    return newest


@dataclass
class EpisodeMatchingResult:
    """Season/episode identity detected from a file name."""
    season: int = -1
    episodes: list[int] = field(default_factory=list)
    name: str = ""
    cleaned_name: str = ""
    date: date | None = None
    stacking_marker_found: bool = False


class FileOperation(Enum):
    MOVE = "move"
    COPY = "copy"


@dataclass(frozen=True)
class DestinationFile:
    """A planned target for one source file."""
    source: MediaFile
    target: MediaFile
    operation: FileOperation = FileOperation.COPY


@dataclass
class RenameResult:
    """Represents a rename operation result."""
    original_path: str
    new_path: str
    success: bool
    error: str | None = None
    skipped: bool = False
    skip_reason: str | None = None
    file_type: str = "video"


@dataclass
class RenameReport:
    """Outcome of a rename pass; per-file failures do not abort it."""
    results: list[RenameResult] = field(default_factory=list)

    def add(self, result: RenameResult) -> None:
        self.results.append(result)

    def extend(self, other: RenameReport) -> None:
        self.results.extend(other.results)

    @property
    def failures(self) -> list[RenameResult]:
        return [r for r in self.results if not r.success and not r.skipped]

    @property
    def ok(self) -> bool:
        return not self.failures
