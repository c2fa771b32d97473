"""
tvrenamer - TV show library renamer

Detects season/episode numbers in file names and reorganizes a show's
files into a configurable folder and file layout.
"""
from .errors import FileOperationError, InvalidEpisodeError, RenamerError
from .models import (
    DestinationFile,
    Episode,
    EpisodeMatchingResult,
    FileOperation,
    MediaFile,
    MediaFileType,
    MediaInfo,
    RenameReport,
    RenameResult,
    Season,
    Show,
    SubtitleTrack,
)
from .parser import clean_episode_title, decode_roman, detect_episode
from .formatter import (
    RenderContext,
    cleanup_destination,
    invalid_tokens,
    is_pattern_valid,
    is_recommended,
    render,
    render_episodes,
    validate_template,
)
from .settings import RenamerSettings, load_settings, save_settings
from .planner import plan_episode_file, plan_season_file, plan_show_file
from .renamer import Renamer, rename_episode, rename_show
from .preview import PreviewContainer, RenamerPreview
from .queue import RenameQueue

__version__ = "1.0.0"
__all__ = [
    "RenamerError",
    "InvalidEpisodeError",
    "FileOperationError",
    "DestinationFile",
    "Episode",
    "EpisodeMatchingResult",
    "FileOperation",
    "MediaFile",
    "MediaFileType",
    "MediaInfo",
    "RenameReport",
    "RenameResult",
    "Season",
    "Show",
    "SubtitleTrack",
    "detect_episode",
    "decode_roman",
    "clean_episode_title",
    "RenderContext",
    "render",
    "render_episodes",
    "cleanup_destination",
    "invalid_tokens",
    "is_pattern_valid",
    "is_recommended",
    "validate_template",
    "RenamerSettings",
    "load_settings",
    "save_settings",
    "plan_episode_file",
    "plan_show_file",
    "plan_season_file",
    "Renamer",
    "rename_episode",
    "rename_show",
    "PreviewContainer",
    "RenamerPreview",
    "RenameQueue",
]
