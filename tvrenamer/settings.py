"""Settings management for the renamer.

Settings live in a JSON file; selected keys can be overridden from the
environment (``TVRENAMER_<KEY>``), including variables from a ``.env``
file.  A rename pass never reads the file itself: it receives an
immutable :class:`RenamerSettings` snapshot taken when the pass starts.
"""
import json
import logging
import os
import sys
from dataclasses import asdict, dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

log = logging.getLogger(__name__)

ENV_PREFIX = "TVRENAMER_"


# ---------------------------------------------------------------------------
# Platform-appropriate settings directory
# ---------------------------------------------------------------------------

def _settings_dir() -> Path:
    """Return the platform settings directory."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home()))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "tvrenamer"


SETTINGS_FILE = _settings_dir() / "settings.json"


# ---------------------------------------------------------------------------
# Naming variants
# ---------------------------------------------------------------------------

class ShowFileNaming(Enum):
    """File names of show level artwork/NFO, relative to the show folder."""
    TVSHOW_NFO = "tvshow.{ext}"
    POSTER = "poster.{ext}"
    FOLDER = "folder.{ext}"
    FANART = "fanart.{ext}"
    BANNER = "banner.{ext}"
    CLEARART = "clearart.{ext}"
    THUMB = "thumb.{ext}"
    LANDSCAPE = "landscape.{ext}"
    LOGO = "logo.{ext}"
    CLEARLOGO = "clearlogo.{ext}"
    DISCART = "discart.{ext}"
    DISC = "disc.{ext}"
    CHARACTERART = "characterart.{ext}"
    KEYART = "keyart.{ext}"
    TVSHOW_TRAILER = "tvshow-trailer.{ext}"
    EXTRAFANART_FOLDER = "extrafanart/fanart.{ext}"
    EXTRAFANART = "fanart.{ext}"

    def filename(self, ext: str) -> str:
        return self.value.format(ext=ext)


class SeasonFileNaming(Enum):
    """File names of season artwork/NFO, relative to the show folder."""
    SEASON_POSTER = "{prefix}-poster.{ext}"
    SEASON_FOLDER_POSTER = "{folder}/folder.{ext}"
    SEASON_FANART = "{prefix}-fanart.{ext}"
    SEASON_BANNER = "{prefix}-banner.{ext}"
    SEASON_THUMB = "{prefix}-landscape.{ext}"
    SEASON_FOLDER_THUMB = "{folder}/thumb.{ext}"
    SEASON_NFO = "{folder}/season.{ext}"

    def filename(self, season: int, season_folder: str, ext: str) -> str:
        """Return the file name, or ``""`` when it needs a missing season folder."""
        if "{folder}" in self.value and not season_folder:
            return ""
        prefix = "season-specials" if season == 0 else f"season{season:02d}"
        return self.value.format(prefix=prefix, folder=season_folder, ext=ext)


class EpisodeFileNaming(Enum):
    """File names of episode artwork/NFO, derived from the video name."""
    FILENAME_NFO = "{name}.{ext}"
    FILENAME_THUMB = "{name}-thumb.{ext}"
    FILENAME_LANDSCAPE = "{name}-landscape.{ext}"

    def filename(self, name: str, ext: str) -> str:
        return self.value.format(name=name, ext=ext)


class LanguageStyle(Enum):
    """How subtitle language codes are written into file names."""
    KEEP = "keep"
    ISO2 = "iso2"
    ISO3 = "iso3"


# ---------------------------------------------------------------------------
# Default templates and values
# ---------------------------------------------------------------------------

DEFAULT_SHOW_FOLDER_TEMPLATE = "${showTitle} (${showYear})"
DEFAULT_SEASON_FOLDER_TEMPLATE = "Season ${seasonNr}"
DEFAULT_FILENAME_TEMPLATE = "${showTitle} - S${seasonNr2}E${episodeNr2} - ${title}"

DEFAULT_SETTINGS: dict[str, Any] = {
    # Naming templates
    "show_folder_template": DEFAULT_SHOW_FOLDER_TEMPLATE,
    "season_folder_template": DEFAULT_SEASON_FOLDER_TEMPLATE,
    "filename_template": DEFAULT_FILENAME_TEMPLATE,

    # Cleanup of rendered names
    "show_space_substitution": False,
    "show_space_replacement": "_",
    "season_space_substitution": False,
    "season_space_replacement": "_",
    "filename_space_substitution": False,
    "filename_space_replacement": "_",
    "colon_replacement": "-",
    "ascii_replacement": False,
    "first_character_number_replacement": "#",

    # Behavior
    "special_season": True,
    "specials_folder": "Specials",
    "subtitle_language_style": LanguageStyle.KEEP.name,
    "enable_trash": True,
    "trash_folder": ".deletedByRenamer",
    "image_cache": True,
    "bad_words": [],

    # Show naming variants
    "nfo_filenames": [ShowFileNaming.TVSHOW_NFO.name],
    "poster_filenames": [ShowFileNaming.POSTER.name],
    "fanart_filenames": [ShowFileNaming.FANART.name],
    "banner_filenames": [ShowFileNaming.BANNER.name],
    "clearart_filenames": [ShowFileNaming.CLEARART.name],
    "thumb_filenames": [ShowFileNaming.LANDSCAPE.name],
    "logo_filenames": [ShowFileNaming.LOGO.name],
    "clearlogo_filenames": [ShowFileNaming.CLEARLOGO.name],
    "discart_filenames": [ShowFileNaming.DISCART.name],
    "characterart_filenames": [ShowFileNaming.CHARACTERART.name],
    "keyart_filenames": [ShowFileNaming.KEYART.name],
    "trailer_filenames": [ShowFileNaming.TVSHOW_TRAILER.name],
    "extrafanart_filenames": [ShowFileNaming.EXTRAFANART_FOLDER.name],

    # Season naming variants
    "season_poster_filenames": [SeasonFileNaming.SEASON_POSTER.name],
    "season_fanart_filenames": [SeasonFileNaming.SEASON_FANART.name],
    "season_banner_filenames": [SeasonFileNaming.SEASON_BANNER.name],
    "season_thumb_filenames": [SeasonFileNaming.SEASON_THUMB.name],
    "season_nfo_filenames": [SeasonFileNaming.SEASON_NFO.name],

    # Episode naming variants
    "episode_nfo_filenames": [EpisodeFileNaming.FILENAME_NFO.name],
    "episode_thumb_filenames": [EpisodeFileNaming.FILENAME_THUMB.name],
}

# Enum type of every key holding naming variants
_NAMING_KEYS: dict[str, type[Enum]] = {
    key: ShowFileNaming for key in (
        "nfo_filenames", "poster_filenames", "fanart_filenames",
        "banner_filenames", "clearart_filenames", "thumb_filenames",
        "logo_filenames", "clearlogo_filenames", "discart_filenames",
        "characterart_filenames", "keyart_filenames", "trailer_filenames",
        "extrafanart_filenames",
    )
}
_NAMING_KEYS.update({
    key: SeasonFileNaming for key in (
        "season_poster_filenames", "season_fanart_filenames",
        "season_banner_filenames", "season_thumb_filenames",
        "season_nfo_filenames",
    )
})
_NAMING_KEYS.update({
    "episode_nfo_filenames": EpisodeFileNaming,
    "episode_thumb_filenames": EpisodeFileNaming,
})


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

def _naming(key: str) -> tuple:
    enum = _NAMING_KEYS[key]
    return tuple(enum[name] for name in DEFAULT_SETTINGS[key])


@dataclass(frozen=True)
class RenamerSettings:
    """Immutable view of the settings used for one rename pass."""
    show_folder_template: str = DEFAULT_SHOW_FOLDER_TEMPLATE
    season_folder_template: str = DEFAULT_SEASON_FOLDER_TEMPLATE
    filename_template: str = DEFAULT_FILENAME_TEMPLATE

    show_space_substitution: bool = False
    show_space_replacement: str = "_"
    season_space_substitution: bool = False
    season_space_replacement: str = "_"
    filename_space_substitution: bool = False
    filename_space_replacement: str = "_"
    colon_replacement: str = "-"
    ascii_replacement: bool = False
    first_character_number_replacement: str = "#"

    special_season: bool = True
    specials_folder: str = "Specials"
    subtitle_language_style: LanguageStyle = LanguageStyle.KEEP
    enable_trash: bool = True
    trash_folder: str = ".deletedByRenamer"
    image_cache: bool = True
    bad_words: tuple[str, ...] = ()

    nfo_filenames: tuple[ShowFileNaming, ...] = _naming("nfo_filenames")
    poster_filenames: tuple[ShowFileNaming, ...] = _naming("poster_filenames")
    fanart_filenames: tuple[ShowFileNaming, ...] = _naming("fanart_filenames")
    banner_filenames: tuple[ShowFileNaming, ...] = _naming("banner_filenames")
    clearart_filenames: tuple[ShowFileNaming, ...] = _naming("clearart_filenames")
    thumb_filenames: tuple[ShowFileNaming, ...] = _naming("thumb_filenames")
    logo_filenames: tuple[ShowFileNaming, ...] = _naming("logo_filenames")
    clearlogo_filenames: tuple[ShowFileNaming, ...] = _naming("clearlogo_filenames")
    discart_filenames: tuple[ShowFileNaming, ...] = _naming("discart_filenames")
    characterart_filenames: tuple[ShowFileNaming, ...] = _naming("characterart_filenames")
    keyart_filenames: tuple[ShowFileNaming, ...] = _naming("keyart_filenames")
    trailer_filenames: tuple[ShowFileNaming, ...] = _naming("trailer_filenames")
    extrafanart_filenames: tuple[ShowFileNaming, ...] = _naming("extrafanart_filenames")

    season_poster_filenames: tuple[SeasonFileNaming, ...] = _naming("season_poster_filenames")
    season_fanart_filenames: tuple[SeasonFileNaming, ...] = _naming("season_fanart_filenames")
    season_banner_filenames: tuple[SeasonFileNaming, ...] = _naming("season_banner_filenames")
    season_thumb_filenames: tuple[SeasonFileNaming, ...] = _naming("season_thumb_filenames")
    season_nfo_filenames: tuple[SeasonFileNaming, ...] = _naming("season_nfo_filenames")

    episode_nfo_filenames: tuple[EpisodeFileNaming, ...] = _naming("episode_nfo_filenames")
    episode_thumb_filenames: tuple[EpisodeFileNaming, ...] = _naming("episode_thumb_filenames")

    @property
    def templates_empty(self) -> bool:
        return not (
            self.filename_template.strip()
            or self.season_folder_template.strip()
            or self.show_folder_template.strip()
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenamerSettings":
        """Build a snapshot from a JSON-style dict; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                log.debug("ignoring unknown setting '%s'", key)
                continue
            if key in _NAMING_KEYS:
                enum = _NAMING_KEYS[key]
                value = tuple(v if isinstance(v, enum) else enum[v] for v in value)
            elif key == "subtitle_language_style":
                value = value if isinstance(value, LanguageStyle) else LanguageStyle[value]
            elif key == "bad_words":
                value = tuple(value)
            values[key] = value
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible representation (enums by name)."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.name
            elif isinstance(value, tuple):
                data[key] = [v.name if isinstance(v, Enum) else v for v in value]
        return data


# ---------------------------------------------------------------------------
# Loading / saving
# ---------------------------------------------------------------------------

def _parse_env_value(raw: str, default: Any) -> Any:
    if isinstance(default, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, list):
        return [item.strip() for item in raw.split(",") if item.strip()]
    return raw


def _env_overrides(env_file: Path | None = None) -> dict[str, Any]:
    """Collect ``TVRENAMER_*`` overrides, loading a .env file first."""
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    overrides: dict[str, Any] = {}
    for key, default in DEFAULT_SETTINGS.items():
        raw = os.environ.get(ENV_PREFIX + key.upper())
        if raw is not None:
            overrides[key] = _parse_env_value(raw, default)
    return overrides


def _load_file(path: Path) -> dict[str, Any]:
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            log.warning("could not read settings file %s: %s", path, e)
    return {}


def load_settings(path: Path | None = None, env_file: Path | None = None) -> RenamerSettings:
    """
    Load the settings snapshot.

    Args:
        path: Settings JSON file (defaults to the platform settings file)
        env_file: Optional .env file with TVRENAMER_* overrides

    Returns:
        Defaults, overlaid with the file, overlaid with the environment
    """
    merged = DEFAULT_SETTINGS.copy()
    merged.update(_load_file(path or SETTINGS_FILE))
    merged.update(_env_overrides(env_file))
    return RenamerSettings.from_dict(merged)


def save_settings(settings: RenamerSettings, path: Path | None = None) -> bool:
    """Persist *settings* as JSON; returns False when the file cannot be written."""
    path = path or SETTINGS_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)
        return True
    except OSError as e:
        log.error("could not write settings file %s: %s", path, e)
        return False
