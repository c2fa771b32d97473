"""Destination planning: where every file of a show should end up.

Nothing in here touches the disk.  The planner maps an existing media
file to zero, one or many :class:`DestinationFile` entries; the renamer
executes them and the preview compares them.
"""
import logging
import re
from pathlib import Path

from .cleaner import clean_stacking_markers
from .formatter import RenderContext, cleanup_destination, is_recommended, render, render_episodes
from .models import (
    ARTWORK_TYPES,
    DISC_FOLDERS,
    DestinationFile,
    Episode,
    FileOperation,
    MediaFile,
    MediaFileType,
    Season,
    Show,
)
from .parser import detect_episode
from .settings import LanguageStyle, RenamerSettings, SeasonFileNaming, ShowFileNaming

log = logging.getLogger(__name__)

# Types renamed 1:1 by moving; everything else is copied 1:N
MOVE_TYPES = frozenset({MediaFileType.VIDEO, MediaFileType.SUBTITLE})

# iso 639-1 -> (iso 639-2/B, other 639-2 spellings, english name)
LANGUAGES = {
    "ar": ("ara", (), "arabic"),
    "bg": ("bul", (), "bulgarian"),
    "cs": ("cze", ("ces",), "czech"),
    "da": ("dan", (), "danish"),
    "de": ("ger", ("deu",), "german"),
    "el": ("gre", ("ell",), "greek"),
    "en": ("eng", (), "english"),
    "es": ("spa", (), "spanish"),
    "fi": ("fin", (), "finnish"),
    "fr": ("fre", ("fra",), "french"),
    "he": ("heb", (), "hebrew"),
    "hi": ("hin", (), "hindi"),
    "hr": ("hrv", (), "croatian"),
    "hu": ("hun", (), "hungarian"),
    "it": ("ita", (), "italian"),
    "ja": ("jpn", (), "japanese"),
    "ko": ("kor", (), "korean"),
    "nl": ("dut", ("nld",), "dutch"),
    "no": ("nor", (), "norwegian"),
    "pl": ("pol", (), "polish"),
    "pt": ("por", (), "portuguese"),
    "ro": ("rum", ("ron",), "romanian"),
    "ru": ("rus", (), "russian"),
    "sk": ("slo", ("slk",), "slovak"),
    "sl": ("slv", (), "slovenian"),
    "sr": ("srp", (), "serbian"),
    "sv": ("swe", (), "swedish"),
    "th": ("tha", (), "thai"),
    "tr": ("tur", (), "turkish"),
    "uk": ("ukr", (), "ukrainian"),
    "zh": ("chi", ("zho",), "chinese"),
}

# every spelling -> iso 639-1
_LANGUAGE_KEYS: dict[str, str] = {}
for _iso2, (_iso3, _alt, _name) in LANGUAGES.items():
    for _key in (_iso2, _iso3, _name) + _alt:
        _LANGUAGE_KEYS[_key] = _iso2

# longest first, so "english" wins over "en"
_LANGUAGE_TAIL = re.compile(
    r'(?:^|[^a-z])(%s)$' % "|".join(sorted(_LANGUAGE_KEYS, key=len, reverse=True))
)


def language_code(code: str, style: LanguageStyle) -> str:
    """Re-style a language code; unknown codes are returned unchanged."""
    iso2 = _LANGUAGE_KEYS.get(code.lower())
    if iso2 is None or style is LanguageStyle.KEEP:
        return code
    if style is LanguageStyle.ISO2:
        return iso2
    return LANGUAGES[iso2][0]


def artwork_extension(media_file: MediaFile) -> str:
    """Extension used for written artwork: jpeg -> jpg, tbn by container."""
    ext = media_file.extension.replace("jpeg", "jpg")
    if ext.lower() == "tbn":
        container = media_file.container_format.upper()
        if container == "PNG":
            return "png"
        if container == "JPEG":
            return "jpg"
    return ext


def difference(a: str, b: str) -> str:
    """Remainder of *b* starting where it first differs from *a*."""
    if a == b:
        return ""
    index = 0
    for x, y in zip(a, b):
        if x != y:
            break
        index += 1
    return b[index:]


def _stacking_suffix(media_file: MediaFile, settings: RenamerSettings) -> str:
    delimiter = "."
    if settings.filename_space_substitution:
        delimiter = settings.filename_space_replacement
    if media_file.stacking_marker:
        return delimiter + media_file.stacking_marker
    if media_file.stacking:
        return delimiter + "CD" + str(media_file.stacking)
    return ""


# ---------------------------------------------------------------------------
# Folder names
# ---------------------------------------------------------------------------

def show_folder_name(show: Show, settings: RenamerSettings) -> Path:
    """New absolute show folder; the current one when the template is blank."""
    template = settings.show_folder_template
    if not template.strip():
        return show.path
    name = cleanup_destination(
        render(template, RenderContext(show), settings),
        settings.show_space_substitution,
        settings.show_space_replacement,
        settings.ascii_replacement,
        settings.colon_replacement,
    )
    if not name:
        log.warning("show folder template '%s' rendered empty for '%s'", template, show.title)
        return show.path
    return show.data_source / name


def season_folder_name(
    show: Show, season_number: int, settings: RenamerSettings, episode: Episode | None = None
) -> str:
    """
    Folder name of a season, relative to the show folder.

    Args:
        show: The show
        season_number: Season to name
        settings: Settings snapshot
        episode: Episode to render episode tokens against, if any

    Returns:
        The folder name; "" when the season is unknown or files belong
        directly into the show folder
    """
    season = show.get_season(season_number)
    if season is None:
        return ""

    template = settings.season_folder_template
    if season.number == 0 and settings.special_season:
        name = settings.specials_folder
    else:
        name = cleanup_destination(
            render(template, RenderContext(show, season=season, episode=episode), settings),
            settings.season_space_substitution,
            settings.season_space_replacement,
            settings.ascii_replacement,
            settings.colon_replacement,
        )

    # only allow files in the show root when the file name carries the season
    if not name.strip() and not is_recommended(template, settings.filename_template):
        name = f"Season {season.number}"
    return name


def _season_folder(show: Show, episode: Episode, settings: RenamerSettings) -> Path:
    name = season_folder_name(show, episode.season, settings, episode)
    return show.path / name if name else show.path


def episode_filename(
    episodes: list[Episode], settings: RenamerSettings, template: str | None = None
) -> str:
    """Cleaned file name (without extension) for the episodes of one file."""
    if template is None:
        template = settings.filename_template
    return cleanup_destination(
        render_episodes(template, episodes, settings),
        settings.filename_space_substitution,
        settings.filename_space_replacement,
        settings.ascii_replacement,
        settings.colon_replacement,
    )


def _strip_extension(name: str, ext: str) -> str:
    # ${originalFilename} already carries the extension
    if ext and name.lower().endswith("." + ext.lower()):
        return name[:-(len(ext) + 1)]
    return name


def disc_folder_name(show: Show, media_file: MediaFile, settings: RenamerSettings) -> str:
    """Name of the episode folder holding a disc structure."""
    episodes = show.episodes_for_file(media_file)
    if not episodes:
        return ""
    return _strip_extension(episode_filename(episodes, settings), media_file.extension)


def plan_disc_episode(episode: Episode, settings: RenamerSettings) -> tuple[Path, Path, Path] | None:
    """
    Locate the disc structure of a disc episode and its new folder.

    Returns:
        (disc folder, current episode folder, new episode folder), or None
        when the files do not look like a disc structure
    """
    show = episode.show
    video = episode.main_video_file
    if show is None or video is None or not video.is_disc_file:
        return None

    if video.path.name.lower() in DISC_FOLDERS:
        disc = video.path
    elif video.path.parent.name.lower() in DISC_FOLDERS:
        disc = video.path.parent
    else:
        log.error("episode '%s' is flagged as disc, but %s is no disc structure", episode.title, video.path)
        return None

    name = disc_folder_name(show, video, settings)
    if not name:
        log.warning("empty disc folder name for '%s'", episode.title)
        return None
    return disc, disc.parent, _season_folder(show, episode, settings) / name


# ---------------------------------------------------------------------------
# Episode files
# ---------------------------------------------------------------------------

def _subtitle_name(
    name: str,
    media_file: MediaFile,
    original_video: MediaFile | None,
    settings: RenamerSettings,
) -> str:
    style = settings.subtitle_language_style
    if media_file.subtitles:
        track = media_file.subtitles[0]
        suffix = ""
        if track.language:
            suffix += "." + language_code(track.language, style)
        if track.forced:
            suffix += ".forced"
        if track.sdh:
            suffix += ".sdh"
        if track.title.strip():
            suffix += "." + track.title.strip()
        if suffix:
            return name + suffix

    # no track metadata: recover language/forced from the old file name
    shortname = media_file.basename.lower()
    if original_video is not None:
        video_base = clean_stacking_markers(original_video.filename)
        video_base = video_base[:video_base.rfind(".")] if "." in video_base else video_base
        shortname = shortname.replace(video_base.lower(), "")

    forced = ""
    if "forced" in media_file.filename.lower():
        forced = ".forced"
        shortname = re.sub(r'[^\w\s]*forced', '', shortname)

    suffix = ""
    m = _LANGUAGE_TAIL.search(shortname)
    if m:
        suffix = "." + language_code(m.group(1), style)
    return name + suffix + forced


def _episode_targets(
    media_file: MediaFile,
    show: Show,
    settings: RenamerSettings,
    original_video: MediaFile | None,
) -> list[MediaFile]:
    episodes = show.episodes_for_file(media_file)
    if not episodes:
        return []
    first = episodes[0]
    if original_video is None:
        original_video = first.main_video_file

    name = _strip_extension(episode_filename(episodes, settings), media_file.extension)
    season_folder = _season_folder(show, first, settings)

    # no new file name: just move it into the season folder
    if not name:
        return [media_file.with_path(season_folder / media_file.filename)]

    ext = media_file.extension
    file_type = media_file.type

    if file_type is MediaFileType.VIDEO:
        filename = name + _stacking_suffix(media_file, settings) + "." + ext
        return [media_file.with_path(season_folder / filename)]

    if file_type is MediaFileType.NFO:
        return [
            media_file.with_path(season_folder / naming.filename(name, ext))
            for naming in settings.episode_nfo_filenames
        ]

    if file_type is MediaFileType.THUMB:
        return [
            media_file.with_path(season_folder / naming.filename(name, artwork_extension(media_file)))
            for naming in settings.episode_thumb_filenames
        ]

    if file_type is MediaFileType.SUBTITLE:
        base = name + _stacking_suffix(media_file, settings)
        filename = _subtitle_name(base, media_file, original_video, settings)
        return [media_file.with_path(season_folder / (filename + "." + ext))]

    if file_type is MediaFileType.FANART:
        filename = f"{name}-fanart.{artwork_extension(media_file)}"
        return [media_file.with_path(season_folder / filename)]

    suffixes = {
        MediaFileType.TRAILER: "-trailer",
        MediaFileType.MEDIAINFO: "-mediainfo",
        MediaFileType.SAMPLE: "-sample",
    }
    if file_type in suffixes:
        return [media_file.with_path(season_folder / f"{name}{suffixes[file_type]}.{ext}")]

    if file_type is MediaFileType.VSMETA:
        # video.avi.vsmeta keeps the inner video extension
        inner = media_file.basename
        video_ext = inner[inner.rfind(".") + 1:] if "." in inner else ""
        filename = f"{name}.{video_ext}.vsmeta" if video_ext else f"{name}.vsmeta"
        return [media_file.with_path(season_folder / filename)]

    if file_type in (MediaFileType.EXTRA, MediaFileType.VIDEO_EXTRA):
        result = detect_episode(media_file.filename, show.title, settings.bad_words)
        extra_title = f"-{result.cleaned_name}" if result.cleaned_name else ""
        return [media_file.with_path(season_folder / "extras" / f"{name}{extra_title}.{ext}")]

    if file_type in (MediaFileType.AUDIO, MediaFileType.TEXT, MediaFileType.UNKNOWN):
        video_base = original_video.basename if original_video is not None else ""
        destination = cleanup_destination(
            name + difference(video_base, media_file.basename),
            settings.filename_space_substitution,
            settings.filename_space_replacement,
            settings.ascii_replacement,
            settings.colon_replacement,
        )
        return [media_file.with_path(season_folder / f"{destination}.{ext}")]

    # other episode graphics have no naming scheme
    return []


def _destinations(source: MediaFile, targets: list[MediaFile]) -> list[DestinationFile]:
    operation = FileOperation.MOVE if source.type in MOVE_TYPES else FileOperation.COPY
    return [DestinationFile(source, target, operation) for target in targets]


def plan_episode_file(
    media_file: MediaFile,
    show: Show,
    settings: RenamerSettings,
    original_video: MediaFile | None = None,
) -> list[DestinationFile]:
    """
    Plan the destinations of one episode file.

    Args:
        media_file: File of an episode
        show: Show the episode belongs to
        settings: Settings snapshot
        original_video: The episode's video before renaming, used to keep
            the extra part of audio/text file names

    Returns:
        Zero, one or many destinations; VIDEO and SUBTITLE are moved, the
        rest is copied
    """
    return _destinations(media_file, _episode_targets(media_file, show, settings, original_video))


def plan_episode(episode: Episode, settings: RenamerSettings) -> list[DestinationFile]:
    """
    Plan all files of an episode.

    Videos and subtitles are planned one by one, artwork and NFOs only
    from the newest file of each type; the rest is planned as is.
    """
    show = episode.show
    video = episode.main_video_file
    if show is None:
        return []

    planned: list[DestinationFile] = []
    for vid in episode.media_files_of_type(MediaFileType.VIDEO):
        planned.extend(plan_episode_file(vid, show, settings, video)[:1])

    for file_type in ARTWORK_TYPES:
        newest = episode.newest_media_file(file_type)
        if newest is not None:
            planned.extend(plan_episode_file(newest, show, settings, video))

    nfo = episode.newest_media_file(MediaFileType.NFO)
    if nfo is not None:
        planned.extend(plan_episode_file(nfo, show, settings, video))

    for subtitle in episode.media_files_of_type(MediaFileType.SUBTITLE):
        planned.extend(plan_episode_file(subtitle, show, settings, video)[:1])

    others = episode.media_files_except_type(
        MediaFileType.VIDEO, MediaFileType.NFO, MediaFileType.SUBTITLE, *ARTWORK_TYPES
    )
    for other in others:
        planned.extend(plan_episode_file(other, show, settings, video))
    return planned


# ---------------------------------------------------------------------------
# Show files
# ---------------------------------------------------------------------------

def _show_namings(file_type: MediaFileType, settings: RenamerSettings) -> tuple[ShowFileNaming, ...] | None:
    return {
        MediaFileType.NFO: settings.nfo_filenames,
        MediaFileType.POSTER: settings.poster_filenames,
        MediaFileType.FANART: settings.fanart_filenames,
        MediaFileType.BANNER: settings.banner_filenames,
        MediaFileType.LOGO: settings.logo_filenames,
        MediaFileType.CLEARLOGO: settings.clearlogo_filenames,
        MediaFileType.CLEARART: settings.clearart_filenames,
        MediaFileType.THUMB: settings.thumb_filenames,
        MediaFileType.DISC: settings.discart_filenames,
        MediaFileType.CHARACTERART: settings.characterart_filenames,
        MediaFileType.KEYART: settings.keyart_filenames,
        MediaFileType.TRAILER: settings.trailer_filenames,
    }.get(file_type)


_TRAILING_DIGITS = re.compile(r'(\d+)$')


def _extrafanart_targets(media_file: MediaFile, show: Show, settings: RenamerSettings) -> list[MediaFile]:
    if not settings.extrafanart_filenames:
        return []
    m = _TRAILING_DIGITS.search(media_file.basename)
    index = int(m.group(1)) if m else 0
    if index <= 0:
        return []

    naming = settings.extrafanart_filenames[0]
    ext = artwork_extension(media_file)
    basename = Path(naming.filename(ext)).stem
    folder = show.path / "extrafanart" if naming is ShowFileNaming.EXTRAFANART_FOLDER else show.path
    return [media_file.with_path(folder / f"{basename}{index}.{ext}")]


def plan_show_file(media_file: MediaFile, show: Show, settings: RenamerSettings) -> list[DestinationFile]:
    """Plan a show level file; types without a naming scheme stay where they are."""
    if media_file.type is MediaFileType.EXTRAFANART:
        targets = _extrafanart_targets(media_file, show, settings)
    else:
        namings = _show_namings(media_file.type, settings)
        if namings is None:
            targets = [media_file]
        else:
            ext = media_file.extension if media_file.type in (
                MediaFileType.NFO, MediaFileType.TRAILER
            ) else artwork_extension(media_file)
            targets = [media_file.with_path(show.path / naming.filename(ext)) for naming in namings]
    return [DestinationFile(media_file, target, FileOperation.COPY) for target in targets]


def plan_show(show: Show, settings: RenamerSettings) -> list[DestinationFile]:
    """Plan all show level files; NFO and artwork from the newest of each type."""
    planned: list[DestinationFile] = []
    newest_types = (MediaFileType.NFO,) + ARTWORK_TYPES
    for file_type in newest_types:
        newest = show.newest_media_file(file_type)
        if newest is not None:
            planned.extend(plan_show_file(newest, show, settings))
    for mf in show.media_files:
        if mf.type not in newest_types:
            planned.extend(plan_show_file(mf, show, settings))
    return planned


# ---------------------------------------------------------------------------
# Season files
# ---------------------------------------------------------------------------

def _season_namings(file_type: MediaFileType, settings: RenamerSettings) -> tuple[SeasonFileNaming, ...] | None:
    return {
        MediaFileType.SEASON_POSTER: settings.season_poster_filenames,
        MediaFileType.SEASON_FANART: settings.season_fanart_filenames,
        MediaFileType.SEASON_BANNER: settings.season_banner_filenames,
        MediaFileType.SEASON_THUMB: settings.season_thumb_filenames,
        MediaFileType.NFO: settings.season_nfo_filenames,
    }.get(file_type)


def plan_season_file(media_file: MediaFile, season: Season, settings: RenamerSettings) -> list[DestinationFile]:
    """Plan season artwork/NFO; they live in (or below) the show folder."""
    show = season.show
    namings = _season_namings(media_file.type, settings)
    if show is None or namings is None:
        return [DestinationFile(media_file, media_file, FileOperation.COPY)]

    episodes = sorted(season.episodes, key=Episode.sort_key)
    folder = season_folder_name(show, season.number, settings, episodes[0] if episodes else None)
    ext = media_file.extension if media_file.type is MediaFileType.NFO else artwork_extension(media_file)

    planned = []
    for naming in namings:
        filename = naming.filename(season.number, folder, ext)
        if filename:
            planned.append(DestinationFile(media_file, media_file.with_path(show.path / filename)))
    return planned


def plan_season(season: Season, settings: RenamerSettings) -> list[DestinationFile]:
    """Plan the newest file of every season artwork type (and the season NFO)."""
    planned: list[DestinationFile] = []
    handled = (
        MediaFileType.SEASON_POSTER,
        MediaFileType.SEASON_FANART,
        MediaFileType.SEASON_BANNER,
        MediaFileType.SEASON_THUMB,
        MediaFileType.NFO,
    )
    for file_type in handled:
        newest = season.newest_media_file(file_type)
        if newest is not None:
            planned.extend(plan_season_file(newest, season, settings))
    for mf in season.media_files:
        if mf.type not in handled:
            planned.append(DestinationFile(mf, mf, FileOperation.COPY))
    return planned
