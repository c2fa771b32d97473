"""Template engine for show folders, season folders and episode file names.

Templates hold ``${...}`` placeholders:

* ``${token}`` plain value
* ``${token;formatter}`` / ``${token;formatter(arg)}`` named formatter
* ``${token[n]}`` first *n* characters of a string, item *n* of a list
* ``${token[a,b]}`` substring from *a* to *b*
* ``${prefix,token,suffix}`` prefix/suffix only written for a non-empty value

Unknown tokens and formatters render as an empty string.
"""
import logging
import re
import unicodedata
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from unidecode import unidecode

from .models import Episode, MediaInfo, Season, Show
from .settings import RenamerSettings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderContext:
    """Entities a template is rendered against."""
    show: Show
    season: Season | None = None
    episode: Episode | None = None

    @property
    def season_entity(self) -> Season | None:
        if self.season is not None:
            return self.season
        if self.episode is not None:
            return self.episode.season_entity
        return None


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------

_ARTICLES = ("the", "a", "an", "der", "die", "das", "le", "la", "les", "el", "los", "las", "il")
_ARTICLE_PREFIX = re.compile(r'^(%s)\s+(.+)$' % "|".join(_ARTICLES), re.IGNORECASE)


def title_sortable(title: str) -> str:
    """Move a leading article to the end: ``The 4400`` -> ``4400, The``."""
    m = _ARTICLE_PREFIX.match(title or "")
    if not m:
        return title or ""
    return f"{m.group(2)}, {m.group(1)}"


def _known(number: int) -> int | None:
    return number if number >= 0 else None


def _season_nr(ctx: RenderContext) -> int | None:
    if ctx.episode is not None:
        return _known(ctx.episode.season)
    if ctx.season is not None:
        return _known(ctx.season.number)
    return None


def _dvd_season_nr(ctx: RenderContext) -> int | None:
    return _known(ctx.episode.dvd_season) if ctx.episode is not None else None


def _episode(attr: str) -> Callable[[RenderContext], Any]:
    def get(ctx: RenderContext) -> Any:
        return getattr(ctx.episode, attr) if ctx.episode is not None else None
    return get


def _episode_nr(attr: str) -> Callable[[RenderContext], Any]:
    def get(ctx: RenderContext) -> Any:
        return _known(getattr(ctx.episode, attr)) if ctx.episode is not None else None
    return get


def _episode_id(provider: str) -> Callable[[RenderContext], Any]:
    def get(ctx: RenderContext) -> Any:
        return ctx.episode.ids.get(provider) if ctx.episode is not None else None
    return get


def _show_id(provider: str) -> Callable[[RenderContext], Any]:
    return lambda ctx: ctx.show.ids.get(provider)


def _media_info(ctx: RenderContext) -> MediaInfo | None:
    return ctx.episode.media_info if ctx.episode is not None else None


def _info(attr: str, first: bool = False) -> Callable[[RenderContext], Any]:
    def get(ctx: RenderContext) -> Any:
        info = _media_info(ctx)
        value = getattr(info, attr) if info is not None else None
        if first:
            return value[0] if value else None
        return value or None
    return get


def _episode_year(ctx: RenderContext) -> int | None:
    ep = ctx.episode
    if ep is None:
        return None
    if ep.year:
        return ep.year
    return ep.first_aired.year if ep.first_aired else None


def _parent(ctx: RenderContext) -> str:
    """Folders between the data source and the show folder."""
    try:
        relative = ctx.show.path.parent.relative_to(ctx.show.data_source)
    except ValueError:
        return ""
    return "" if str(relative) == "." else relative.as_posix()


def _aspect_ratio(ctx: RenderContext) -> str | None:
    info = _media_info(ctx)
    if info is None or not info.aspect_ratio:
        return None
    return str(round(info.aspect_ratio * 100))


_NAMED_RATIOS = ((4 / 3, "4x3"), (16 / 9, "16x9"), (21 / 9, "21x9"))


def _aspect_ratio_named(ctx: RenderContext) -> str | None:
    info = _media_info(ctx)
    if info is None or not info.aspect_ratio:
        return None
    for ratio, name in _NAMED_RATIOS:
        if abs(info.aspect_ratio - ratio) < 0.05:
            return name
    return _aspect_ratio(ctx)


def _hdr(ctx: RenderContext) -> str | None:
    info = _media_info(ctx)
    return "HDR" if info is not None and info.hdr_format else None


# ---------------------------------------------------------------------------
# Token table: name -> (accessor, default formatter)
# ---------------------------------------------------------------------------

TOKEN_MAP: dict[str, tuple[Callable[[RenderContext], Any], str]] = {
    # show
    "showTitle": (lambda ctx: ctx.show.title, ""),
    "showOriginalTitle": (lambda ctx: ctx.show.original_title, ""),
    "showTitleSortable": (lambda ctx: title_sortable(ctx.show.title), ""),
    "showYear": (lambda ctx: ctx.show.year, ""),
    "showNote": (lambda ctx: ctx.show.note, ""),
    "showStatus": (lambda ctx: ctx.show.status, ""),
    "showImdb": (_show_id("imdb"), ""),
    "showTmdb": (_show_id("tmdb"), ""),
    "showTvdb": (_show_id("tvdb"), ""),
    "showTags": (lambda ctx: ctx.show.tags, "array"),
    "parent": (_parent, ""),

    # season
    "seasonNr": (_season_nr, "number(%d)"),
    "seasonNr2": (_season_nr, "number(%02d)"),
    "seasonNrDvd": (_dvd_season_nr, "number(%d)"),
    "seasonNrDvd2": (_dvd_season_nr, "number(%02d)"),
    "seasonName": (lambda ctx: ctx.season_entity.title if ctx.season_entity else None, ""),

    # episode
    "episodeNr": (_episode_nr("episode"), "number(%d)"),
    "episodeNr2": (_episode_nr("episode"), "number(%02d)"),
    "episodeNrDvd": (_episode_nr("dvd_episode"), "number(%d)"),
    "episodeNrDvd2": (_episode_nr("dvd_episode"), "number(%02d)"),
    "title": (_episode("title"), ""),
    "originalTitle": (_episode("original_title"), ""),
    "titleSortable": (lambda ctx: title_sortable(ctx.episode.title) if ctx.episode else None, ""),
    "originalFilename": (_episode("original_filename"), ""),
    "year": (_episode_year, ""),
    "airedDate": (_episode("first_aired"), "date(yyyy-MM-dd)"),
    "episodeImdb": (_episode_id("imdb"), ""),
    "episodeTmdb": (_episode_id("tmdb"), ""),
    "episodeTvdb": (_episode_id("tvdb"), ""),
    "episodeTags": (_episode("tags"), "array"),
    "episodeNote": (_episode("note"), ""),
    "note": (_episode("note"), ""),
    "mediaSource": (_episode("media_source"), ""),

    # technical facts of the main video file
    "videoCodec": (_info("video_codec"), ""),
    "videoFormat": (_info("video_format"), ""),
    "videoResolution": (_info("video_resolution"), ""),
    "aspectRatio": (_aspect_ratio, ""),
    "aspectRatio2": (_aspect_ratio_named, ""),
    "videoBitDepth": (_info("video_bit_depth"), ""),
    "videoBitRate": (_info("video_bitrate"), "bitrate"),
    "audioCodec": (_info("audio_codecs", first=True), ""),
    "audioCodecList": (_info("audio_codecs"), ""),
    "audioCodecsAsString": (_info("audio_codecs"), "array"),
    "audioChannels": (_info("audio_channels", first=True), ""),
    "audioChannelList": (_info("audio_channels"), ""),
    "audioChannelsAsString": (_info("audio_channels"), "array"),
    "audioLanguage": (_info("audio_languages", first=True), ""),
    "audioLanguageList": (_info("audio_languages"), ""),
    "audioLanguagesAsString": (_info("audio_languages"), "array"),
    "subtitleLanguageList": (_info("subtitle_languages"), ""),
    "subtitleLanguagesAsString": (_info("subtitle_languages"), "array"),
    "3Dformat": (_info("video_3d_format"), ""),
    "hdr": (_hdr, ""),
    "hdrformat": (_info("hdr_format"), ""),
    "filesize": (_info("filesize"), "filesize"),
}

# Tokens repeated once per episode of a multi-episode file
SEASON_NUMBER_TOKENS = ("seasonNr", "seasonNr2", "seasonNrDvd", "seasonNrDvd2")
EPISODE_NUMBER_TOKENS = ("episodeNr", "episodeNr2", "episodeNrDvd", "episodeNrDvd2")
EPISODE_TITLE_TOKENS = ("title", "originalTitle", "titleSortable")
EPISODE_AIRED_TOKENS = ("airedDate",)


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(_to_text(v) for v in value if v is not None)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _fmt_number(value: Any, arg: str | None, settings: RenamerSettings) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return (arg or "%d") % value
        except (TypeError, ValueError):
            log.debug("invalid number format '%s'", arg)
    return _to_text(value)


_JAVA_DATE = {"yyyy": "%Y", "yy": "%y", "MM": "%m", "dd": "%d", "HH": "%H", "mm": "%M", "ss": "%S"}
_JAVA_DATE_TOKENS = re.compile(r'yyyy|yy|MM|dd|HH|mm|ss')


def _fmt_date(value: Any, arg: str | None, settings: RenamerSettings) -> str:
    if not isinstance(value, date):
        return _to_text(value)
    pattern = (arg or "yyyy-MM-dd").replace("%", "%%")
    return value.strftime(_JAVA_DATE_TOKENS.sub(lambda m: _JAVA_DATE[m.group()], pattern))


def _fmt_array(value: Any, arg: str | None, settings: RenamerSettings) -> str:
    if isinstance(value, (list, tuple)):
        return (arg or ", ").join(_to_text(v) for v in value if v is not None)
    return _to_text(value)


def _fmt_title_case(value: Any, arg: str | None, settings: RenamerSettings) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in _to_text(value).split(" "))


def _fmt_first(value: Any, arg: str | None, settings: RenamerSettings) -> str:
    """First letter upper-cased; anything else becomes the number replacement."""
    first = _to_text(value).strip()[:1]
    if not first:
        return ""
    first = unicodedata.normalize("NFKD", first)[:1]
    if first.isalpha():
        return first.upper()
    return settings.first_character_number_replacement


def _fmt_bitrate(value: Any, arg: str | None, settings: RenamerSettings) -> str:
    """Bitrate given in kbps."""
    if not isinstance(value, (int, float)) or value <= 0:
        return _to_text(value)
    if value >= 1000:
        return f"{value / 1000:.1f} Mbps"
    return f"{int(value)} kbps"


def _fmt_filesize(value: Any, arg: str | None, settings: RenamerSettings) -> str:
    if not isinstance(value, (int, float)) or value <= 0:
        return _to_text(value)
    if value < 1024:
        return f"{int(value)} B"
    size = float(value)
    for unit in ("KB", "MB", "GB", "TB"):
        size /= 1024
        if size < 1024 or unit == "TB":
            return f"{size:.2f} {unit}"
    return _to_text(value)


def _fmt_replace(value: Any, arg: str | None, settings: RenamerSettings) -> str:
    text = _to_text(value)
    if not arg or "," not in arg:
        return text
    find, repl = arg.split(",", 1)
    return text.replace(find, repl) if find else text


FORMATTERS: dict[str, Callable[[Any, str | None, RenamerSettings], str]] = {
    "number": _fmt_number,
    "date": _fmt_date,
    "array": _fmt_array,
    "upper": lambda value, arg, settings: _to_text(value).upper(),
    "lower": lambda value, arg, settings: _to_text(value).lower(),
    "title": _fmt_title_case,
    "first": _fmt_first,
    "bitrate": _fmt_bitrate,
    "filesize": _fmt_filesize,
    "replace": _fmt_replace,
}


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

_PLACEHOLDER = re.compile(r'\$\{(.*?)\}')
_EXPRESSION = re.compile(
    r'^\s*(?P<name>\w+)'
    r'(?:\[(?P<index>[^\]]*)\])?'
    r'(?:;(?P<fmt>\w+)(?:\((?P<arg>.*)\))?)?\s*$',
    re.DOTALL,
)
_INDEX = re.compile(r"^\s*-?\d+\s*(?:,\s*-?\d+\s*)?$")
_FORMATTER_SPEC = re.compile(r'^(?P<fmt>\w+)(?:\((?P<arg>.*)\))?$')
_PATH_SEPARATORS = re.compile(r'[/\\]')


def _split_top_level(expr: str) -> list[str]:
    """Split on commas that are not inside brackets or parentheses."""
    parts, depth, current = [], 0, []
    for ch in expr:
        if ch in "[(":
            depth += 1
        elif ch in "])" and depth:
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def _parse_expression(expr: str) -> tuple[str, str, re.Match | None]:
    """Return (prefix, suffix, match of the token expression)."""
    prefix = suffix = ""
    parts = _split_top_level(expr)
    if len(parts) >= 2:
        prefix, expr = parts[0], parts[1]
        suffix = ",".join(parts[2:])
    return prefix, suffix, _EXPRESSION.match(expr)


def _apply_index(value: Any, index: str) -> Any:
    try:
        bounds = [int(p) for p in index.split(",")]
    except ValueError:
        log.debug("invalid index '[%s]'", index)
        return None
    if isinstance(value, (list, tuple)):
        i = bounds[0]
        return value[i] if 0 <= i < len(value) else None
    text = _to_text(value)
    if len(bounds) == 1:
        return text[:bounds[0]]
    return text[bounds[0]:bounds[1]]


def _render_expression(expr: str, ctx: RenderContext, settings: RenamerSettings) -> str:
    prefix, suffix, m = _parse_expression(expr)
    if m is None or m.group("name") not in TOKEN_MAP:
        log.debug("unknown token '${%s}'", expr)
        return ""

    name = m.group("name")
    accessor, default_formatter = TOKEN_MAP[name]
    value = accessor(ctx)
    if m.group("index") is not None:
        value = _apply_index(value, m.group("index"))

    fmt, arg = m.group("fmt"), m.group("arg")
    if not fmt and default_formatter:
        spec = _FORMATTER_SPEC.match(default_formatter)
        fmt, arg = spec.group("fmt"), spec.group("arg")

    if fmt:
        formatter = FORMATTERS.get(fmt)
        if formatter is None:
            log.debug("unknown formatter '%s' in '${%s}'", fmt, expr)
            return ""
        text = formatter(value, arg, settings)
    else:
        text = _to_text(value)

    text = replace_invalid_characters(text, settings.colon_replacement)
    if name != "parent":
        text = _PATH_SEPARATORS.sub(" ", text)
    if not text:
        return ""
    return prefix + text + suffix


def render(template: str, ctx: RenderContext, settings: RenamerSettings | None = None) -> str:
    """
    Render every placeholder of a template.

    Args:
        template: Template with ${...} placeholders
        ctx: Show, season and/or episode to read values from
        settings: Settings snapshot (defaults when omitted)

    Returns:
        The rendered string; no cleanup of separators is applied
    """
    settings = settings or RenamerSettings()
    return _PLACEHOLDER.sub(lambda m: _render_expression(m.group(1), ctx, settings), template)


# ---------------------------------------------------------------------------
# Multi-episode files
# ---------------------------------------------------------------------------

_SEASON_WORD = r'(?i:(?:staffel|season|s)\s?)'
_EPISODE_WORD = r'(?i:\s?(?:folge|episode|[epx]+)\s?)'


def _token_pattern(token: str) -> str:
    return r'\$\{(?:[^,}]*,)?' + re.escape(token) + r'(?:[\[;,][^}]*)?\}'


def _find_part(template: str, tokens: tuple[str, ...], word: str = "") -> tuple[int, int] | None:
    """Span of the first group token found, including a leading season/episode word."""
    for token in tokens:
        if word:
            m = re.search(word + _token_pattern(token), template)
            if m:
                return m.span()
        m = re.search(_token_pattern(token), template)
        if m:
            return m.span()
    return None


def _render_numbers(
    season_part: str, episode_part: str, contexts: list[RenderContext], settings: RenamerSettings
) -> str:
    out, previous = [], None
    for ctx in contexts:
        if season_part:
            season = render(season_part, ctx, settings)
            if season != previous:
                out.append(season)
                previous = season
        if episode_part:
            out.append(render(episode_part, ctx, settings))
    return "".join(out)


def _join_distinct(part: str, contexts: list[RenderContext], settings: RenamerSettings) -> str:
    values: list[str] = []
    for ctx in contexts:
        text = render(part, ctx, settings)
        if text and (not values or values[-1] != text):
            values.append(text)
    return " - ".join(values)


def render_episodes(
    template: str, episodes: list[Episode], settings: RenamerSettings | None = None
) -> str:
    """
    Render a file name template for all episodes stored in one video file.

    The season/episode number parts are repeated per episode (an unchanged
    season is written once), titles and aired dates are joined with
    " - ".  Everything else is rendered against the first episode.

    Args:
        template: File name template
        episodes: Episodes sharing the file, in order
        settings: Settings snapshot (defaults when omitted)

    Returns:
        The rendered name, e.g. "Show - S01E02E03 - Alpha - Beta"
    """
    settings = settings or RenamerSettings()
    if not episodes:
        return ""
    contexts = [RenderContext(ep.show, episode=ep) for ep in episodes]
    if len(contexts) == 1:
        return render(template, contexts[0], settings)

    season_span = _find_part(template, SEASON_NUMBER_TOKENS, _SEASON_WORD)
    episode_span = _find_part(template, EPISODE_NUMBER_TOKENS, _EPISODE_WORD)

    loops: dict[tuple[int, int], str] = {}
    if season_span and episode_span and season_span[1] == episode_span[0]:
        loops[(season_span[0], episode_span[1])] = _render_numbers(
            template[season_span[0]:season_span[1]],
            template[episode_span[0]:episode_span[1]],
            contexts, settings,
        )
    else:
        if season_span:
            loops[season_span] = _render_numbers(
                template[season_span[0]:season_span[1]], "", contexts, settings
            )
        if episode_span:
            loops[episode_span] = _render_numbers(
                "", template[episode_span[0]:episode_span[1]], contexts, settings
            )
    for tokens in (EPISODE_TITLE_TOKENS, EPISODE_AIRED_TOKENS):
        span = _find_part(template, tokens)
        if span:
            loops[span] = _join_distinct(template[span[0]:span[1]], contexts, settings)

    out, pos = [], 0
    for start, end in sorted(loops):
        if start < pos:
            continue
        out.append(render(template[pos:start], contexts[0], settings))
        out.append(loops[(start, end)])
        pos = end
    out.append(render(template[pos:], contexts[0], settings))
    return "".join(out)


# ---------------------------------------------------------------------------
# Cleanup
# ---------------------------------------------------------------------------

def replace_invalid_characters(text: str, colon_replacement: str = "-") -> str:
    """
    Remove characters that are invalid in file names.

    Args:
        text: A rendered token value
        colon_replacement: What a colon becomes; with "-" a ": " turns into " - "

    Returns:
        The text without ``"<>|?*`` and colons
    """
    if colon_replacement == "-":
        text = text.replace(": ", " - ").replace(":", "-")
    else:
        text = text.replace(":", colon_replacement)
    return re.sub(r'["<>|?*:]', '', text)


_EMPTY_BRACKETS = re.compile(r'\(\s*\)|\[\s*\]|\{\s*\}')
_EDGE_SEPARATORS = re.compile(r'^[ .\-_]+|[ .\-_]+$')


def _cleanup_once(
    destination: str,
    space_substitution: bool,
    space_replacement: str,
    ascii_replacement: bool,
    colon_replacement: str,
) -> str:
    result = _EMPTY_BRACKETS.sub("", destination)

    result = re.sub(r'/{2,}', '/', result)
    result = re.sub(r'^/', '', result)
    result = re.sub(r'\s+/', '/', result)
    result = re.sub(r'/\s+', '/', result)
    result = re.sub(r'[ .\-_]+/', '/', result)

    if space_substitution:
        result = result.replace(" ", space_replacement)
        if space_replacement:
            result = re.sub('(?:' + re.escape(space_replacement) + ')+', space_replacement, result)

    if ascii_replacement:
        result = unidecode(result)

    if colon_replacement == "-":
        result = result.replace(": ", " - ")
    result = result.replace(":", colon_replacement)

    result = re.sub(r' +', ' ', result)
    return _EDGE_SEPARATORS.sub("", result)


def cleanup_destination(
    destination: str,
    space_substitution: bool = False,
    space_replacement: str = "_",
    ascii_replacement: bool = False,
    colon_replacement: str = "-",
) -> str:
    """
    Normalize a rendered destination.

    Drops empty brackets, collapses separators around "/", applies the
    space substitution and ASCII transliteration, replaces colons and
    trims separator characters from both ends.  The steps are repeated
    until the result no longer changes, so the cleanup is idempotent.

    Args:
        destination: Rendered folder or file name (may contain "/")
        space_substitution: Replace spaces with *space_replacement*
        space_replacement: Replacement for spaces
        ascii_replacement: Transliterate to plain ASCII
        colon_replacement: Replacement for a remaining ":"

    Returns:
        The cleaned destination
    """
    colon_replacement = colon_replacement.replace(":", "")
    if space_replacement.isspace():
        space_substitution = False
    # a replacement holding whitespace would never settle
    space_replacement = re.sub(r"\s", "", space_replacement)

    result = destination
    while True:
        cleaned = _cleanup_once(
            result, space_substitution, space_replacement, ascii_replacement, colon_replacement
        )
        if cleaned == result:
            return result
        result = cleaned


# ---------------------------------------------------------------------------
# Template validation
# ---------------------------------------------------------------------------

def _count_tokens(template: str, tokens: tuple[str, ...]) -> int:
    return sum(len(re.findall(_token_pattern(t), template)) for t in tokens)


def _token_pos(template: str, tokens: tuple[str, ...]) -> int:
    positions = [m.start() for t in tokens for m in re.finditer(_token_pattern(t), template)]
    return min(positions) if positions else -1


def invalid_tokens(template: str) -> list[str]:
    """Placeholders of *template* naming an unknown token, formatter or a malformed index."""
    errors = []
    for m in _PLACEHOLDER.finditer(template):
        _, _, expr = _parse_expression(m.group(1))
        if (
            expr is None
            or expr.group("name") not in TOKEN_MAP
            or (expr.group("fmt") and expr.group("fmt") not in FORMATTERS)
            or (expr.group("index") is not None and not _INDEX.match(expr.group("index")))
        ):
            errors.append(m.group())
    return errors


def is_pattern_valid(template: str) -> str:
    """
    Find unknown tokens or formatters.

    Args:
        template: A folder or file name template

    Returns:
        The offending placeholders joined with two spaces, "" when valid
    """
    return "  ".join(invalid_tokens(template))


def is_recommended(season_template: str, file_template: str) -> bool:
    """
    Check if the templates produce names a media center can scan reliably.

    Args:
        season_template: Season folder template
        file_template: Episode file name template

    Returns:
        True when the file name holds exactly one episode number, at most
        one title, one season number (here or in the season folder) that
        precedes the episode number, and no title between the two
    """
    episodes = _count_tokens(file_template, EPISODE_NUMBER_TOKENS)
    titles = _count_tokens(file_template, EPISODE_TITLE_TOKENS)
    seasons = _count_tokens(file_template, SEASON_NUMBER_TOKENS)
    season_folders = _count_tokens(season_template, SEASON_NUMBER_TOKENS)

    if episodes != 1 or titles > 1 or seasons > 1 or season_folders > 1:
        return False
    if seasons + season_folders == 0:
        return False

    episode_pos = _token_pos(file_template, EPISODE_NUMBER_TOKENS)
    season_pos = _token_pos(file_template, SEASON_NUMBER_TOKENS)
    if season_pos > episode_pos:
        return False

    if titles == 1 and seasons == 1:
        title_pos = _token_pos(file_template, EPISODE_TITLE_TOKENS)
        if season_pos < title_pos < episode_pos:
            return False
    return True


def sample_context() -> RenderContext:
    """A small show used to preview templates."""
    show = Show(
        path=Path("/media/TV/The Night Manager (2016)"),
        data_source=Path("/media/TV"),
        title="The Night Manager",
        year=2016,
    )
    episode = show.add_episode(
        Episode(season=1, episode=5, title="Episode 5", first_aired=date(2016, 3, 20))
    )
    return RenderContext(show, episode=episode)


def validate_template(template: str) -> tuple[bool, str]:
    """Validate a template; returns (ok, error message)."""
    if not template or not template.strip():
        return False, "Template cannot be empty"
    invalid = is_pattern_valid(template)
    if invalid:
        return False, f"Unknown token: {invalid}"
    if not render(template, sample_context()).strip():
        return False, "Template produced empty result"
    return True, ""
