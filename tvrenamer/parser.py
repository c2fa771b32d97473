"""Parser module for extracting season/episode information from file names.

Detection is a fixed cascade of rules.  Every rule looks at the shared
scan state, fills in what it finds and tells the cascade whether to stop.
The order is significant: later rules are increasingly generic and only
run while the earlier, more reliable ones found nothing.
"""
import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from .cleaner import clean_folder_stacking_markers, get_stacking_marker, remove_stopwords
from .models import DISC_FOLDERS, EpisodeMatchingResult, is_disc_filename

log = logging.getLogger(__name__)

# foo.yyyy.mm.dd.*
DATE_YMD = re.compile(r'([0-9]{4})[.-]([0-9]{2})[.-]([0-9]{2})', re.IGNORECASE)
# foo.dd.mm.yyyy.*
DATE_DMY = re.compile(r'([0-9]{2})[.-]([0-9]{2})[.-]([0-9]{4})', re.IGNORECASE)

SEASON_LONG = re.compile(r'(staffel|season|saison|series|temporada)[\s_.-]?(\d{1,4})', re.IGNORECASE)
# must start with a delimiter
SEASON_ONLY = re.compile(r'[\s_.-]s[\s_.-]?(\d{1,4})', re.IGNORECASE)
EPISODE_ONLY = re.compile(r'[\s_.-]ep?[\s_.-]?(\d{1,4})', re.IGNORECASE)
EPISODE_NUMBER = re.compile(r'[epx_-]+(\d{1,4})', re.IGNORECASE)
EPISODE_LONG = re.compile(r'(?:episode|ep)[\. _-]*(\d{1,4})', re.IGNORECASE)
ROMAN_PART = re.compile(r'(part|pt)[\._\s]+([MDCLXVI]+)', re.IGNORECASE)
SEASON_MULTI_EP = re.compile(r's(\d{1,4})[ ]?((?:([epx_.-]+\d{1,4})+))', re.IGNORECASE)
SEASON_MULTI_EP_X = re.compile(r'(\d{1,4})(?=x)((?:([epx]+\d{1,4})+))', re.IGNORECASE)
NUMBERS_2 = re.compile(r'([0-9]{2})')
NUMBERS_3 = re.compile(r'([0-9])([0-9]{2})')

# Removed from the matched name, first occurrence each, to build the cleaned name
_CLEANUP_PATTERNS = (
    SEASON_LONG,
    SEASON_MULTI_EP,
    SEASON_MULTI_EP_X,
    EPISODE_NUMBER,
    EPISODE_LONG,
    NUMBERS_3,
    NUMBERS_2,
    ROMAN_PART,
    DATE_YMD,
    DATE_DMY,
    SEASON_ONLY,
)

# Same family as above, for episode titles (case sensitive)
_TITLE_VARIANTS = (
    r'[Ss]([0-9]+)[\]\[ _.-]*[Ee]([0-9]+)',
    r'[ _.-]()[Ee][Pp]?_?([0-9]+)',
    r'([0-9]{4})[.-]([0-9]{2})[.-]([0-9]{2})',
    r'([0-9]{2})[.-]([0-9]{2})[.-]([0-9]{4})',
    r'[\\/\._ \[\(-]([0-9]+)x([0-9]+)',
    r'[\/ _.-]p(?:ar)?t[ _.-]()([ivx]+)',
    r'[epx_-]+(\d{1,3})',
    r'episode[\. _-]*(\d{1,3})',
    r'(part|pt)[\._\s]+([MDCLXVI]+)',
    r'(staffel|season|saison|series|temporada)[\s_.-]*(\d{1,4})',
    r's(\d{1,4})[ ]?((?:([epx_.-]+\d{1,3})+))',
    r'(\d{1,4})(?=x)((?:([epx]+\d{1,3})+))',
)

_FOLDER_PART = re.compile(r'(.*[/\\])')
_EXTENSION = re.compile(r'\.\w{1,4}$')
_YEAR_BRACKETS = re.compile(r'[\(\[]\d{4}[\)\]]')
_CRC_BRACKETS = re.compile(r'[\(\[][A-Fa-f0-9]{8}[\)\]]')
_OPTIONALS = re.compile(r'[\[\{](.*?)[\]\}]')
_NUMBER_DELIMITERS = re.compile(r'[\s|_.-]')
_TITLE_DELIMITERS = re.compile(r'[\[\]\\() _,.-]')
_DIGITS = re.compile(r'[0-9]+')
_IMDB_ID = re.compile(r'tt\d{6,}')

_ROMAN_VALUES = {"M": 1000, "D": 500, "C": 100, "L": 50, "X": 10, "V": 5, "I": 1}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _name_of(path: str) -> str:
    """Last path component, for both / and \\ separated paths."""
    return re.split(r'[/\\]', path)[-1]


def _folder_of(path: str) -> str:
    """Everything up to and including the last separator."""
    m = _FOLDER_PART.match(path)
    return m.group(1) if m else ""


def _strip_markers(basename: str) -> str:
    """Remove extension, (year) and [crc] markers, first occurrence each."""
    basename = _EXTENSION.sub('', basename, count=1)
    basename = _YEAR_BRACKETS.sub('', basename, count=1)
    return _CRC_BRACKETS.sub('', basename, count=1)


def _add_episode(result: EpisodeMatchingResult, ep: int) -> None:
    if ep > 0 and ep not in result.episodes:
        result.episodes.append(ep)
        log.debug("add found EP '%d'", ep)


def decode_roman(roman: str) -> int:
    """
    Decode a Roman numeral.

    Args:
        roman: The numeral, case-insensitive

    Returns:
        The decoded value; unknown letters count as 0 and an empty
        string decodes to 0
    """
    values = [_ROMAN_VALUES.get(ch, 0) for ch in roman.upper()]
    total = 0
    for i, value in enumerate(values):
        if i + 1 < len(values) and value < values[i + 1]:
            total -= value
        else:
            total += value
    return total


# ---------------------------------------------------------------------------
# Detection cascade
# ---------------------------------------------------------------------------

@dataclass
class _Scan:
    """Working state shared by the rules of one detection run."""
    filename: str
    basename: str
    foldername: str
    show_name: str | None
    result: EpisodeMatchingResult
    numbers: list[str] = field(default_factory=list)


def _season_long(scan: _Scan) -> bool:
    result = scan.result
    if result.season == -1:
        m = SEASON_LONG.search(scan.basename + scan.foldername)
        if m:
            result.season = int(m.group(2))
            log.debug("add found season '%d'", result.season)
            scan.basename = SEASON_LONG.sub('', scan.basename)
            scan.foldername = SEASON_LONG.sub('', scan.foldername)
    return False


def _season_multi_ep(scan: _Scan) -> bool:
    """S01E02E03 and friends; chained episodes must be consecutive."""
    result = scan.result
    last_found = 0
    for m in SEASON_MULTI_EP.finditer(scan.basename + scan.foldername):
        for m2 in EPISODE_NUMBER.finditer(m.group(2)):
            ep = int(m2.group(1))
            # 0 is allowed here
            if ep not in result.episodes and (last_found == 0 or last_found + 1 == ep):
                last_found = ep
                result.episodes.append(ep)
                log.debug("add found EP '%d'", ep)
        result.season = int(m.group(1))
        log.debug("add found season '%d'", result.season)
    return False


def _season_multi_ep_x(scan: _Scan) -> bool:
    """1x02x03 style; no contiguity check."""
    result = scan.result
    for m in SEASON_MULTI_EP_X.finditer(scan.basename + scan.foldername):
        season = -1
        if m.group(2) is not None and result.season == -1:
            season = int(m.group(1))
        for m2 in EPISODE_NUMBER.finditer(m.group(2)):
            _add_episode(result, int(m2.group(1)))
        if season >= 0:
            result.season = season
            log.debug("add found season '%d'", season)
    return False


def _episode_long(scan: _Scan) -> bool:
    result = scan.result
    if not result.episodes:
        for m in EPISODE_LONG.finditer(scan.basename):
            _add_episode(result, int(m.group(1)))
    return bool(result.episodes)


def _strip_show_name(scan: _Scan) -> bool:
    """Remove the show name so digits in titles like "24" are not picked up."""
    show = scan.show_name
    if show:
        # not prefixed with S/E, our padding space matches otherwise
        exact = re.compile(r'[^ES]' + re.escape(show), re.IGNORECASE)
        scan.basename = exact.sub('', scan.basename)
        scan.foldername = exact.sub('', scan.foldername)
        # "some fine show" also matches "some.fine-show"
        loose = re.sub(r'[ _.-]', '[ _.-]', show)
        try:
            scan.foldername = re.sub(loose, '', scan.foldername, flags=re.IGNORECASE)
        except re.error:
            log.debug("cannot use show name '%s' as pattern", show)
    return False


def _roman_part(scan: _Scan) -> bool:
    result = scan.result
    if not result.episodes:
        for m in ROMAN_PART.finditer(scan.basename):
            _add_episode(result, decode_roman(m.group(2)))
    return bool(result.episodes)


def _lenient_date(year: int, month: int, day: int) -> date:
    """Build a date, rolling out-of-range months and days over (31.02. is 02.03.)."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, 1) + timedelta(days=day - 1)


def _air_date(scan: _Scan) -> bool:
    """Daily shows: the year becomes the season."""
    result = scan.result
    if result.season != -1:
        return False
    for pattern, (y, mo, d) in ((DATE_YMD, (1, 2, 3)), (DATE_DMY, (3, 2, 1))):
        m = pattern.search(scan.basename)
        if m:
            result.season = int(m.group(y))
            try:
                result.date = _lenient_date(int(m.group(y)), int(m.group(mo)), int(m.group(d)))
            except (ValueError, OverflowError):
                log.debug("'%s' is not a usable date", m.group(0))
            log.debug("add found year as season '%d', date: '%s'", result.season, result.date)
            return True
    return False


def _disc_file(scan: _Scan) -> bool:
    """Disc files never carry their number in the name."""
    name = scan.filename.lower()
    return is_disc_filename(name) or name in DISC_FOLDERS


def _season_only(scan: _Scan) -> bool:
    """Short season marker (S 01), from the folder part only."""
    result = scan.result
    if result.season == -1:
        m = SEASON_ONLY.search(scan.foldername)
        if m:
            result.season = int(m.group(1))
            log.debug("add found season '%d'", result.season)
            scan.foldername = SEASON_ONLY.sub('', scan.foldername)
    return False


def _episode_only(scan: _Scan) -> bool:
    result = scan.result
    if not result.episodes:
        m = EPISODE_ONLY.search(scan.basename)
        if m:
            result.episodes.append(int(m.group(1)))
            log.debug("add found episode '%s'", m.group(1))
    return bool(result.episodes)


def _collect_numbers(scan: _Scan) -> bool:
    """Gather the pure number tokens, last one first."""
    def digits_only(text: str) -> list[str]:
        return [t for t in _NUMBER_DELIMITERS.split(text) if _DIGITS.fullmatch(t)]

    numbers = digits_only(_OPTIONALS.sub('', scan.basename))
    if not numbers:
        # nothing outside of [optionals]? try their content
        for m in _OPTIONALS.finditer(scan.basename):
            numbers.extend(digits_only(" " + m.group(1) + " "))
    numbers.reverse()
    scan.numbers = numbers
    return False


def _numbers_4(scan: _Scan) -> bool:
    """SSEE, only with an already known matching season (years look alike)."""
    result = scan.result
    for num in scan.numbers:
        if len(num) == 4 and result.season == int(num[:2]):
            _add_episode(result, int(num[2:]))
    return bool(result.episodes)


def _numbers_3(scan: _Scan) -> bool:
    """SEE, may repeat with the same season."""
    result = scan.result
    for num in scan.numbers:
        if len(num) == 3:
            season = int(num[:1])
            if result.season in (-1, season):
                _add_episode(result, int(num[1:]))
                result.season = season
                log.debug("add found season '%d'", season)
    return bool(result.episodes)


def _first_number(scan: _Scan, length: int) -> bool:
    """Take the first number of *length* digits as episode, then stop."""
    for num in scan.numbers:
        if len(num) == length:
            _add_episode(scan.result, int(num))
            break
    return bool(scan.result.episodes)


def _numbers_2(scan: _Scan) -> bool:
    return _first_number(scan, 2)


def _numbers_1(scan: _Scan) -> bool:
    return _first_number(scan, 1)


_CASCADE: tuple[Callable[[_Scan], bool], ...] = (
    _season_long,
    _season_multi_ep,
    _season_multi_ep_x,
    _episode_long,
    _strip_show_name,
    _roman_part,
    _air_date,
    _disc_file,
    _season_only,
    _episode_only,
    _collect_numbers,
    _numbers_4,
    _numbers_3,
    _numbers_2,
    _numbers_1,
)


def _clean_name(name: str) -> str:
    for pattern in _CLEANUP_PATTERNS:
        name = pattern.sub('', name, count=1)
    name = re.sub(r'^[ .\-_]+', '', name)
    return re.sub(r'[ .\-_]+$', '', name)


def _detect(name: str, show_name: str | None, bad_words: Iterable[str]) -> EpisodeMatchingResult:
    log.debug("parsing '%s'", name)
    result = EpisodeMatchingResult()

    filename = _name_of(name)
    if is_disc_filename(filename):
        name = _folder_of(name)

    basename = remove_stopwords(name, bad_words)
    foldername = _folder_of(basename)
    basename = _FOLDER_PART.sub('', basename)

    # the whole name got stripped out
    if not basename and not foldername:
        return result

    basename = " " + _strip_markers(basename) + " "
    foldername = " " + foldername + " "

    result.stacking_marker_found = bool(get_stacking_marker(filename))
    result.name = basename.strip()

    scan = _Scan(filename, basename, foldername, show_name, result)
    for rule in _CASCADE:
        if rule(scan):
            log.debug("stopped after %s", rule.__name__)
            break

    result.cleaned_name = _clean_name(result.name)
    result.episodes = sorted(set(result.episodes))
    return result


def detect_episode(
    relative_path: str,
    show_name: str | None = None,
    bad_words: Iterable[str] = (),
) -> EpisodeMatchingResult:
    """
    Detect season, episodes and air date of a file.

    The file name is parsed on its own first.  When that yields episodes
    but no season, the season is taken from the whole relative path; when
    it yields nothing, the whole relative path is parsed instead.

    Args:
        relative_path: Path of the file relative to the show folder
        show_name: Title of the show, removed before number guessing
        bad_words: Extra words to strip from the name

    Returns:
        EpisodeMatchingResult; unknown values stay at -1 / empty
    """
    bad_words = tuple(bad_words)
    result = _detect(_name_of(relative_path), show_name, bad_words)

    if result.episodes and result.season == -1:
        result.season = _detect(relative_path, show_name, bad_words).season
    elif result.season == -1 and not result.episodes:
        result = _detect(relative_path, show_name, bad_words)

    return result


def clean_episode_title(title: str, show_name: str | None = None, bad_words: Iterable[str] = ()) -> str:
    """
    Strip season/episode/date markers from a title.

    Args:
        title: The title (or file name) to clean
        show_name: Show title to remove from the beginning
        bad_words: Extra words to strip

    Returns:
        The cleaned title; the lightly cleaned input when nothing is left
    """
    basename = remove_stopwords(re.sub(r'[":<>|?*]', '', title), bad_words)
    basename = clean_folder_stacking_markers(basename)
    basename = _strip_markers(_FOLDER_PART.sub('', basename)) + " "

    if show_name:
        basename = re.sub('^' + re.escape(show_name), '', basename, flags=re.IGNORECASE)

    return _remove_episode_variants(basename)


def _remove_episode_variants(title: str) -> str:
    backup = title
    for pattern in _TITLE_VARIANTS:
        title = re.sub(pattern, '', title)

    words = [w for w in _TITLE_DELIMITERS.split(title) if w and not _IMDB_ID.fullmatch(w)]
    cleaned = " ".join(words)
    if not cleaned:
        # removed too much
        cleaned = " ".join(w for w in _TITLE_DELIMITERS.split(backup) if w)
    return cleaned
