"""Stop-word and stacking-marker cleaning for episode file names.

The *parser* module does the season/episode detection.  This module
strips the tokens that would otherwise confuse it: resolutions, codecs,
source tags, user supplied bad words and the stacking markers of videos
split over several files (``cd1``, ``part2``, ``-a``, ``1of2`` ...).
"""

import re
from collections.abc import Iterable

# ---------------------------------------------------------------------------
# Stop words
# ---------------------------------------------------------------------------

# Every stop word must be enclosed by one of these (or end the name)
DELIMITER = r'[\[\](){} _,.-]'

# Resolution like 1920x1080
_RESOLUTION = DELIMITER + r'\d{3,4}x\d{3,4}' + '(' + DELIMITER + '|$)'

HARD_STOPWORDS = (
    "1080", "1080i", "1080p", "2160p", "2160i", "3d", "480i", "480p", "576i",
    "576p", "360p", "10bit", "12bit", "360i", "720", "720i", "720p", "8bit",
    "ac3", "ac3ld", "ac3d", "ac3md", "amzn", "aoe", "atmos", "avc", "bd5",
    "bdrip", "blueray", "bluray", "brrip", "cam", "cd1", "cd2", "cd3", "cd4",
    "cd5", "cd6", "cd7", "cd8", "cd9", "dd20", "dd51", "disc1", "disc2",
    "disc3", "disc4", "disc5", "disc6", "disc7", "disc8", "disc9", "divx",
    "divx5", "dl", "dsr", "dsrip", "dts", "dtv", "dubbed", "dvd", "dvd1",
    "dvd2", "dvd3", "dvd4", "dvd5", "dvd6", "dvd7", "dvd8", "dvd9", "dvdivx",
    "dvdrip", "dvdscr", "dvdscreener", "emule", "etm", "fs", "fps", "h264",
    "h265", "hd", "hddvd", "hdr", "hdr10", "hdr10+", "hdrip", "hdtv",
    "hdtvrip", "hevc", "hrhd", "hrhdtv", "ind", "ituneshd", "ld", "md",
    "microhd", "multisubs", "mp3", "netflixhd", "nfo", "nfofix", "ntg",
    "ntsc", "ogg", "ogm", "pal", "pdtv", "pso", "r3", "r5", "remastered",
    "repack", "rerip", "remux", "roor", "rs", "rsvcd", "screener", "sd",
    "subbed", "subs", "svcd", "tc", "telecine", "telesync", "ts", "truehd",
    "uhd", "uncut", "unrated", "vcf", "vhs", "vhsrip", "webdl", "webrip",
    "workprint", "ws", "x264", "x265", "xf", "xvid", "xvidvd",
)


def _word_pattern(word: str) -> re.Pattern:
    return re.compile(DELIMITER + re.escape(word) + '(' + DELIMITER + '|$)', re.IGNORECASE)


_HARD_STOPWORD_PATTERNS = tuple(_word_pattern(w) for w in HARD_STOPWORDS)


def remove_stopwords(filename: str, bad_words: Iterable[str] = ()) -> str:
    """Remove well known release tags and user bad words from a file name.

    Parameters
    ----------
    filename:
        A file name or relative path, extension included.
    bad_words:
        Additional words to strip, matched case-insensitively.

    Returns
    -------
    str
        The cleaned name with its original extension re-attached.  A word
        is only removed when delimited on both sides (or at the end), so
        ``x264`` goes but ``Matrix264`` stays.
    """
    dot = filename.rfind(".")
    sep = max(filename.rfind("/"), filename.rfind("\\"))
    extension = filename[dot + 1:] if dot > sep else ""
    basename = filename[:dot] if extension else filename

    basename = re.sub(_RESOLUTION, ' ', basename, count=1, flags=re.IGNORECASE)
    for pattern in _HARD_STOPWORD_PATTERNS:
        basename = pattern.sub(' ', basename)
    for word in bad_words:
        if word:
            basename = _word_pattern(word).sub(' ', basename)

    return basename + ("." + extension if extension.strip() else "")


# ---------------------------------------------------------------------------
# Stacking markers (see the Kodi "moviestacking" advanced setting)
# ---------------------------------------------------------------------------

# <cd/dvd/part/pt/disk/disc> <1-N>
_STACKING_1 = re.compile(
    r'(.*)[ _.-]+((?:cd|dvd|p(?:ar)?t|dis[ck])[1-9][0-9]?)([ _.-].+)', re.IGNORECASE
)
# same, but the name solely consists of the marker ("disc1.iso")
_STACKING_1A = re.compile(
    r'((?:cd|dvd|p(?:ar)?t|dis[ck])[1-9][0-9]?)([ _.-].+)', re.IGNORECASE
)
# <cd/dvd/part/pt/disk/disc> <a-d>
_STACKING_2 = re.compile(
    r'(.*)[ _.-]+((?:cd|dvd|p(?:ar)?t|dis[ck])[a-d])([ _.-].+)', re.IGNORECASE
)
# name-a.avi, the letter must end the name
_STACKING_3 = re.compile(r'(.*?)[_.-]+([a-d])(\.[^.]+)', re.IGNORECASE)
# name-1of2.avi, name-1 of 2.avi
_STACKING_4 = re.compile(
    r'(.*?)[ (_.-]+([1-9][0-9]?[ .]?of[ .]?[1-9][0-9]?)[ )_-]?([ _.-].+)', re.IGNORECASE
)
_FOLDER_STACKING = re.compile(
    r'(.*?)[ _.-]*((?:cd|dvd|p(?:ar)?t|dis[ck])[1-9][0-9]?)', re.IGNORECASE
)

# (pattern, group holding the marker), tried in order
_MARKER_GROUPS = (
    (_STACKING_1, 2),
    (_STACKING_1A, 1),
    (_STACKING_2, 2),
    (_STACKING_3, 2),
    (_STACKING_4, 2),
)


def get_stacking_marker(filename: str) -> str:
    """Return the stacking marker of *filename* (``cd1``, ``a`` ...) or ``""``."""
    if not filename:
        return ""
    for pattern, group in _MARKER_GROUPS:
        m = pattern.fullmatch(filename)
        if m:
            return m.group(group)
    return ""


def clean_stacking_markers(filename: str) -> str:
    """Return *filename* without its stacking marker."""
    if not filename:
        return filename
    m = _STACKING_1.fullmatch(filename)
    if m:
        return m.group(1) + m.group(3)
    m = _STACKING_1A.fullmatch(filename)
    if m:
        return m.group(2)
    for pattern in (_STACKING_2, _STACKING_3, _STACKING_4):
        m = pattern.fullmatch(filename)
        if m:
            return m.group(1) + m.group(3)
    return filename


def get_folder_stacking_marker(foldername: str) -> str:
    if foldername:
        m = _FOLDER_STACKING.fullmatch(foldername)
        if m:
            return m.group(2)
    return ""


def clean_folder_stacking_markers(foldername: str) -> str:
    if foldername:
        m = _FOLDER_STACKING.fullmatch(foldername)
        if m:
            return m.group(1)
    return foldername


def get_stacking_number(filename: str) -> int:
    """Return the part number of a stacked file, ``0`` when not stacked.

    ``a``-``d`` map to 1-4, ``2of3`` to 2 and ``cd3`` to 3.
    """
    marker = get_stacking_marker(filename).lower()
    if not marker:
        return 0
    if len(marker) == 1 and marker in "abcd":
        return "abcd".index(marker) + 1
    if "of" in marker:
        marker = marker[:marker.index("of")]
    digits = re.sub(r'\D', '', marker)
    if digits:
        return int(digits)
    # cda, partb ...
    letter = marker[-1]
    return "abcd".index(letter) + 1 if letter in "abcd" else 0
