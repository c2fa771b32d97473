"""Tests for destination planning (no disk access)."""

from __future__ import annotations

from pathlib import Path

import pytest

from tvrenamer.models import (
    Episode,
    FileOperation,
    MediaFile,
    MediaFileType,
    Season,
    Show,
    SubtitleTrack,
)
from tvrenamer.planner import (
    artwork_extension,
    difference,
    disc_folder_name,
    language_code,
    plan_disc_episode,
    plan_episode,
    plan_episode_file,
    plan_season_file,
    plan_show_file,
    season_folder_name,
    show_folder_name,
)
from tvrenamer.settings import (
    EpisodeFileNaming,
    LanguageStyle,
    RenamerSettings,
    SeasonFileNaming,
    ShowFileNaming,
)

NAME = "Breaking Bad - S01E01 - Pilot"


@pytest.fixture
def root(tmp_path: Path) -> Path:
    return tmp_path / "TV" / "Breaking Bad (2008)"


@pytest.fixture
def show(root: Path) -> Show:
    return Show(path=root, data_source=root.parent, title="Breaking Bad", year=2008)


@pytest.fixture
def episode(show: Show, root: Path) -> Episode:
    ep = show.add_episode(Episode(season=1, episode=1, title="Pilot"))
    ep.media_files = [MediaFile(root / "old" / "bb.s01e01.mkv", MediaFileType.VIDEO)]
    return ep


def attach(episode: Episode, path: Path, file_type: MediaFileType, **kwargs) -> MediaFile:
    mf = MediaFile(path, file_type, **kwargs)
    episode.media_files.append(mf)
    return mf


def targets(planned) -> list[Path]:
    return [d.target.path for d in planned]


class TestFolderNames:
    """Tests for show, season and disc folder names."""

    def test_show_folder(self, show: Show, settings: RenamerSettings) -> None:
        assert show_folder_name(show, settings) == show.data_source / "Breaking Bad (2008)"

    def test_show_folder_blank_template(self, show: Show) -> None:
        snapshot = RenamerSettings(show_folder_template="")
        assert show_folder_name(show, snapshot) == show.path

    def test_season_folder(self, show: Show, episode: Episode, settings: RenamerSettings) -> None:
        assert season_folder_name(show, 1, settings) == "Season 1"

    def test_unknown_season(self, show: Show, settings: RenamerSettings) -> None:
        assert season_folder_name(show, 7, settings) == ""

    def test_specials(self, show: Show, settings: RenamerSettings) -> None:
        show.add_episode(Episode(season=0, episode=1, title="Special"))
        assert season_folder_name(show, 0, settings) == "Specials"
        assert season_folder_name(show, 0, RenamerSettings(special_season=False)) == "Season 0"

    def test_blank_season_folder_allowed(self, show: Show, episode: Episode) -> None:
        """The file name carries the season, so files may live in the show root."""
        snapshot = RenamerSettings(season_folder_template="")
        assert season_folder_name(show, 1, snapshot) == ""

    def test_blank_season_folder_fallback(self, show: Show, episode: Episode) -> None:
        """Without a season in the file name a default folder is used."""
        snapshot = RenamerSettings(season_folder_template="", filename_template="${showTitle} - ${title}")
        assert season_folder_name(show, 1, snapshot) == "Season 1"

    def test_season_space_substitution(self, show: Show, episode: Episode) -> None:
        snapshot = RenamerSettings(season_space_substitution=True, season_space_replacement=".")
        assert season_folder_name(show, 1, snapshot) == "Season.1"


class TestEpisodeFiles:
    """Tests for plan_episode_file, per file type."""

    def test_video(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        planned = plan_episode_file(episode.media_files[0], show, settings)
        assert targets(planned) == [root / "Season 1" / f"{NAME}.mkv"]
        assert planned[0].operation is FileOperation.MOVE

    def test_video_stacking(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        part = attach(episode, root / "old" / "bb.s01e01.cd2.mkv", MediaFileType.VIDEO, stacking_marker="cd2", stacking=2)
        assert targets(plan_episode_file(part, show, settings)) == [root / "Season 1" / f"{NAME}.cd2.mkv"]

    def test_stacking_number_without_marker(self, show: Show, episode: Episode, root: Path) -> None:
        part = attach(episode, root / "old" / "bb.s01e01.b.mkv", MediaFileType.VIDEO, stacking=2)
        snapshot = RenamerSettings(filename_space_substitution=True, filename_space_replacement="_")
        planned = plan_episode_file(part, show, snapshot)
        assert planned[0].target.filename == "Breaking_Bad_-_S01E01_-_Pilot_CD2.mkv"

    def test_video_keeps_original_filename_extension(self, show: Show, episode: Episode, root: Path) -> None:
        """${originalFilename} already carries the extension."""
        episode.original_filename = "bb.s01e01.mkv"
        snapshot = RenamerSettings(filename_template="${originalFilename}")
        assert targets(plan_episode_file(episode.media_files[0], show, snapshot)) == [
            root / "Season 1" / "bb.s01e01.mkv"
        ]

    def test_empty_name_moves_into_season_folder(self, show: Show, episode: Episode, root: Path) -> None:
        snapshot = RenamerSettings(filename_template="${showNote}")
        assert targets(plan_episode_file(episode.media_files[0], show, snapshot)) == [
            root / "Season 1" / "bb.s01e01.mkv"
        ]

    def test_nfo_variants(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        nfo = attach(episode, root / "old" / "bb.s01e01.nfo", MediaFileType.NFO)
        planned = plan_episode_file(nfo, show, settings)
        assert targets(planned) == [root / "Season 1" / f"{NAME}.nfo"]
        assert planned[0].operation is FileOperation.COPY

        assert plan_episode_file(nfo, show, RenamerSettings(episode_nfo_filenames=())) == []

    def test_thumb(self, show: Show, episode: Episode, root: Path) -> None:
        thumb = attach(episode, root / "old" / "bb.s01e01.jpeg", MediaFileType.THUMB)
        snapshot = RenamerSettings(episode_thumb_filenames=(
            EpisodeFileNaming.FILENAME_THUMB, EpisodeFileNaming.FILENAME_LANDSCAPE,
        ))
        assert targets(plan_episode_file(thumb, show, snapshot)) == [
            root / "Season 1" / f"{NAME}-thumb.jpg",
            root / "Season 1" / f"{NAME}-landscape.jpg",
        ]

    def test_fanart(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        fanart = attach(episode, root / "old" / "x.png", MediaFileType.FANART)
        assert targets(plan_episode_file(fanart, show, settings)) == [root / "Season 1" / f"{NAME}-fanart.png"]

    def test_other_graphic_dropped(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        poster = attach(episode, root / "old" / "poster.jpg", MediaFileType.POSTER)
        assert plan_episode_file(poster, show, settings) == []

    @pytest.mark.parametrize("file_type,suffix", [
        (MediaFileType.TRAILER, "-trailer"),
        (MediaFileType.SAMPLE, "-sample"),
        (MediaFileType.MEDIAINFO, "-mediainfo"),
    ])
    def test_fixed_suffix(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings,
                          file_type: MediaFileType, suffix: str) -> None:
        mf = attach(episode, root / "old" / "whatever.xml", file_type)
        assert targets(plan_episode_file(mf, show, settings)) == [root / "Season 1" / f"{NAME}{suffix}.xml"]

    def test_vsmeta(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        meta = attach(episode, root / "old" / "bb.s01e01.mkv.vsmeta", MediaFileType.VSMETA)
        assert targets(plan_episode_file(meta, show, settings)) == [root / "Season 1" / f"{NAME}.mkv.vsmeta"]

    def test_extra(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        extra = attach(episode, root / "old" / "behind the scenes.mkv", MediaFileType.EXTRA)
        assert targets(plan_episode_file(extra, show, settings)) == [
            root / "Season 1" / "extras" / f"{NAME}-behind the scenes.mkv"
        ]

    def test_audio_keeps_extra_part(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        audio = attach(episode, root / "old" / "bb.s01e01.commentary.mp3", MediaFileType.AUDIO)
        assert targets(plan_episode_file(audio, show, settings)) == [
            root / "Season 1" / f"{NAME}.commentary.mp3"
        ]

    def test_file_without_episode(self, show: Show, root: Path, settings: RenamerSettings) -> None:
        stray = MediaFile(root / "stray.mkv", MediaFileType.VIDEO)
        assert plan_episode_file(stray, show, settings) == []


class TestSubtitles:
    """Tests for subtitle file names."""

    def test_track_metadata(self, show: Show, episode: Episode, root: Path) -> None:
        sub = attach(
            episode, root / "old" / "whatever.srt", MediaFileType.SUBTITLE,
            subtitles=(SubtitleTrack(language="de", forced=True, sdh=True, title="Signs"),),
        )
        snapshot = RenamerSettings(subtitle_language_style=LanguageStyle.ISO3)
        planned = plan_episode_file(sub, show, snapshot)
        assert planned[0].target.filename == f"{NAME}.ger.forced.sdh.Signs.srt"
        assert planned[0].operation is FileOperation.MOVE

    def test_language_from_filename(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        sub = attach(episode, root / "old" / "bb.s01e01.de.srt", MediaFileType.SUBTITLE)
        assert plan_episode_file(sub, show, settings)[0].target.filename == f"{NAME}.de.srt"

    def test_forced_from_filename(self, show: Show, episode: Episode, root: Path) -> None:
        sub = attach(episode, root / "old" / "bb.s01e01.english.forced.srt", MediaFileType.SUBTITLE)
        snapshot = RenamerSettings(subtitle_language_style=LanguageStyle.ISO2)
        assert plan_episode_file(sub, show, snapshot)[0].target.filename == f"{NAME}.en.forced.srt"

    def test_no_language(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        sub = attach(episode, root / "old" / "bb.s01e01.srt", MediaFileType.SUBTITLE)
        assert plan_episode_file(sub, show, settings)[0].target.filename == f"{NAME}.srt"

    def test_language_code_styles(self) -> None:
        assert language_code("de", LanguageStyle.ISO3) == "ger"
        assert language_code("deu", LanguageStyle.ISO2) == "de"
        assert language_code("French", LanguageStyle.ISO2) == "fr"
        assert language_code("de", LanguageStyle.KEEP) == "de"
        assert language_code("xx", LanguageStyle.ISO3) == "xx"


class TestPlanEpisode:
    """Tests for plan_episode selection."""

    def test_newest_artwork_only(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        attach(episode, root / "old" / "a.nfo", MediaFileType.NFO, mtime=1.0)
        newest = attach(episode, root / "old" / "b.nfo", MediaFileType.NFO, mtime=5.0)
        nfo_sources = [d.source for d in plan_episode(episode, settings) if d.source.type is MediaFileType.NFO]
        assert nfo_sources == [newest]

    def test_no_show(self, settings: RenamerSettings) -> None:
        assert plan_episode(Episode(season=1, episode=1), settings) == []


class TestDiscEpisode:
    """Tests for disc structure planning."""

    def test_disc_folder(self, show: Show, root: Path, settings: RenamerSettings) -> None:
        ep = show.add_episode(Episode(season=1, episode=1, title="Pilot", disc=True))
        ifo = MediaFile(root / "Disc 1" / "VIDEO_TS" / "VIDEO_TS.IFO", MediaFileType.VIDEO)
        ep.media_files = [ifo]

        assert disc_folder_name(show, ifo, settings) == NAME
        disc, old_folder, new_folder = plan_disc_episode(ep, settings)
        assert disc == root / "Disc 1" / "VIDEO_TS"
        assert old_folder == root / "Disc 1"
        assert new_folder == root / "Season 1" / NAME

    def test_not_a_disc(self, show: Show, episode: Episode, settings: RenamerSettings) -> None:
        episode.disc = True
        assert plan_disc_episode(episode, settings) is None


class TestShowFiles:
    """Tests for plan_show_file."""

    def test_poster_variants(self, show: Show, root: Path) -> None:
        poster = MediaFile(root / "cover.jpeg", MediaFileType.POSTER)
        snapshot = RenamerSettings(poster_filenames=(ShowFileNaming.POSTER, ShowFileNaming.FOLDER))
        planned = plan_show_file(poster, show, snapshot)
        assert targets(planned) == [root / "poster.jpg", root / "folder.jpg"]
        assert all(d.operation is FileOperation.COPY for d in planned)

    def test_nfo(self, show: Show, root: Path, settings: RenamerSettings) -> None:
        nfo = MediaFile(root / "show.nfo", MediaFileType.NFO)
        assert targets(plan_show_file(nfo, show, settings)) == [root / "tvshow.nfo"]

    def test_no_variants_drops(self, show: Show, root: Path) -> None:
        logo = MediaFile(root / "logo.png", MediaFileType.LOGO)
        assert plan_show_file(logo, show, RenamerSettings(logo_filenames=())) == []

    def test_unhandled_type_stays(self, show: Show, root: Path, settings: RenamerSettings) -> None:
        text = MediaFile(root / "readme.txt", MediaFileType.TEXT)
        assert targets(plan_show_file(text, show, settings)) == [root / "readme.txt"]

    def test_extrafanart_folder(self, show: Show, root: Path, settings: RenamerSettings) -> None:
        fanart = MediaFile(root / "some fanart3.jpeg", MediaFileType.EXTRAFANART)
        assert targets(plan_show_file(fanart, show, settings)) == [root / "extrafanart" / "fanart3.jpg"]

    def test_extrafanart_root(self, show: Show, root: Path) -> None:
        fanart = MediaFile(root / "extrafanart" / "fanart12.jpg", MediaFileType.EXTRAFANART)
        snapshot = RenamerSettings(extrafanart_filenames=(ShowFileNaming.EXTRAFANART,))
        assert targets(plan_show_file(fanart, show, snapshot)) == [root / "fanart12.jpg"]

    def test_tbn_follows_container(self, show: Show, root: Path, settings: RenamerSettings) -> None:
        tbn = MediaFile(root / "poster.tbn", MediaFileType.POSTER, container_format="PNG")
        assert targets(plan_show_file(tbn, show, settings)) == [root / "poster.png"]


class TestSeasonFiles:
    """Tests for plan_season_file."""

    def test_season_poster(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        season = show.get_season(1)
        poster = MediaFile(root / "s1.jpg", MediaFileType.SEASON_POSTER)
        assert targets(plan_season_file(poster, season, settings)) == [root / "season01-poster.jpg"]

    def test_specials_and_folder_variants(self, show: Show, root: Path) -> None:
        show.add_episode(Episode(season=0, episode=1, title="Special"))
        season = show.get_season(0)
        poster = MediaFile(root / "s0.jpg", MediaFileType.SEASON_POSTER)
        snapshot = RenamerSettings(season_poster_filenames=(
            SeasonFileNaming.SEASON_POSTER, SeasonFileNaming.SEASON_FOLDER_POSTER,
        ))
        assert targets(plan_season_file(poster, season, snapshot)) == [
            root / "season-specials-poster.jpg",
            root / "Specials" / "folder.jpg",
        ]

    def test_season_nfo(self, show: Show, episode: Episode, root: Path, settings: RenamerSettings) -> None:
        nfo = MediaFile(root / "x.nfo", MediaFileType.NFO)
        assert targets(plan_season_file(nfo, show.get_season(1), settings)) == [root / "Season 1" / "season.nfo"]

    def test_folder_variant_skipped_without_folder(self, show: Show, episode: Episode, root: Path) -> None:
        snapshot = RenamerSettings(season_folder_template="")
        nfo = MediaFile(root / "x.nfo", MediaFileType.NFO)
        assert plan_season_file(nfo, show.get_season(1), snapshot) == []

    def test_detached_season_keeps_file(self, root: Path, settings: RenamerSettings) -> None:
        poster = MediaFile(root / "s1.jpg", MediaFileType.SEASON_POSTER)
        assert targets(plan_season_file(poster, Season(1), settings)) == [poster.path]


class TestHelpers:
    """Tests for small planner helpers."""

    def test_difference(self) -> None:
        assert difference("abc", "abd.x") == "d.x"
        assert difference("abc", "abc") == ""
        assert difference("abc", "abc.commentary") == ".commentary"

    def test_artwork_extension(self, root: Path) -> None:
        assert artwork_extension(MediaFile(root / "a.jpeg")) == "jpg"
        assert artwork_extension(MediaFile(root / "a.tbn", container_format="JPEG")) == "jpg"
        assert artwork_extension(MediaFile(root / "a.tbn")) == "tbn"
