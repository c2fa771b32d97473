"""Tests for the renamer preview."""

from pathlib import Path

from tvrenamer.models import Show
from tvrenamer.preview import RenamerPreview
from tvrenamer.renamer import rename_show
from tvrenamer.settings import RenamerSettings

NEW_ROOT = "Breaking Bad (2008)"
NAME = "Breaking Bad - S01E01 - Pilot"


class TestRenamerPreview:
    """Tests for RenamerPreview.generate."""

    def test_badly_named_show(self, breaking_bad: Show, library: Path, as_paths) -> None:
        container = RenamerPreview(breaking_bad, RenamerSettings()).generate()
        root = library / NEW_ROOT

        assert container.needs_rename
        assert container.old_path == library / "breaking.bad"
        assert container.new_path == root
        new = as_paths(container.new_files)
        assert root / "Season 1" / f"{NAME}.mkv" in new
        assert root / "Season 1" / f"{NAME}.en.srt" in new
        assert root / "poster.jpg" in new
        assert root / "season01-poster.jpg" in new

    def test_old_files_use_new_root(self, breaking_bad: Show, library: Path, as_paths) -> None:
        """Old files are rebased so unchanged files compare equal."""
        container = RenamerPreview(breaking_bad, RenamerSettings()).generate()
        root = library / NEW_ROOT

        old = as_paths(container.old_files)
        assert root / "S01" / "bb.s01e01.mkv" in old
        assert root / "tvshow.nfo" in as_paths(container.new_files)
        assert root / "poster.jpeg" in as_paths(container.removed_files)
        assert root / "poster.jpg" in as_paths(container.added_files)
        assert root / "tvshow.nfo" not in as_paths(container.removed_files)

    def test_disk_and_show_untouched(self, breaking_bad: Show, library: Path) -> None:
        before = list(breaking_bad.all_media_files())
        RenamerPreview(breaking_bad, RenamerSettings()).generate()

        assert breaking_bad.path == library / "breaking.bad"
        assert breaking_bad.all_media_files() == before
        assert (library / "breaking.bad" / "S01" / "bb.s01e01.mkv").is_file()
        assert not (library / NEW_ROOT).exists()

    def test_nothing_to_do_after_rename(self, breaking_bad: Show) -> None:
        rename_show(breaking_bad, RenamerSettings())
        container = RenamerPreview(breaking_bad, RenamerSettings()).generate()

        assert not container.needs_rename
        assert container.removed_files == []
        assert container.added_files == []

    def test_invalid_episode_keeps_files(self, breaking_bad: Show, library: Path, as_paths) -> None:
        breaking_bad.episodes[0].season = -1
        container = RenamerPreview(breaking_bad, RenamerSettings()).generate()

        assert library / NEW_ROOT / "S01" / "bb.s01e01.mkv" in as_paths(container.new_files)

    def test_empty_templates(self, breaking_bad: Show) -> None:
        snapshot = RenamerSettings(show_folder_template="", season_folder_template="", filename_template="")
        container = RenamerPreview(breaking_bad, snapshot).generate()

        assert not container.needs_rename
        assert container.new_path == container.old_path
