"""Tests for the local filesystem operations."""

from pathlib import Path

import pytest

from tvrenamer.errors import FileOperationError
from tvrenamer.filesystem import NOMEDIA_FILE, LocalFileSystem, same_path


@pytest.fixture
def fs() -> LocalFileSystem:
    return LocalFileSystem()


class TestMoveAndCopy:
    """Tests for move_file, move_directory and copy_file."""

    def test_move_creates_parents(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        source = tmp_path / "a.mkv"
        source.write_text("x")
        target = tmp_path / "deep" / "er" / "b.mkv"

        fs.move_file(source, target)

        assert target.read_text() == "x"
        assert not source.exists()

    def test_move_onto_existing_file_fails(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        source = tmp_path / "a.mkv"
        target = tmp_path / "b.mkv"
        source.write_text("a")
        target.write_text("b")

        with pytest.raises(FileOperationError) as exc:
            fs.move_file(source, target)

        assert exc.value.source == source
        assert target.read_text() == "b"
        assert source.exists()

    def test_missing_source(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError):
            fs.move_file(tmp_path / "nope", tmp_path / "b")

    def test_same_path_is_noop(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        source = tmp_path / "a.mkv"
        source.write_text("a")
        fs.move_file(source, tmp_path / "." / "a.mkv")
        fs.copy_file(source, source)
        assert source.read_text() == "a"

    def test_copy_keeps_source(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        source = tmp_path / "poster.jpeg"
        source.write_text("img")
        target = tmp_path / "Show" / "poster.jpg"

        fs.copy_file(source, target)

        assert source.read_text() == "img"
        assert target.read_text() == "img"

    def test_move_directory(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        (tmp_path / "old" / "sub").mkdir(parents=True)
        (tmp_path / "old" / "sub" / "f.txt").write_text("f")

        fs.move_directory(tmp_path / "old", tmp_path / "new")

        assert (tmp_path / "new" / "sub" / "f.txt").read_text() == "f"
        assert not (tmp_path / "old").exists()

    def test_move_directory_needs_directory(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        (tmp_path / "file").write_text("f")
        with pytest.raises(FileOperationError):
            fs.move_directory(tmp_path / "file", tmp_path / "new")


class TestDelete:
    """Tests for delete and delete_with_backup."""

    def test_delete(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        path = tmp_path / "a.nfo"
        path.write_text("a")
        fs.delete(path)
        assert not path.exists()

    def test_delete_missing_raises(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError):
            fs.delete(tmp_path / "missing")

    def test_backup_keeps_relative_location(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        path = tmp_path / "Show" / "S01" / "a.nfo"
        path.parent.mkdir(parents=True)
        path.write_text("a")

        backup = fs.delete_with_backup(path, tmp_path, ".trash")

        assert backup == tmp_path / ".trash" / "Show" / "S01" / "a.nfo"
        assert backup.read_text() == "a"
        assert (tmp_path / ".trash" / NOMEDIA_FILE).is_file()
        assert not path.exists()

    def test_backup_replaces_older_backup(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        old = tmp_path / ".trash" / "a.nfo"
        old.parent.mkdir()
        old.write_text("old")
        path = tmp_path / "a.nfo"
        path.write_text("new")

        fs.delete_with_backup(path, tmp_path, ".trash")

        assert old.read_text() == "new"

    def test_backup_outside_data_source(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        path = tmp_path / "elsewhere" / "a.nfo"
        path.parent.mkdir()
        path.write_text("a")
        library = tmp_path / "TV"
        library.mkdir()

        backup = fs.delete_with_backup(path, library, ".trash")

        assert backup == library / ".trash" / "a.nfo"


class TestEmptyDirectories:
    """Tests for remove_dir_if_empty and remove_empty_dirs."""

    def test_remove_dir_if_empty(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        (tmp_path / "empty").mkdir()
        (tmp_path / "full").mkdir()
        (tmp_path / "full" / "f").write_text("f")

        assert fs.remove_dir_if_empty(tmp_path / "empty") is True
        assert fs.remove_dir_if_empty(tmp_path / "full") is False
        assert fs.remove_dir_if_empty(tmp_path / "missing") is False
        assert (tmp_path / "full").exists()

    def test_remove_empty_dirs(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        root = tmp_path / "Show"
        (root / "a" / "b").mkdir(parents=True)
        (root / "c").mkdir()
        (root / "c" / "keep.mkv").write_text("x")
        (root / ".trash").mkdir()

        removed = fs.remove_empty_dirs(root, keep=(".trash",))

        assert set(removed) == {root / "a" / "b", root / "a"}
        assert root.exists()
        assert (root / "c").exists()
        assert (root / ".trash").exists()

    def test_root_never_removed(self, fs: LocalFileSystem, tmp_path: Path) -> None:
        root = tmp_path / "Show"
        root.mkdir()
        assert fs.remove_empty_dirs(root) == []
        assert root.exists()


def test_same_path(tmp_path: Path) -> None:
    assert same_path(tmp_path / "a" / ".." / "b", tmp_path / "b")
    assert not same_path(tmp_path / "a", tmp_path / "b")
