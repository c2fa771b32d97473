"""Filesystem operations used by the renamer.

Every operation either completes or raises :class:`FileOperationError`;
the caller decides whether a failure aborts anything.
"""
import logging
import os
import shutil
from pathlib import Path

from .errors import FileOperationError

log = logging.getLogger(__name__)

NOMEDIA_FILE = ".nomedia"


def same_path(a: Path, b: Path) -> bool:
    """True when both paths are textually identical once made absolute."""
    return os.path.abspath(a) == os.path.abspath(b)


def _is_same_file(a: Path, b: Path) -> bool:
    # case-only renames on case-insensitive filesystems
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


class LocalFileSystem:
    """Moves, copies and deletes files on the local disk."""

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def is_same_file(self, a: Path, b: Path) -> bool:
        return _is_same_file(a, b)

    def _prepare_target(self, source: Path, target: Path) -> None:
        if not os.path.lexists(source):
            raise FileOperationError(f"source does not exist: {source}", source, target)
        if os.path.lexists(target) and not _is_same_file(source, target):
            raise FileOperationError(f"destination already exists: {target}", source, target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileOperationError(f"could not create {target.parent}: {e}", source, target) from e

    def move_file(self, source: Path, target: Path) -> None:
        """Move *source* to *target*; identical paths are a no-op."""
        if same_path(source, target):
            return
        self._prepare_target(source, target)
        log.debug("move %s -> %s", source, target)
        try:
            shutil.move(os.fspath(source), os.fspath(target))
        except OSError as e:
            raise FileOperationError(f"could not move {source}: {e}", source, target) from e

    def move_directory(self, source: Path, target: Path) -> None:
        """Move a whole directory tree."""
        if same_path(source, target):
            return
        if not os.path.isdir(source):
            raise FileOperationError(f"not a directory: {source}", source, target)
        self._prepare_target(source, target)
        log.debug("move directory %s -> %s", source, target)
        try:
            shutil.move(os.fspath(source), os.fspath(target))
        except OSError as e:
            raise FileOperationError(f"could not move {source}: {e}", source, target) from e

    def copy_file(self, source: Path, target: Path) -> None:
        """Copy *source* over *target*; identical paths are a no-op."""
        if same_path(source, target):
            return
        if _is_same_file(source, target):
            # same file with another spelling, only a rename helps
            self.move_file(source, target)
            return
        if not os.path.isfile(source):
            raise FileOperationError(f"source does not exist: {source}", source, target)
        log.debug("copy %s -> %s", source, target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as e:
            raise FileOperationError(f"could not copy {source}: {e}", source, target) from e

    def delete(self, path: Path) -> None:
        log.debug("delete %s", path)
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                shutil.rmtree(path)
            else:
                os.unlink(path)
        except OSError as e:
            raise FileOperationError(f"could not delete {path}: {e}", path) from e

    def delete_with_backup(self, path: Path, data_source: Path, trash_folder: str) -> Path:
        """
        Move *path* into the trash folder of its data source.

        The relative location below the data source is kept, so
        ``<ds>/Show/a.nfo`` ends up as ``<ds>/<trash>/Show/a.nfo``.

        Returns:
            The backup location
        """
        trash = Path(data_source) / trash_folder
        try:
            relative = Path(os.path.abspath(path)).relative_to(os.path.abspath(data_source))
        except ValueError:
            relative = Path(Path(path).name)
        backup = trash / relative

        try:
            trash.mkdir(parents=True, exist_ok=True)
            (trash / NOMEDIA_FILE).touch(exist_ok=True)
            backup.parent.mkdir(parents=True, exist_ok=True)
            if os.path.lexists(backup):
                self.delete(backup)
            log.debug("backup %s -> %s", path, backup)
            shutil.move(os.fspath(path), os.fspath(backup))
        except OSError as e:
            raise FileOperationError(f"could not move {path} to trash: {e}", path, backup) from e
        return backup

    def remove_dir_if_empty(self, directory: Path) -> bool:
        """Delete *directory* when it has no entries; never recursive."""
        try:
            if not os.path.isdir(directory):
                return False
            with os.scandir(directory) as entries:
                if any(entries):
                    return False
            log.debug("deleting empty directory %s", directory)
            os.rmdir(directory)
            return True
        except OSError as e:
            log.warning("could not remove directory %s: %s", directory, e)
            return False

    def remove_empty_dirs(self, root: Path, keep: tuple[str, ...] = ()) -> list[Path]:
        """
        Remove empty directories below *root*, deepest first.

        Args:
            root: Top directory, never removed itself
            keep: Directory names that are left alone (e.g. the trash folder)

        Returns:
            The removed directories
        """
        removed = []
        if not os.path.isdir(root):
            return removed
        for dirpath, dirnames, _ in os.walk(root, topdown=False):
            path = Path(dirpath)
            if same_path(path, root) or path.name in keep:
                continue
            if self.remove_dir_if_empty(path):
                removed.append(path)
        return removed
