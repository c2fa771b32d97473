"""
File materializer: executes the planner's destinations for a show.

Every pass follows the same three steps:

1. plan: ask the planner for the destinations of every existing file and
   remember the files the entity had before (the cleanup set)
2. materialize: move or copy each source onto its target; a failed
   operation keeps the source in the needed set
3. sweep: soft delete every file of the cleanup set that is not needed
   any more, prune empty folders and refresh the image cache

A failing file never aborts the pass; it is recorded in the returned
:class:`RenameReport`.
"""
import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from .cache import ImageCache, NullImageCache
from .errors import FileOperationError, InvalidEpisodeError
from .filesystem import LocalFileSystem, same_path
from .messages import Message, MessageLevel, MessageManager
from .models import (
    DestinationFile,
    Episode,
    FileOperation,
    MediaFile,
    MediaFileType,
    RenameReport,
    RenameResult,
    Season,
    Show,
)
from .planner import plan_disc_episode, plan_episode, plan_season, plan_show, show_folder_name
from .settings import RenamerSettings

log = logging.getLogger(__name__)

MSG_FAILED_RENAME = "tvshow.renamer.failedrename"


def _dedupe(media_files: Iterable[MediaFile]) -> list[MediaFile]:
    """Drop duplicate paths, keeping the first occurrence."""
    return list(dict.fromkeys(media_files))


def _result(dest: DestinationFile, success: bool, error: str | None = None, skip_reason: str | None = None) -> RenameResult:
    return RenameResult(
        original_path=str(dest.source.path),
        new_path=str(dest.target.path),
        success=success,
        error=error,
        skipped=skip_reason is not None,
        skip_reason=skip_reason,
        file_type=dest.source.type.value,
    )


class Renamer:
    """Renames shows and episodes on disk and keeps the model in sync."""

    def __init__(
        self,
        settings: RenamerSettings | None = None,
        fs: LocalFileSystem | None = None,
        image_cache: ImageCache | None = None,
        messages: MessageManager | None = None,
        on_saved: Callable[[Any], None] | None = None,
    ):
        """
        Initialize the renamer.

        Args:
            settings: Settings snapshot used for the whole pass
            fs: Filesystem command layer (a fake can be injected)
            image_cache: Notified about every touched graphic file
            messages: Message bus for user facing errors
            on_saved: Called with every changed show/season/episode once
                the pass is done
        """
        self.settings = settings or RenamerSettings()
        self.fs = fs or LocalFileSystem()
        self.image_cache = image_cache or NullImageCache()
        self.messages = messages or MessageManager()
        self.on_saved = on_saved or (lambda entity: None)
        # entities waiting for on_saved while a show pass runs, per thread
        self._local = threading.local()

    # ------------------------------------------------------------------
    # Show
    # ------------------------------------------------------------------

    def rename_show(self, show: Show) -> RenameReport:
        """Rename the show folder, then its episodes, show files and season artwork."""
        log.info("renaming show '%s'", show.title)
        report = RenameReport()
        if self.settings.templates_empty:
            log.info("NOT renaming show '%s': all templates are empty", show.title)
            return report

        self._local.pending = []
        try:
            report.extend(self.rename_show_root(show))

            done: set[Episode] = set()
            for episode in sorted(show.episodes, key=Episode.sort_key):
                if episode in done:
                    continue
                # the other parts of a multi-episode file are renamed with it
                video = episode.main_video_file
                if video is not None:
                    done.update(show.episodes_for_file(video))
                report.extend(self.rename_episode(episode))

            report.extend(self.rename_show_media_files(show))
            report.extend(self.rename_season_artwork(show))
        finally:
            pending, self._local.pending = self._local.pending, None

        for entity in pending:
            self.on_saved(entity)

        log.info(
            "renamed show '%s': %d operations, %d failed",
            show.title, len(report.results), len(report.failures),
        )
        return report

    def rename_show_root(self, show: Show) -> RenameReport:
        """Move the show folder to its templated name and rebase all files."""
        report = RenameReport()
        if self.settings.templates_empty:
            return report

        old_path = show.path
        new_path = show_folder_name(show, self.settings)
        if same_path(old_path, new_path):
            return report

        graphics = [mf for mf in show.all_media_files() if mf.is_graphic]
        self._invalidate(graphics)

        try:
            self.fs.move_directory(old_path, new_path)
        except FileOperationError as e:
            log.error("could not rename show folder %s -> %s: %s", old_path, new_path, e)
            self.messages.push(Message(MessageLevel.ERROR, show.title, MSG_FAILED_RENAME, (show.title,)))
            report.add(RenameResult(str(old_path), str(new_path), False, error=str(e), file_type="folder"))
            return report

        show.replace_path_prefix(old_path, new_path)
        show.path = new_path
        report.add(RenameResult(str(old_path), str(new_path), True, file_type="folder"))

        self._cache([mf for mf in show.all_media_files() if mf.is_graphic])
        self._saved(show)
        return report

    def rename_show_media_files(self, show: Show) -> RenameReport:
        """Rename the show level NFO and artwork."""
        report = RenameReport()
        cleanup = list(show.media_files)
        needed = self._materialize(plan_show(show, self.settings), report)

        self._invalidate([mf for mf in cleanup if mf.is_graphic])
        needed = _dedupe(needed)
        self._sweep(show, cleanup, needed, report)
        self._cache([mf for mf in needed if mf.is_graphic])

        show.media_files = needed
        self._saved(show)
        return report

    def rename_season_artwork(self, show: Show) -> RenameReport:
        """Rename season artwork and NFOs; runs after all episodes are done."""
        report = RenameReport()
        for season in sorted(show.seasons, key=lambda s: s.number):
            report.extend(self._rename_season(season))
        return report

    def _rename_season(self, season: Season) -> RenameReport:
        report = RenameReport()
        if season.show is None or not season.media_files:
            return report

        cleanup = list(season.media_files)
        needed = self._materialize(plan_season(season, self.settings), report)

        self._invalidate([mf for mf in cleanup if mf.is_graphic])
        needed = _dedupe(needed)
        self._sweep(season.show, cleanup, needed, report)
        self._cache([mf for mf in needed if mf.is_graphic])

        season.media_files = needed
        self._saved(season)
        return report

    # ------------------------------------------------------------------
    # Episode
    # ------------------------------------------------------------------

    def rename_episode(self, episode: Episode) -> RenameReport:
        """
        Rename all files of an episode (and of the episodes sharing its video).

        Args:
            episode: Episode attached to a show

        Returns:
            RenameReport of this episode's operations
        """
        report = RenameReport()
        show = episode.show
        settings = self.settings
        if show is None:
            log.warning("episode '%s' has no show, not renaming", episode.title)
            return report

        if not settings.filename_template.strip() and not settings.season_folder_template.strip():
            log.info("NOT renaming '%s' S%dE%d: filename and season templates are empty",
                     show.title, episode.season, episode.episode)
            return report

        if episode.season < 0 or episode.episode < 0:
            error = InvalidEpisodeError(episode.title, episode.season, episode.episode)
            log.warning("NOT renaming '%s': %s", show.title, error)
            self.messages.push(Message(MessageLevel.ERROR, show.title, MSG_FAILED_RENAME, (episode.title,)))
            video = episode.main_video_file
            report.add(RenameResult(
                original_path=str(video.path) if video else "",
                new_path="",
                success=False,
                error=str(error),
                file_type=MediaFileType.VIDEO.value,
            ))
            return report

        log.debug("renaming '%s' S%d E%s", show.title, episode.season, episode.episode_numbers)
        if episode.disc:
            return self._rename_disc_episode(episode, report)

        video = episode.main_video_file
        sharing = show.episodes_for_file(video) if video is not None else [episode]
        if episode not in sharing:
            sharing.append(episode)

        cleanup = list(episode.media_files)
        needed = self._materialize(plan_episode(episode, settings), report)

        self._invalidate([mf for mf in cleanup if mf.is_graphic])
        needed = _dedupe(needed)
        self._sweep(show, cleanup, needed, report)
        self.fs.remove_empty_dirs(show.path, keep=(settings.trash_folder,))

        new_video = next((mf for mf in needed if mf.type is MediaFileType.VIDEO), None)
        for ep in sharing:
            ep.set_media_files(needed)
            if new_video is not None:
                ep.path = new_video.path.parent

        self._cache([mf for mf in needed if mf.is_graphic])
        for ep in sharing:
            self._saved(ep)
        return report

    def _rename_disc_episode(self, episode: Episode, report: RenameReport) -> RenameReport:
        """Disc structures are moved as one folder."""
        show = episode.show
        planned = plan_disc_episode(episode, self.settings)
        if planned is None:
            return report
        disc, old_folder, new_folder = planned
        video = episode.main_video_file
        sharing = show.episodes_for_file(video) if video is not None else [episode]

        if same_path(old_folder, new_folder):
            return report
        try:
            self.fs.move_directory(old_folder, new_folder)
        except FileOperationError as e:
            log.error("could not move disc folder %s -> %s: %s", old_folder, new_folder, e)
            self.messages.push(Message(MessageLevel.ERROR, show.title, MSG_FAILED_RENAME, (episode.title,)))
            report.add(RenameResult(str(old_folder), str(new_folder), False, error=str(e), file_type="folder"))
            return report

        log.debug("moved disc structure %s into %s", disc.name, new_folder)
        report.add(RenameResult(str(old_folder), str(new_folder), True, file_type="folder"))
        for ep in sharing:
            ep.replace_path_prefix(old_folder, new_folder)
            ep.path = new_folder
        self.fs.remove_empty_dirs(show.path, keep=(self.settings.trash_folder,))
        for ep in sharing:
            self._saved(ep)
        return report

    # ------------------------------------------------------------------
    # Materialize / sweep
    # ------------------------------------------------------------------

    def _materialize(self, commands: list[DestinationFile], report: RenameReport) -> list[MediaFile]:
        """Execute *commands*; returns the needed files (sources of failed ones)."""
        needed: list[MediaFile] = []
        for dest in commands:
            source, target = dest.source, dest.target
            if same_path(source.path, target.path):
                needed.append(target)
                report.add(_result(dest, True, skip_reason="Already named correctly"))
                continue

            try:
                if dest.operation is FileOperation.MOVE:
                    self.fs.move_file(source.path, target.path)
                else:
                    self.fs.copy_file(source.path, target.path)
            except FileOperationError as e:
                log.error("could not %s %s -> %s: %s", dest.operation.value, source.path, target.path, e)
                self.messages.push(Message(
                    MessageLevel.ERROR, source.path.name, MSG_FAILED_RENAME, (source.filename,)
                ))
                report.add(_result(dest, False, error=str(e)))
                needed.append(source)
                continue

            report.add(_result(dest, True))
            needed.append(target)
            if source.type is MediaFileType.SUBTITLE and source.extension.lower() == "sub":
                self._move_idx(source.path, target.path)
        return needed

    def _move_idx(self, sub: Path, target: Path) -> None:
        """Move the .idx belonging to a .sub along with it; failures are only logged."""
        idx = sub.with_suffix(".idx")
        if not self.fs.exists(idx):
            return
        try:
            self.fs.move_file(idx, target.with_suffix(".idx"))
        except FileOperationError as e:
            log.warning("could not move %s: %s", idx, e)

    def _sweep(self, show: Show, cleanup: list[MediaFile], needed: list[MediaFile], report: RenameReport) -> None:
        """Soft delete every file of *cleanup* that is not needed any more."""
        needed_keys = {mf.key for mf in needed}
        for mf in cleanup:
            if mf.key in needed_keys or not self.fs.exists(mf.path):
                continue
            # case-only renames leave the old spelling pointing at the new file
            if any(self.fs.is_same_file(mf.path, n.path) for n in needed):
                continue
            try:
                if self.settings.enable_trash:
                    self.fs.delete_with_backup(mf.path, show.data_source, self.settings.trash_folder)
                else:
                    self.fs.delete(mf.path)
            except FileOperationError as e:
                log.warning("could not delete %s: %s", mf.path, e)
                report.add(RenameResult(str(mf.path), "", False, error=str(e), file_type=mf.type.value))
                continue
            log.debug("removed obsolete %s", mf.path)
            self.fs.remove_dir_if_empty(mf.path.parent)

    def _saved(self, entity: Any) -> None:
        pending = getattr(self._local, "pending", None)
        if pending is None:
            self.on_saved(entity)
        elif not any(entity is p for p in pending):
            pending.append(entity)

    # ------------------------------------------------------------------
    # Image cache
    # ------------------------------------------------------------------

    def _invalidate(self, graphics: list[MediaFile]) -> None:
        for mf in graphics:
            self.image_cache.invalidate(mf)

    def _cache(self, graphics: list[MediaFile]) -> None:
        if not self.settings.image_cache:
            return
        for mf in graphics:
            self.image_cache.cache(mf)


def rename_show(show: Show, settings: RenamerSettings | None = None, **collaborators) -> RenameReport:
    """Rename a whole show; *collaborators* are passed to :class:`Renamer`."""
    return Renamer(settings, **collaborators).rename_show(show)


def rename_episode(episode: Episode, settings: RenamerSettings | None = None, **collaborators) -> RenameReport:
    """Rename one episode; *collaborators* are passed to :class:`Renamer`."""
    return Renamer(settings, **collaborators).rename_episode(episode)
