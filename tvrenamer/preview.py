"""Renamer preview: what a rename pass would do, without touching the disk."""
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .filesystem import same_path
from .models import Episode, MediaFile, Show
from .planner import plan_disc_episode, plan_episode, plan_season, plan_show, show_folder_name
from .settings import RenamerSettings

log = logging.getLogger(__name__)


@dataclass
class PreviewContainer:
    """Old and new file layout of a show."""
    show: Show
    old_path: Path
    new_path: Path
    old_files: list[MediaFile] = field(default_factory=list)
    new_files: list[MediaFile] = field(default_factory=list)
    needs_rename: bool = False

    @property
    def removed_files(self) -> list[MediaFile]:
        """Files that would disappear."""
        new = set(self.new_files)
        return [mf for mf in self.old_files if mf not in new]

    @property
    def added_files(self) -> list[MediaFile]:
        """Files that would be created."""
        old = set(self.old_files)
        return [mf for mf in self.new_files if mf not in old]


class RenamerPreview:
    """Runs the planner against a clone of a show."""

    def __init__(self, show: Show, settings: RenamerSettings | None = None):
        self.show = show
        self.settings = settings or RenamerSettings()

    def generate(self) -> PreviewContainer:
        """
        Compute the preview.

        The show is cloned and, when its folder would be renamed, the clone
        is rebased onto the new folder first; the original show is never
        modified.

        Returns:
            PreviewContainer with the current and the planned files
        """
        settings = self.settings
        clone = self.show.clone()
        old_path = clone.path
        new_path = old_path if settings.templates_empty else show_folder_name(clone, settings)

        if not same_path(old_path, new_path):
            clone.replace_path_prefix(old_path, new_path)
            clone.path = new_path

        container = PreviewContainer(show=self.show, old_path=old_path, new_path=new_path)
        container.old_files = clone.all_media_files()

        if settings.templates_empty:
            container.new_files = list(container.old_files)
        else:
            new_files: list[MediaFile] = []
            new_files.extend(self._episode_files(clone))
            new_files.extend(d.target for d in plan_show(clone, settings))
            for season in sorted(clone.seasons, key=lambda s: s.number):
                new_files.extend(d.target for d in plan_season(season, settings))
            container.new_files = list(dict.fromkeys(new_files))

        container.needs_rename = (
            not same_path(old_path, new_path)
            or set(container.old_files) != set(container.new_files)
        )
        log.debug("preview of '%s': needs rename = %s", self.show.title, container.needs_rename)
        return container

    def _episode_files(self, show: Show) -> list[MediaFile]:
        settings = self.settings
        skip_episodes = not settings.filename_template.strip() and not settings.season_folder_template.strip()

        files: list[MediaFile] = []
        handled: set[str] = set()
        for episode in sorted(show.episodes, key=Episode.sort_key):
            video = episode.main_video_file
            if video is not None:
                if video.key in handled:
                    continue
                handled.add(video.key)

            # invalid episodes are left alone by the renamer
            if skip_episodes or episode.season < 0 or episode.episode < 0:
                files.extend(episode.media_files)
            elif episode.disc:
                planned = plan_disc_episode(episode, settings)
                if planned is None:
                    files.extend(episode.media_files)
                else:
                    _, old_folder, new_folder = planned
                    files.extend(mf.replace_path_prefix(old_folder, new_folder) for mf in episode.media_files)
            else:
                files.extend(d.target for d in plan_episode(episode, settings))
        return files
