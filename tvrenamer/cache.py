"""Image cache collaborators notified about renamed artwork."""
import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import MediaFile

log = logging.getLogger(__name__)

CACHE_FILE = ".image_cache.json"


class ImageCache:
    """Interface of an image cache; the base class keeps nothing."""

    def invalidate(self, media_file: MediaFile) -> None:
        """Forget the cached copy of *media_file*."""

    def cache(self, media_file: MediaFile) -> None:
        """(Re)build the cached copy of *media_file*."""


class NullImageCache(ImageCache):
    """Image cache used when caching is disabled."""


class RecordingImageCache(ImageCache):
    """Remembers every invalidated and cached path, in order."""

    def __init__(self):
        self.invalidated: list[Path] = []
        self.cached: list[Path] = []

    def invalidate(self, media_file: MediaFile) -> None:
        self.invalidated.append(media_file.path)

    def cache(self, media_file: MediaFile) -> None:
        self.cached.append(media_file.path)


class JsonImageCache(ImageCache):
    """Local JSON index of cached artwork (path -> size and mtime)."""

    def __init__(self, cache_dir: Path | None = None):
        """
        Initialize the cache.

        Args:
            cache_dir: Directory to store the index file. Defaults to current directory.
        """
        if cache_dir is None:
            cache_dir = Path.cwd()
        self.cache_path = cache_dir / CACHE_FILE
        self._cache: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        """Load the index from disk."""
        if self.cache_path.exists():
            try:
                with open(self.cache_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                log.warning("image cache index %s unreadable, starting empty: %s", self.cache_path, e)
        return {"images": {}}

    def _save(self) -> None:
        """Save the index to disk."""
        try:
            with open(self.cache_path, 'w', encoding='utf-8') as f:
                json.dump(self._cache, f, indent=2, ensure_ascii=False)
        except OSError as e:
            log.warning("could not write image cache index %s: %s", self.cache_path, e)

    def get(self, media_file: MediaFile) -> dict | None:
        return self._cache["images"].get(media_file.key)

    def invalidate(self, media_file: MediaFile) -> None:
        if self._cache["images"].pop(media_file.key, None) is not None:
            self._save()

    def cache(self, media_file: MediaFile) -> None:
        try:
            stat = os.stat(media_file.path)
        except OSError as e:
            log.debug("not caching %s: %s", media_file.path, e)
            return
        self._cache["images"][media_file.key] = {
            "size": stat.st_size,
            "mtime": stat.st_mtime,
        }
        self._save()

    def clear(self) -> None:
        """Clear all cached entries."""
        self._cache = {"images": {}}
        self._save()
