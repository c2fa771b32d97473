"""Per-show rename queue.

Rename passes of one show run one after another on a dedicated worker;
different shows run in parallel. A lane whose last queued task finished
is shut down, so idle shows hold no thread.
"""
import itertools
import logging
import threading
import weakref
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from .models import Show

log = logging.getLogger(__name__)


def show_key(show: Show) -> str:
    """Queue key of a show: its data source and folder."""
    return f"{show.data_source}|{show.path}"


class RenameQueue:
    """Funnels every task of a show through one single-worker lane."""

    def __init__(self, thread_name_prefix: str = "tvrenamer"):
        self._lock = threading.Lock()
        self._lanes: dict[str, ThreadPoolExecutor] = {}
        self._pending: dict[str, int] = {}
        # a show keeps its key after a pass moved its folder
        self._keys: weakref.WeakKeyDictionary[Show, str] = weakref.WeakKeyDictionary()
        self._prefix = thread_name_prefix
        self._counter = itertools.count()
        self._closed = False

    def submit(self, show: Show, fn: Callable[..., Any], *args, **kwargs) -> Future:
        """
        Queue *fn* for *show*.

        Args:
            show: Show the task works on; the same object always lands
                on the same lane, even once its folder was renamed
            fn: Callable run on the show's worker

        Returns:
            Future of the call
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("rename queue is shut down")
            key = self._keys.setdefault(show, show_key(show))
            lane = self._lanes.get(key)
            if lane is None:
                lane = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{self._prefix}-{next(self._counter)}")
                self._lanes[key] = lane
                log.debug("new rename lane for %s", key)
            future = lane.submit(fn, *args, **kwargs)
            self._pending[key] = self._pending.get(key, 0) + 1
        # runs right away when the task is already done, hence outside the lock
        future.add_done_callback(lambda _: self._task_done(key))
        return future

    def _task_done(self, key: str) -> None:
        with self._lock:
            self._pending[key] -= 1
            if self._pending[key]:
                return
            del self._pending[key]
            lane = self._lanes.pop(key)
        lane.shutdown(wait=False)
        log.debug("rename lane for %s retired", key)

    def submit_rename(self, show: Show, renamer) -> Future:
        """Queue a full rename pass of *show* with a :class:`~tvrenamer.renamer.Renamer`."""
        return self.submit(show, renamer.rename_show, show)

    @property
    def lanes(self) -> int:
        """Number of lanes with queued or running tasks."""
        with self._lock:
            return len(self._lanes)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks; with *wait* block until every lane is drained."""
        with self._lock:
            self._closed = True
            lanes = list(self._lanes.values())
        for lane in lanes:
            lane.shutdown(wait=wait)

    def __enter__(self) -> "RenameQueue":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown(wait=True)
