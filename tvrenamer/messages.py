"""User facing messages raised while renaming."""
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

log = logging.getLogger(__name__)


class MessageLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class Message:
    """A message for the user; *key* identifies the text, *args* fill it in."""
    level: MessageLevel
    source: Any
    key: str
    args: tuple[str, ...] = field(default_factory=tuple)


class MessageManager:
    """Collects messages and forwards them to subscribers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._messages: list[Message] = []
        self._subscribers: list[Callable[[Message], None]] = []

    def subscribe(self, callback: Callable[[Message], None]) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def push(self, message: Message) -> None:
        with self._lock:
            self._messages.append(message)
            subscribers = list(self._subscribers)
        log.debug("message %s %s %s", message.level.name, message.key, message.args)
        for callback in subscribers:
            callback(message)

    @property
    def messages(self) -> list[Message]:
        with self._lock:
            return list(self._messages)

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()
