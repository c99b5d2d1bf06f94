"""
Change notifications for tailed files.

A ChangeSource hands out one Subscription per file. WatchdogChangeSource
watches the file's parent directory with a watchdog Observer and forwards
the events naming the file; PollingChangeSource never notifies and leaves
the tailer to its timer.
"""
import asyncio
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from ..errors import WatchSetupError
from ..utils.logging import get_logger

logger = get_logger("observer")


class ChangeKind(Enum):
    WRITE = "write"
    CREATE = "create"
    REMOVE = "remove"
    RENAME = "rename"


@dataclass(frozen=True)
class ChangeEvent:
    path: str
    kind: ChangeKind


def normalize_path(path) -> str:
    return os.path.normpath(os.path.abspath(os.fsdecode(path)))


_KIND_BY_EVENT_TYPE = {
    EVENT_TYPE_MODIFIED: ChangeKind.WRITE,
    EVENT_TYPE_CREATED: ChangeKind.CREATE,
    EVENT_TYPE_DELETED: ChangeKind.REMOVE,
    EVENT_TYPE_MOVED: ChangeKind.RENAME,
}


def classify_event(event: FileSystemEvent, path: str) -> Optional[ChangeKind]:
    """Map a watchdog event to a ChangeKind if it names path, else None."""
    if event.is_directory:
        return None
    kind = _KIND_BY_EVENT_TYPE.get(event.event_type)
    if kind is None:
        return None

    if normalize_path(event.src_path) == path:
        return kind
    # A file renamed onto the watched path replaces it
    dest_path = getattr(event, "dest_path", "")
    if kind is ChangeKind.RENAME and dest_path and normalize_path(dest_path) == path:
        return kind
    return None


class Subscription(ABC):
    # False for subscriptions that never deliver events
    notifies = True

    def __init__(self, path: str):
        self.path = path
        self._queue: "asyncio.Queue[Optional[ChangeEvent]]" = asyncio.Queue()
        self._closed = False

    async def get(self) -> Optional[ChangeEvent]:
        """Wait for the next event. None means the channel is closed."""
        if self._closed:
            return None
        return await self._queue.get()

    def publish(self, event: ChangeEvent):
        if not self._closed:
            self._queue.put_nowait(event)

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)
        self._stop()

    @abstractmethod
    def _stop(self):
        pass


class ChangeSource(ABC):
    name = "base"

    @abstractmethod
    def subscribe(self, path: str) -> Subscription:
        """Start observing path. Raises WatchSetupError on failure."""
        pass


class PollingSubscription(Subscription):
    notifies = False

    def _stop(self):
        pass


class PollingChangeSource(ChangeSource):
    name = "polling"

    def subscribe(self, path: str) -> Subscription:
        return PollingSubscription(normalize_path(path))


class _PathEventHandler(FileSystemEventHandler):
    """Runs on the observer thread and forwards matching events to the loop."""

    def __init__(self, subscription: "WatchdogSubscription", loop: asyncio.AbstractEventLoop):
        self.subscription = subscription
        self.loop = loop

    def on_any_event(self, event: FileSystemEvent):
        kind = classify_event(event, self.subscription.path)
        if kind is None:
            return
        try:
            self.loop.call_soon_threadsafe(
                self.subscription.publish, ChangeEvent(self.subscription.path, kind)
            )
        except RuntimeError:
            # Event loop already closed during shutdown
            logger.debug(f"Dropped {kind.value} event for {self.subscription.path}")


class WatchdogSubscription(Subscription):
    def __init__(self, path: str, observer: Observer):
        super().__init__(path)
        self.observer = observer

    async def get(self) -> Optional[ChangeEvent]:
        if not self._closed and not self.observer.is_alive():
            logger.warning(f"Observer for {self.path} stopped")
            self.close()
        return await super().get()

    def _stop(self):
        # The observer thread is a daemon; stop() without join keeps shutdown prompt
        self.observer.stop()


class WatchdogChangeSource(ChangeSource):
    name = "watchdog"

    def subscribe(self, path: str) -> Subscription:
        path = normalize_path(path)
        directory = os.path.dirname(path)
        if not os.path.isdir(directory):
            raise WatchSetupError(path, f"directory {directory} does not exist")

        loop = asyncio.get_running_loop()
        observer = Observer()
        subscription = WatchdogSubscription(path, observer)
        try:
            observer.schedule(_PathEventHandler(subscription, loop), directory, recursive=False)
            observer.start()
        except OSError as e:
            raise WatchSetupError(path, str(e))

        logger.debug(f"Watching {directory} for changes to {path}")
        return subscription


async def wait_for_reappearance(path: str, interval: float):
    """Block until path exists again, checking every interval seconds."""
    while not os.path.exists(path):
        await asyncio.sleep(interval)
