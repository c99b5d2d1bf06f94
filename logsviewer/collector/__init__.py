from .cursor import Cursor, LineBatch
from .observer import (
    ChangeEvent,
    ChangeKind,
    ChangeSource,
    PollingChangeSource,
    WatchdogChangeSource,
)
from .tailer import Tailer, TailStream
