import asyncio
import signal
from collections import deque
from pathlib import Path
from typing import Callable, Deque, Optional

from . import __version__
from .collector.observer import ChangeSource
from .collector.tailer import Tailer, TailStream
from .config.schema import LogsViewerConfig
from .models import ErrorEvent, LogEntry
from .utils.logging import setup_logging, get_logger

logger = get_logger("viewer")

EntryHandler = Callable[[LogEntry], None]
ErrorHandler = Callable[[ErrorEvent], None]


class LogsViewer:
    """Runs a Tailer for the configured files and hands its output to callbacks.

    The most recent max_entries entries are kept in memory for consumers
    that need a scrollback.
    """

    def __init__(
        self,
        config: LogsViewerConfig,
        on_entry: EntryHandler,
        on_error: ErrorHandler,
        change_source: Optional[ChangeSource] = None,
    ):
        self.config = config
        self.on_entry = on_entry
        self.on_error = on_error

        settings = config.tailer
        self.tailer = Tailer(
            config.files,
            config.parser,
            config.tail_lines,
            change_source=change_source,
            poll_interval=settings.poll_interval,
            reappear_interval=settings.reappear_interval,
            entry_buffer=settings.entry_buffer,
            error_buffer=settings.error_buffer,
            max_line_bytes=settings.max_line_bytes,
        )
        self.recent: Deque[LogEntry] = deque(maxlen=config.max_entries)
        self.entry_count = 0
        self.error_count = 0

    async def run(self):
        """Main loop: returns once both streams have closed."""
        logger.info(f"Starting logsviewer v{__version__}")
        logger.info(f"Files: {', '.join(self.tailer.files)}")

        entries, errors = self.tailer.start()
        await asyncio.gather(
            self._drain_entries(entries),
            self._drain_errors(errors),
        )
        logger.info(f"Stopped after {self.entry_count} entries and {self.error_count} errors")

    def shutdown(self):
        self.tailer.stop()

    async def _drain_entries(self, entries: TailStream[LogEntry]):
        async for entry in entries:
            self.entry_count += 1
            self.recent.append(entry)
            self.on_entry(entry)

    async def _drain_errors(self, errors: TailStream[ErrorEvent]):
        async for error in errors:
            self.error_count += 1
            self.on_error(error)


def run_viewer(config: LogsViewerConfig, on_entry: EntryHandler, on_error: ErrorHandler) -> LogsViewer:
    """Run a LogsViewer in a fresh event loop until SIGINT or SIGTERM."""
    log_file = Path(config.logging.file) if config.logging.file else None
    setup_logging(config.logging.level, log_file)

    viewer = LogsViewer(config, on_entry, on_error)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    # Signal handling
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, viewer.shutdown)

    try:
        loop.run_until_complete(viewer.run())
    finally:
        loop.run_until_complete(loop.shutdown_default_executor())
        loop.close()
    return viewer
