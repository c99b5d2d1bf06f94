import asyncio
from enum import Enum
from typing import AsyncIterator, Generic, Iterable, List, Optional, Tuple, TypeVar

from .cursor import Cursor, LineBatch
from .observer import (
    ChangeKind,
    ChangeSource,
    PollingChangeSource,
    Subscription,
    WatchdogChangeSource,
    wait_for_reappearance,
)
from .reader import read_all, read_incremental
from ..config.defaults import (
    DEFAULT_ENTRY_BUFFER,
    DEFAULT_ERROR_BUFFER,
    DEFAULT_MAX_LINE_BYTES,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REAPPEAR_INTERVAL,
)
from ..config.schema import ParserConfig
from ..errors import ParseError, WatchSetupError
from ..models import ErrorCause, ErrorEvent, LogEntry
from ..parser.base import EntryParser
from ..parser.json_entry import JsonEntryParser
from ..utils.logging import get_logger

logger = get_logger("tailer")

T = TypeVar("T")


class TailStream(Generic[T]):
    """Bounded many-producer, single-consumer stream.

    put() blocks while the stream is full. Iteration ends once the stream is
    closed and everything buffered before that has been consumed.
    """

    def __init__(self, maxsize: int):
        self._queue: "asyncio.Queue[T]" = asyncio.Queue(maxsize)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def put(self, item: T):
        if self.closed:
            raise RuntimeError("put on closed stream")
        await self._queue.put(item)

    def close(self):
        self._closed.set()

    async def get(self) -> Optional[T]:
        """Next item, or None once the stream has ended."""
        try:
            return await self.__anext__()
        except StopAsyncIteration:
            return None

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        while True:
            if not self._queue.empty():
                return self._queue.get_nowait()
            if self.closed:
                raise StopAsyncIteration

            getter = asyncio.ensure_future(self._queue.get())
            closer = asyncio.ensure_future(self._closed.wait())
            try:
                await asyncio.wait({getter, closer}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                for waiter in (getter, closer):
                    if not waiter.done():
                        waiter.cancel()
            if getter.done() and not getter.cancelled():
                return getter.result()


class WorkerState(Enum):
    INIT = "init"
    WATCHING = "watching"
    POLLING = "polling"
    TERMINAL = "terminal"


_TICK = object()


class FileWorker:
    """Tails one file and publishes its entries and errors."""

    def __init__(
        self,
        path: str,
        parser: EntryParser,
        entries: TailStream[LogEntry],
        errors: TailStream[ErrorEvent],
        change_source: ChangeSource,
        tail_lines: int = 0,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        reappear_interval: float = DEFAULT_REAPPEAR_INTERVAL,
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    ):
        self.path = path
        self.parser = parser
        self.entries = entries
        self.errors = errors
        self.change_source = change_source
        self.tail_lines = tail_lines
        self.poll_interval = poll_interval
        self.reappear_interval = reappear_interval
        self.cursor = Cursor(max_line_bytes=max_line_bytes)
        self.state = WorkerState.INIT

    async def run(self):
        logger.info(f"Tailing {self.path} with the {self.parser.name} parser")
        subscription = await self._subscribe()
        try:
            await self._initial_read()
            self.state = WorkerState.WATCHING if subscription.notifies else WorkerState.POLLING
            await self._watch(subscription)
        except asyncio.CancelledError:
            logger.info(f"Stopped tailing {self.path}")
            raise
        finally:
            self.state = WorkerState.TERMINAL
            subscription.close()

    async def _subscribe(self) -> Subscription:
        try:
            return self.change_source.subscribe(self.path)
        except WatchSetupError as e:
            logger.warning(f"{e}; falling back to polling")
            await self._report(ErrorCause.WATCH_SETUP_FAILURE, str(e))
            return PollingChangeSource().subscribe(self.path)

    async def _watch(self, subscription: Subscription):
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.poll_interval
        while True:
            event = await self._next_trigger(subscription, next_tick - loop.time())

            if event is _TICK:
                next_tick = loop.time() + self.poll_interval
                await self._read_new()
            elif event is None:
                logger.warning(f"Notifications for {self.path} closed; polling only")
                self.state = WorkerState.POLLING
            elif event.kind is ChangeKind.WRITE:
                await self._read_new()
            else:
                logger.debug(f"{event.kind.value} event on {self.path}, waiting for file")
                self.cursor.reset()
                await wait_for_reappearance(self.path, self.reappear_interval)
                await self._read_new()

    async def _next_trigger(self, subscription: Subscription, timeout: float):
        if self.state is WorkerState.POLLING:
            await asyncio.sleep(max(timeout, 0))
            return _TICK
        if timeout <= 0:
            return _TICK
        try:
            return await asyncio.wait_for(subscription.get(), timeout)
        except asyncio.TimeoutError:
            return _TICK

    async def _initial_read(self):
        batch = await self._read(read_all, "initial read")
        if batch is None:
            return

        lines = [line for line in batch.lines if line]
        if self.tail_lines > 0 and len(lines) > self.tail_lines:
            lines = lines[-self.tail_lines:]
        await self._publish(lines)

    async def _read_new(self):
        batch = await self._read(read_incremental, "tail")
        if batch is not None:
            await self._publish(line for line in batch.lines if line)

    async def _read(self, read, action: str) -> Optional[LineBatch]:
        try:
            batch = await asyncio.to_thread(read, self.path, self.cursor)
        except FileNotFoundError:
            logger.debug(f"{self.path} is absent, retrying later")
            return None
        except OSError as e:
            logger.error(f"{action} {self.path}: {e}")
            await self._report(ErrorCause.IO_FAILURE, f"{action} {self.path}: {e}")
            return None
        except Exception as e:
            logger.exception(f"Unexpected error during {action} of {self.path}")
            await self._report(ErrorCause.IO_FAILURE, f"{action} {self.path}: {e}")
            return None

        for _ in range(batch.oversized):
            await self._report(
                ErrorCause.IO_FAILURE,
                f"{action} {self.path}: line exceeds {self.cursor.max_line_bytes} bytes",
            )
        return batch

    async def _publish(self, lines: Iterable[str]):
        for line in lines:
            try:
                entry = self.parser.parse(self.path, line)
            except ParseError as e:
                await self._report(ErrorCause.PARSE_ERROR, str(e))
                continue
            await self.entries.put(entry)

    async def _report(self, cause: ErrorCause, message: str):
        await self.errors.put(ErrorEvent(source_path=self.path, cause=cause, message=message))


class Tailer:
    """Streams log entries from a set of files.

    One FileWorker task runs per file. Entries and errors from every worker
    are merged into two bounded streams which close once all workers have
    stopped.
    """

    def __init__(
        self,
        files: Iterable[str],
        parser_config: Optional[ParserConfig] = None,
        tail_lines: int = 0,
        *,
        parser: Optional[EntryParser] = None,
        change_source: Optional[ChangeSource] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        reappear_interval: float = DEFAULT_REAPPEAR_INTERVAL,
        entry_buffer: int = DEFAULT_ENTRY_BUFFER,
        error_buffer: int = DEFAULT_ERROR_BUFFER,
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    ):
        self.files: List[str] = list(dict.fromkeys(files))
        self.parser = parser or JsonEntryParser(parser_config or ParserConfig())
        self.tail_lines = tail_lines
        self.change_source = change_source or WatchdogChangeSource()
        self.poll_interval = poll_interval
        self.reappear_interval = reappear_interval
        self.entry_buffer = entry_buffer
        self.error_buffer = error_buffer
        self.max_line_bytes = max_line_bytes

        self.workers: List[FileWorker] = []
        self._cancel: Optional[asyncio.Event] = None
        self._tasks: List["asyncio.Task[None]"] = []
        self._supervisor: Optional["asyncio.Task[None]"] = None

    def start(
        self, cancel: Optional[asyncio.Event] = None
    ) -> Tuple[TailStream[LogEntry], TailStream[ErrorEvent]]:
        """Begin tailing until cancel is set (or stop() is called)."""
        if self._supervisor is not None:
            raise RuntimeError("Tailer already started")

        self._cancel = cancel or asyncio.Event()
        entries: TailStream[LogEntry] = TailStream(self.entry_buffer)
        errors: TailStream[ErrorEvent] = TailStream(self.error_buffer)

        for path in self.files:
            worker = FileWorker(
                path,
                self.parser,
                entries,
                errors,
                self.change_source,
                tail_lines=self.tail_lines,
                poll_interval=self.poll_interval,
                reappear_interval=self.reappear_interval,
                max_line_bytes=self.max_line_bytes,
            )
            self.workers.append(worker)
            self._tasks.append(asyncio.create_task(worker.run(), name=f"tail:{path}"))

        self._supervisor = asyncio.create_task(self._supervise(entries, errors), name="tail:supervisor")
        return entries, errors

    def stop(self):
        if self._cancel is not None:
            self._cancel.set()

    async def wait_closed(self):
        if self._supervisor is not None:
            await self._supervisor

    async def _supervise(self, entries: TailStream[LogEntry], errors: TailStream[ErrorEvent]):
        cancelled = asyncio.ensure_future(self._cancel.wait())
        pending = set(self._tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(
                    pending | {cancelled}, return_when=asyncio.FIRST_COMPLETED
                )
                pending.discard(cancelled)
                if cancelled in done:
                    break
        finally:
            cancelled.cancel()
            for task in self._tasks:
                task.cancel()
            try:
                results = await asyncio.gather(*self._tasks, return_exceptions=True)
                for worker, result in zip(self.workers, results):
                    if isinstance(result, Exception):
                        logger.error(f"Worker for {worker.path} failed: {result!r}")
            finally:
                entries.close()
                errors.close()
