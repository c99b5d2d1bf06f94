"""
File reads for the tailer.

Both reads raise FileNotFoundError unchanged when the file is missing so the
caller can treat it as a transient absence; any other OSError is a real
I/O failure.
"""
import os
from pathlib import Path
from typing import Union

from .cursor import Cursor, LineBatch
from ..utils.logging import get_logger

logger = get_logger("reader")

CHUNK_SIZE = 64 * 1024

PathLike = Union[str, Path]


def read_all(path: PathLike, cursor: Cursor) -> LineBatch:
    """Read the whole file, leaving the cursor at end of file.

    An unterminated final line is returned as a line as well.
    """
    batch = LineBatch()
    with open(path, "rb") as f:
        cursor.reset()
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            cursor.offset += len(chunk)
            cursor.feed(chunk, batch)
    return cursor.flush(batch)


def read_incremental(path: PathLike, cursor: Cursor) -> LineBatch:
    """Read everything appended since the cursor's offset.

    A file smaller than the offset has been truncated or replaced: the cursor
    is reset and the file is read again from the start.
    """
    batch = LineBatch()
    with open(path, "rb") as f:
        size = os.fstat(f.fileno()).st_size
        if size < cursor.offset:
            logger.info(f"Truncation detected on {path} ({size} < {cursor.offset}), reading from start")
            cursor.reset()

        f.seek(cursor.offset)
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            cursor.offset += len(chunk)
            cursor.feed(chunk, batch)
    return batch
