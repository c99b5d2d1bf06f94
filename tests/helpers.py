import asyncio
import json
from pathlib import Path
from typing import List, Optional

from logsviewer.collector.tailer import TailStream

FAST_POLL = 0.05


def json_line(index: int, **extra) -> str:
    record = {"timestamp": 1700000000 + index, "message": f"line {index}", "level": "info"}
    record.update(extra)
    return json.dumps(record)


def append_lines(path: Path, lines: List[str], mode: str = "a"):
    with open(path, mode) as f:
        for line in lines:
            f.write(line + "\n")


async def collect(stream: TailStream, count: int, timeout: float = 5.0) -> list:
    """Take exactly count items from stream (fewer if it ends first)."""
    items = []

    async def take():
        while len(items) < count:
            item = await stream.get()
            if item is None:
                return
            items.append(item)

    await asyncio.wait_for(take(), timeout)
    return items


async def expect_nothing(stream: TailStream, wait: float = 0.3) -> Optional[object]:
    """Return the next item if one arrives within wait, else None."""
    try:
        return await asyncio.wait_for(stream.get(), wait)
    except asyncio.TimeoutError:
        return None
