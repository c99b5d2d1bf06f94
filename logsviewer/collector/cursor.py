from dataclasses import dataclass, field
from typing import List

from ..config.defaults import DEFAULT_MAX_LINE_BYTES


@dataclass
class LineBatch:
    lines: List[str] = field(default_factory=list)
    oversized: int = 0  # lines dropped by the length guard


def _decode_line(raw: bytes) -> str:
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode("utf-8", errors="replace")


@dataclass
class Cursor:
    """Read position in one file plus the bytes of a not yet terminated line.

    offset counts every byte consumed from the file, including the bytes
    held in pending. It only goes backwards through reset().
    """

    offset: int = 0
    pending: bytearray = field(default_factory=bytearray)
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES
    # Set while skipping the rest of a line that exceeded max_line_bytes
    discarding: bool = False

    def reset(self):
        self.offset = 0
        self.pending = bytearray()
        self.discarding = False

    def feed(self, data: bytes, batch: LineBatch) -> LineBatch:
        """Split data into lines, appending completed ones to batch."""
        start = 0
        while True:
            end = data.find(b"\n", start)
            if end == -1:
                self._hold(data[start:], batch)
                return batch

            if self.discarding:
                self.discarding = False
            else:
                self.pending += data[start:end]
                if len(self.pending) > self.max_line_bytes:
                    batch.oversized += 1
                else:
                    batch.lines.append(_decode_line(bytes(self.pending)))
                self.pending = bytearray()
            start = end + 1

    def flush(self, batch: LineBatch) -> LineBatch:
        """Emit the unterminated remainder as a final line and clear pending."""
        if self.pending and not self.discarding:
            batch.lines.append(_decode_line(bytes(self.pending)))
        self.pending = bytearray()
        self.discarding = False
        return batch

    def _hold(self, tail: bytes, batch: LineBatch):
        if self.discarding or not tail:
            return
        self.pending += tail
        if len(self.pending) > self.max_line_bytes:
            batch.oversized += 1
            self.pending = bytearray()
            self.discarding = True
