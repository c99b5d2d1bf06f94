import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _frozen(mapping: Optional[Mapping]) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class LogEntry:
    """A decoded JSON log line coming from a tailed file."""

    source_path: str
    raw_line: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    timestamp: Optional[datetime] = None
    timestamp_text: str = ""
    message: str = ""
    extras: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "fields", _frozen(self.fields))
        object.__setattr__(self, "extras", _frozen(self.extras))

    def pretty_json(self) -> str:
        """Indented rendering of the raw line, or the raw line if it no longer decodes."""
        if not self.raw_line:
            return ""
        try:
            decoded = json.loads(self.raw_line)
        except ValueError:
            return self.raw_line
        return json.dumps(decoded, indent=2, ensure_ascii=False)

    def display_timestamp(self) -> str:
        if self.timestamp is not None:
            return self.timestamp.astimezone().strftime(DISPLAY_TIME_FORMAT)
        return self.timestamp_text

    def display_message(self) -> str:
        # Consumers fall back to the raw line when no message was extracted
        return self.message or self.raw_line

    def extra_value(self, name: str) -> str:
        if not name:
            return ""
        return self.extras.get(name, "")


class ErrorCause(str, Enum):
    TRANSIENT_ABSENCE = "transient_absence"
    IO_FAILURE = "io_failure"
    WATCH_SETUP_FAILURE = "watch_setup_failure"
    PARSE_ERROR = "parse_error"


@dataclass(frozen=True)
class ErrorEvent:
    source_path: str
    cause: ErrorCause
    message: str

    def __str__(self) -> str:
        return self.message
