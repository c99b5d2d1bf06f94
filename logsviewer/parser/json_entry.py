import json
from typing import Any, Dict

from .base import EntryParser
from .timestamps import extract_timestamp
from .values import lookup, to_text
from ..config.schema import ParserConfig
from ..errors import ParseError
from ..models import LogEntry

# Virtual extra field that resolves to the tailed file path
FILE_FIELD = "@file"


def _reject_constant(name: str):
    raise ValueError(f"invalid JSON constant {name}")


class JsonEntryParser(EntryParser):
    """Decodes JSON-object lines and extracts timestamp, message and extras."""

    def __init__(self, config: ParserConfig):
        super().__init__("json")
        self.config = config

    def parse(self, path: str, line: str) -> LogEntry:
        fields = self._decode(path, line)

        timestamp, timestamp_text = extract_timestamp(
            lookup(fields, self.config.timestamp_field)
        )
        return LogEntry(
            source_path=path,
            raw_line=line,
            fields=fields,
            timestamp=timestamp,
            timestamp_text=timestamp_text,
            message=to_text(lookup(fields, self.config.message_field)),
            extras=self._extras(path, fields),
        )

    def _decode(self, path: str, line: str) -> Dict[str, Any]:
        try:
            decoded = json.loads(line, parse_constant=_reject_constant)
        except RecursionError:
            raise ParseError(path, "JSON nesting too deep")
        except ValueError as e:
            raise ParseError(path, str(e))

        if not isinstance(decoded, dict):
            raise ParseError(path, f"expected a JSON object, got {type(decoded).__name__}")
        return decoded

    def _extras(self, path: str, fields: Dict[str, Any]) -> Dict[str, str]:
        extras = {}
        for name in self.config.extra_fields:
            if name == FILE_FIELD:
                extras[name] = path
            else:
                extras[name] = to_text(lookup(fields, name))
        return extras
