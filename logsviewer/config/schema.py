from typing import List, Optional
from pydantic import BaseModel, Field

from .defaults import (
    DEFAULT_ENTRY_BUFFER,
    DEFAULT_ERROR_BUFFER,
    DEFAULT_EXTRA_FIELDS,
    DEFAULT_MAX_ENTRIES,
    DEFAULT_MAX_LINE_BYTES,
    DEFAULT_MESSAGE_FIELD,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REAPPEAR_INTERVAL,
    DEFAULT_TAIL_LINES,
    DEFAULT_TIMESTAMP_FIELD,
)

class ParserConfig(BaseModel):
    timestamp_field: str = DEFAULT_TIMESTAMP_FIELD
    message_field: str = DEFAULT_MESSAGE_FIELD
    extra_fields: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTRA_FIELDS))

    model_config = {"frozen": True}

class TailerSettings(BaseModel):
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    reappear_interval: float = Field(default=DEFAULT_REAPPEAR_INTERVAL, gt=0)
    entry_buffer: int = Field(default=DEFAULT_ENTRY_BUFFER, gt=0)
    error_buffer: int = Field(default=DEFAULT_ERROR_BUFFER, gt=0)
    max_line_bytes: int = Field(default=DEFAULT_MAX_LINE_BYTES, gt=0)

class LoggingConfig(BaseModel):
    level: str = "WARNING"
    file: Optional[str] = None

class LogsViewerConfig(BaseModel):
    files: List[str] = Field(default_factory=list)
    tail_lines: int = Field(default=DEFAULT_TAIL_LINES, ge=0)
    max_entries: int = Field(default=DEFAULT_MAX_ENTRIES, gt=0)
    parser: ParserConfig = Field(default_factory=ParserConfig)
    tailer: TailerSettings = Field(default_factory=TailerSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
