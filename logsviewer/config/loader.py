from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
import yaml
from pydantic import ValidationError

from .schema import LogsViewerConfig
from .defaults import (
    CONFIG_NAME,
    CONFIG_SUFFIXES,
    DEFAULT_EXTRA_FIELDS,
    DEFAULT_MESSAGE_FIELD,
    DEFAULT_TIMESTAMP_FIELD,
    default_config_dirs,
)

# Top-level keys accepted for compatibility with flat config files
_FLAT_PARSER_KEYS = ("timestamp_field", "message_field", "extra_fields")


@dataclass
class ConfigOverrides:
    """Values supplied on the command line; None means "not given"."""

    files: Optional[List[str]] = None
    tail_lines: Optional[int] = None
    max_entries: Optional[int] = None
    timestamp_field: Optional[str] = None
    message_field: Optional[str] = None
    extra_fields: Optional[List[str]] = None
    log_level: Optional[str] = None


class ConfigLoader:
    def __init__(self, config_path: Optional[Path] = None, search_dirs: Optional[Sequence[Path]] = None):
        self.config_path = config_path
        self.search_dirs = list(search_dirs) if search_dirs is not None else default_config_dirs()

    def find(self) -> Optional[Path]:
        """Locate the config file: the explicit path, else the first match in the search dirs."""
        if self.config_path is not None:
            if not self.config_path.exists():
                raise ValueError(f"Config file not found: {self.config_path}")
            return self.config_path

        for directory in self.search_dirs:
            for suffix in CONFIG_SUFFIXES:
                candidate = directory / f"{CONFIG_NAME}{suffix}"
                if candidate.is_file():
                    return candidate
        return None

    def load(self, overrides: Optional[ConfigOverrides] = None) -> LogsViewerConfig:
        """
        Load configuration from YAML file, apply command line overrides and
        validate with the Pydantic schema.
        Returns defaults (plus overrides) if no config file exists.
        """
        raw_config = self._read(self.find())
        if overrides is not None:
            raw_config = apply_overrides(raw_config, overrides)

        try:
            config = LogsViewerConfig(**raw_config)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}")

        config = ensure_defaults(config)
        if not config.files:
            raise ValueError("no log files configured; set via config file or --file flag")
        return config

    def _read(self, path: Optional[Path]) -> Dict[str, Any]:
        if path is None:
            return {}
        try:
            with open(path, "r") as f:
                raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing config file: {e}")
        except OSError as e:
            raise ValueError(f"Error reading config file: {e}")

        if not isinstance(raw_config, dict):
            raise ValueError(f"Error parsing config file: {path} does not contain a mapping")

        parser = dict(raw_config.get("parser") or {})
        for key in _FLAT_PARSER_KEYS:
            if key in raw_config:
                parser.setdefault(key, raw_config.pop(key))
        if parser:
            raw_config["parser"] = parser
        return raw_config


def unique_paths(paths: Sequence[str]) -> List[str]:
    seen = set()
    unique = []
    for path in paths:
        path = path.strip()
        if not path or path in seen:
            continue
        seen.add(path)
        unique.append(path)
    return unique


def apply_overrides(raw_config: Dict[str, Any], overrides: ConfigOverrides) -> Dict[str, Any]:
    merged = dict(raw_config)
    parser = dict(merged.get("parser") or {})

    if overrides.files:
        merged["files"] = overrides.files
    if overrides.tail_lines is not None:
        merged["tail_lines"] = overrides.tail_lines
    if overrides.max_entries is not None:
        merged["max_entries"] = overrides.max_entries
    if overrides.timestamp_field:
        parser["timestamp_field"] = overrides.timestamp_field
    if overrides.message_field:
        parser["message_field"] = overrides.message_field
    if overrides.extra_fields:
        parser["extra_fields"] = overrides.extra_fields
    if overrides.log_level:
        merged["logging"] = {**(merged.get("logging") or {}), "level": overrides.log_level}

    if parser:
        merged["parser"] = parser
    return merged


def ensure_defaults(config: LogsViewerConfig) -> LogsViewerConfig:
    parser = config.parser.model_copy(
        update={
            "timestamp_field": config.parser.timestamp_field or DEFAULT_TIMESTAMP_FIELD,
            "message_field": config.parser.message_field or DEFAULT_MESSAGE_FIELD,
            "extra_fields": list(config.parser.extra_fields) or list(DEFAULT_EXTRA_FIELDS),
        }
    )
    return config.model_copy(update={"parser": parser, "files": unique_paths(config.files)})


def load_config(path: Optional[Path] = None, overrides: Optional[ConfigOverrides] = None) -> LogsViewerConfig:
    """Helper function to load config from a specific path or the default locations."""
    loader = ConfigLoader(path)
    return loader.load(overrides)
