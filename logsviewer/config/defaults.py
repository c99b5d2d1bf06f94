from pathlib import Path
from typing import List

CONFIG_NAME = "logsviewer"
CONFIG_SUFFIXES = (".yml", ".yaml")

DEFAULT_TIMESTAMP_FIELD = "timestamp"
DEFAULT_MESSAGE_FIELD = "message"
DEFAULT_EXTRA_FIELDS = ["level"]

DEFAULT_TAIL_LINES = 200
DEFAULT_MAX_ENTRIES = 1000

DEFAULT_POLL_INTERVAL = 0.4  # seconds
DEFAULT_REAPPEAR_INTERVAL = 0.5  # seconds
DEFAULT_ENTRY_BUFFER = 256
DEFAULT_ERROR_BUFFER = 64
DEFAULT_MAX_LINE_BYTES = 16 * 1024 * 1024  # 16MB


def default_config_dirs() -> List[Path]:
    """Directories searched, in order, when no config file is given."""
    dirs = [Path(".")]
    try:
        home = Path.home()
    except RuntimeError:
        return dirs
    dirs.append(home / ".config" / CONFIG_NAME)
    dirs.append(home / f".{CONFIG_NAME}")
    return dirs
