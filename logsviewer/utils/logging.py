import logging
import sys
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "WARNING", log_file: Optional[Path] = None):
    """
    Configure logging with Rich for console output
    and standard formatting for file output.

    Console output goes to stderr so it never interleaves with
    entries printed on stdout.
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)

    if os.environ.get("NO_RICH_LOGGING"):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers = [handler]
    else:
        handlers = [RichHandler(console=Console(stderr=True), rich_tracebacks=True, markup=False)]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )

    # Suppress noisy libraries
    logging.getLogger("watchdog").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str):
    return logging.getLogger(f"logsviewer.{name}")
