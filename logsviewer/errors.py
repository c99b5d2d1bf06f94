class LogsViewerError(Exception):
    """Base class for errors raised by the tailing core."""


class ParseError(LogsViewerError):
    """A line could not be decoded into a JSON object."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"parse {path}: {reason}")


class WatchSetupError(LogsViewerError):
    """The change-notification mechanism for a file could not be established."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"watch {path}: {reason}")
