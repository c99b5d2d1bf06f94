from abc import ABC, abstractmethod

from ..models import LogEntry


class EntryParser(ABC):
    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def parse(self, path: str, line: str) -> LogEntry:
        """Parse one log line read from path into a structured entry.

        Raises ParseError when the line cannot be interpreted.
        """
        pass
