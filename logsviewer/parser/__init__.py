from .base import EntryParser
from .json_entry import FILE_FIELD, JsonEntryParser
