from .loader import ConfigOverrides, load_config
from .schema import LogsViewerConfig, ParserConfig
