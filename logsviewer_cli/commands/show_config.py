import click
import yaml
from rich.console import Console
from rich.syntax import Syntax

from logsviewer.config.schema import LogsViewerConfig
from ..options import config_options

console = Console()


@click.command("config")
@config_options
def show_config(config: LogsViewerConfig):
    """Show the resolved configuration."""
    rendered = yaml.safe_dump(config.model_dump(), sort_keys=False)
    console.print(Syntax(rendered, "yaml"))
