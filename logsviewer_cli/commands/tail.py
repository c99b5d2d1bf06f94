from typing import Sequence

import click
from rich.console import Console
from rich.text import Text

from logsviewer.config.schema import LogsViewerConfig
from logsviewer.main import run_viewer
from logsviewer.models import ErrorEvent, LogEntry
from ..options import config_options

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def render_entry(entry: LogEntry, extra_fields: Sequence[str]) -> Text:
    text = Text()
    timestamp = entry.display_timestamp()
    if timestamp:
        text.append(timestamp, style="dim")
        text.append(" ")
    for name in extra_fields:
        value = entry.extra_value(name)
        if value:
            text.append(f"[{value}]", style="cyan")
            text.append(" ")
    text.append(entry.display_message())
    return text


def render_error(error: ErrorEvent) -> Text:
    return Text(f"{error.cause.value}: {error.message}", style="red")


@click.command()
@config_options
def tail(config: LogsViewerConfig):
    """Follow JSON log files and print each entry."""
    extra_fields = config.parser.extra_fields

    viewer = run_viewer(
        config,
        on_entry=lambda entry: console.print(render_entry(entry, extra_fields)),
        on_error=lambda error: err_console.print(render_error(error)),
    )
    err_console.print(
        f"[dim]{viewer.entry_count} entries, {viewer.error_count} errors[/dim]"
    )
