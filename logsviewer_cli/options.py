import functools
from pathlib import Path
import click

from logsviewer.config.loader import ConfigOverrides, load_config


def config_options(command):
    """Options shared by every command that resolves a configuration."""

    @click.argument("paths", nargs=-1, type=click.Path(dir_okay=False))
    @click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False, path_type=Path),
                  help="Path to configuration file")
    @click.option("--file", "-f", "files", multiple=True, help="Log file to follow (repeatable)")
    @click.option("--tail", "tail_lines", type=click.IntRange(min=0), default=None,
                  help="Number of lines to read from the end on startup (0 = all)")
    @click.option("--max-entries", type=click.IntRange(min=1), default=None,
                  help="Maximum number of entries kept in memory")
    @click.option("--timestamp-field", default=None, help="JSON field containing the timestamp")
    @click.option("--message-field", default=None, help="JSON field containing the message")
    @click.option("--extra-field", "extra_fields", multiple=True,
                  help="Additional field to show (repeatable, '@file' for the file path)")
    @click.option("--log-level", default=None, help="Level for diagnostic logging")
    @functools.wraps(command)
    def wrapper(paths, config_path, files, tail_lines, max_entries, timestamp_field,
                message_field, extra_fields, log_level, **kwargs):
        overrides = ConfigOverrides(
            files=list(files) + list(paths) or None,
            tail_lines=tail_lines,
            max_entries=max_entries,
            timestamp_field=timestamp_field,
            message_field=message_field,
            extra_fields=list(extra_fields) or None,
            log_level=log_level,
        )
        try:
            config = load_config(config_path, overrides)
        except ValueError as e:
            raise click.ClickException(str(e))
        return command(config, **kwargs)

    return wrapper

