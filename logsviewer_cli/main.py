import click

from logsviewer import __version__
from .commands.show_config import show_config
from .commands.tail import tail

@click.group()
@click.version_option(version=__version__)
def cli():
    """logsviewer - follow structured JSON logs"""
    pass

cli.add_command(tail)
cli.add_command(show_config)

if __name__ == "__main__":
    cli()
