"""truckq CLI entry point - assembles all command groups."""
import click

from . import __version__
from .classify_cmd import classify, connected
from .queue_cmd import queue


@click.group()
@click.version_option(version=__version__)
def cli():
    """truckq: offline action queue for the food-truck client."""
    pass


cli.add_command(classify)
cli.add_command(connected)
cli.add_command(queue)


if __name__ == "__main__":
    cli()
