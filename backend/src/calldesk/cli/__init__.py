"""CLI entry points for calldesk."""

import click

from .. import __version__
from .resolve import cli as resolve_cli


@click.group()
@click.version_option(version=__version__, prog_name="calldesk")
def main():
    """calldesk - call-campaign administration tools."""
    pass


main.add_command(resolve_cli, name="resolve")


if __name__ == "__main__":
    main()
