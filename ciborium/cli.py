"""CIBorium command-line interface."""

import click

from ciborium import __version__
from ciborium.commands import cleanup, command, run


@click.group()
@click.version_option(version=__version__, prog_name="ciborium")
def cli() -> None:
    """CIBorium - run each build step in its own docker container.

    The workspace is mounted into every container, so files a step writes
    there stay visible on the host.
    """


cli.add_command(run)
cli.add_command(command)
cli.add_command(cleanup)


if __name__ == "__main__":
    cli()
