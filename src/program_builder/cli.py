"""CLI entry point for program-builder."""

import click

from . import __version__
from .commands import build, export, init, programs, serve, templates
from .commands.base import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="program-builder")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """program-builder: compose training programs from workout templates.

    A program holds ordered workouts, each holding ordered exercises with
    their sets. Build programs interactively or through the web API.

    Example usage:

        # Initialize the database and template library
        program-builder init

        # Build a program
        program-builder build

        # View and export programs
        program-builder programs list
        program-builder export 1 --clipboard
    """
    setup_logging(verbose)


# Register commands
main.add_command(init)
main.add_command(templates)
main.add_command(programs)
main.add_command(build)
main.add_command(export)
main.add_command(serve)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
