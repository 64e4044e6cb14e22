"""Initialize project command."""

import click

from ..data.template_loader import get_templates_json_path, seed_templates_from_json
from ..db import get_data_dir, get_db_path, init_db, seed_templates
from .base import async_command, echo_info, echo_success


@click.command()
@async_command
async def init():
    """Initialize the program-builder database.

    This creates the data directory and initializes the SQLite database
    with the required schema and the workout/exercise template library.
    """
    data_dir = get_data_dir()
    db_path = get_db_path(data_dir)

    echo_info(f"Initializing program-builder in {data_dir}")

    await init_db(db_path)
    echo_success("Database initialized")

    # Seed templates from JSON (or fall back to the built-in library)
    json_path = get_templates_json_path()
    if json_path.exists():
        count = await seed_templates_from_json(db_path, json_path)
        echo_success(f"Template library populated ({count} templates from {json_path.name})")
    else:
        count = await seed_templates(db_path)
        echo_success(f"Template library populated ({count} built-in templates)")

    click.echo()
    click.echo("program-builder is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Browse the template library:")
    click.echo("     program-builder templates workouts")
    click.echo()
    click.echo("  2. Build a program:")
    click.echo("     program-builder build")
