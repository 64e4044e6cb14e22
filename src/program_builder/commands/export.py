"""Export program commands."""

import json

import click

from ..db import ProgramRepository, get_db_path
from .base import async_command, echo_error, echo_success, ensure_initialized


@click.command()
@click.argument("program_id", type=int)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["payload", "form"]),
    default="payload",
    help="payload: the save payload; form: the editable tree with ids",
)
@click.option(
    "--clipboard",
    "-c",
    is_flag=True,
    help="Copy to clipboard instead of printing",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Write to file instead of stdout",
)
@click.pass_context
@async_command
async def export(ctx, program_id: int, format: str, clipboard: bool, output: str | None):
    """Export a program as JSON.

    Examples:
        # Print the save payload
        program-builder export 1

        # Copy to clipboard
        program-builder export 1 --clipboard

        # Save to file
        program-builder export 1 -o my_program.json
    """
    ensure_initialized(ctx)

    repo = ProgramRepository(get_db_path())

    program = await repo.get(program_id)
    if not program:
        echo_error(f"Program ID {program_id} not found")
        ctx.exit(1)

    data = program.to_submission() if format == "payload" else program.to_dict()
    content = json.dumps(data, indent=2)

    if clipboard:
        import pyperclip

        try:
            pyperclip.copy(content)
        except pyperclip.PyperclipException as e:
            echo_error(f"Could not copy to clipboard: {e}")
            ctx.exit(1)
        echo_success("Copied to clipboard!")

    elif output:
        with open(output, "w") as f:
            f.write(content)
        echo_success(f"Exported to {output}")

    else:
        click.echo(content)
