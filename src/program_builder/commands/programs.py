"""Program management commands."""

import click

from ..builder.aggregate import format_duration, program_duration
from ..db import ProgramRepository, get_db_path
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized, format_table, truncate


@click.group()
@click.pass_context
def programs(ctx):
    """Manage saved programs.

    Commands for listing, viewing, and deleting programs.
    """
    ensure_initialized(ctx)


@programs.command(name="list")
@click.pass_context
@async_command
async def list_programs(ctx):
    """List all saved programs."""
    repo = ProgramRepository(get_db_path())

    all_programs = await repo.list_all()

    if not all_programs:
        echo_info("No programs found. Build one with 'program-builder build'")
        return

    headers = ["ID", "Name", "Status", "Workouts", "Exercises", "Created"]
    rows = []

    for prog in all_programs:
        created = prog.created_at.strftime("%Y-%m-%d") if prog.created_at else "N/A"
        rows.append([
            str(prog.id),
            truncate(prog.name),
            prog.status.value,
            str(prog.total_workouts),
            str(prog.total_exercises),
            created,
        ])

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(all_programs)} program(s)")


@programs.command()
@click.argument("program_id", type=int)
@click.pass_context
@async_command
async def show(ctx, program_id: int):
    """Show details of a specific program."""
    repo = ProgramRepository(get_db_path())

    program = await repo.get(program_id)
    if not program:
        echo_error(f"Program ID {program_id} not found")
        ctx.exit(1)

    click.echo()
    click.echo("=" * 60)
    click.echo(f"Program: {program.name} (ID: {program.id})")
    click.echo("=" * 60)
    click.echo()
    click.echo(f"Created: {program.created_at}")
    click.echo(f"Total time: {format_duration(program_duration(program))}")
    click.echo()

    click.echo("Structure:")
    click.echo("-" * 40)
    click.echo(program.get_summary())


@programs.command()
@click.argument("program_id", type=int)
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, program_id: int, force: bool):
    """Delete a program."""
    repo = ProgramRepository(get_db_path())

    program = await repo.get(program_id)
    if not program:
        echo_error(f"Program ID {program_id} not found")
        ctx.exit(1)

    if not force:
        click.echo(f"Program: {program.name}")
        if not click.confirm("Are you sure you want to delete this program?"):
            echo_info("Cancelled")
            return

    await repo.delete(program_id)
    echo_success(f"Program {program_id} deleted")
