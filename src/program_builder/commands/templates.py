"""Template library commands."""

import click

from ..db import TemplateRepository, get_db_path
from ..models.templates import TemplateKind
from ..utils.template_utils import find_matching_template
from .base import async_command, echo_info, ensure_initialized, format_table, truncate


@click.command()
@click.argument(
    "kind",
    type=click.Choice([k.value for k in TemplateKind]),
    default=TemplateKind.WORKOUTS.value,
)
@click.option("--search", "-s", help="Only show templates whose name contains this text")
@click.option("--page", default=1, type=click.IntRange(min=1), help="Page number")
@click.option("--page-size", default=20, type=click.IntRange(min=1), help="Templates per page")
@click.pass_context
@async_command
async def templates(ctx, kind: str, search: str | None, page: int, page_size: int):
    """List workout or exercise templates.

    Examples:

        program-builder templates workouts

        program-builder templates exercises --search press
    """
    ensure_initialized(ctx)

    repo = TemplateRepository(get_db_path())
    filters = {"search": search} if search else {}
    records = await repo.search(TemplateKind(kind), filters, page, page_size)

    if not records:
        echo_info("No templates found")
        if search:
            everything = await repo.search(TemplateKind(kind), {}, 1, 1000)
            closest = find_matching_template(search, everything, threshold=0.6)
            if closest:
                echo_info(f"Did you mean {closest['name']!r}?")
        return

    if kind == TemplateKind.WORKOUTS.value:
        headers = ["ID", "Name", "Exercises"]
        rows = [
            [r["id"], truncate(r["name"]), str(len(r.get("workoutExercises") or []))]
            for r in records
        ]
    else:
        headers = ["ID", "Name", "Type"]
        rows = [[r["id"], truncate(r["name"]), r.get("type") or "-"] for r in records]

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Page {page}: {len(records)} template(s)")
