"""Interactive program builder command."""

import click
import questionary
from questionary import Style

from ..builder import (
    DragEndEvent,
    NodeKind,
    ProgramBuilder,
    ROOT_CONTAINER_ID,
    format_duration,
    workout_duration,
)
from ..clients import DictFormState, Notification, Severity
from ..db import ProgramRepository, TemplateRepository, get_db_path
from ..models.program import SetType
from .base import async_command, echo_error, echo_info, echo_success, echo_warning, ensure_initialized

# Custom style for the builder prompts
custom_style = Style(
    [
        ("qmark", "fg:#673ab7 bold"),
        ("question", "bold"),
        ("answer", "fg:#f44336 bold"),
        ("pointer", "fg:#673ab7 bold"),
        ("highlighted", "fg:#673ab7 bold"),
        ("selected", "fg:#cc5454"),
        ("separator", "fg:#cc5454"),
        ("instruction", ""),
        ("text", ""),
    ]
)


class EchoNotificationSink:
    """Prints builder notifications to the terminal."""

    def notify(self, notification: Notification) -> None:
        message = notification.message
        if notification.description:
            message += f" ({notification.description})"
        if notification.severity == Severity.SUCCESS:
            echo_success(message)
        elif notification.severity == Severity.ERROR:
            echo_error(message)
        elif notification.severity == Severity.WARNING:
            echo_warning(message)
        else:
            echo_info(message)


class BuildSession:
    """Menu loop around a ProgramBuilder."""

    def __init__(self, builder: ProgramBuilder, programs_repo: ProgramRepository):
        self.builder = builder
        self.programs_repo = programs_repo

    async def run(self) -> None:
        actions = {
            "Show program": self.show,
            "Edit program details": self.edit_details,
            "Add workout": self.add_workout,
            "Add exercise": self.add_exercise,
            "Select workout": self.select_workout,
            "Edit sets": self.edit_sets,
            "Edit notes": self.edit_notes,
            "Move workout": self.move_workout,
            "Move exercise": self.move_exercise,
            "Delete workout": self.delete_workout,
            "Delete exercise": self.delete_exercise,
            "Save": self.save,
        }
        while True:
            choice = await questionary.select(
                "What would you like to do?",
                choices=[*actions, "Quit"],
                style=custom_style,
            ).ask_async()
            if choice is None or choice == "Quit":
                return
            await actions[choice]()

    async def show(self) -> None:
        selection = self.builder.selection.state
        click.echo()
        for workout in self.builder.program.workouts:
            marker = "*" if workout.id == selection.workout_id else " "
            click.echo(
                f"{marker} {workout.order}. {workout.name}"
                f" [{format_duration(workout_duration(workout))}]"
            )
            for ex in workout.exercises:
                marker = "*" if ex.id == selection.exercise_id else " "
                click.echo(
                    f"   {marker} {ex.order}. {ex.name}: {len(ex.sets)} set(s)"
                    f" [{format_duration(ex.total_duration)}]"
                )
        if not self.builder.program.workouts:
            echo_info("No workouts allocated yet")
        click.echo()

    async def edit_details(self) -> None:
        program = self.builder.program
        name = await questionary.text(
            "Program name", default=program.name, style=custom_style
        ).ask_async()
        if name is None:
            return
        description = await questionary.text(
            "Description", default=program.description, style=custom_style
        ).ask_async()
        duration = await self._ask_int("Duration (days)", program.duration_days or 28)
        rotation = await self._ask_int("Rotation (days)", program.rotation_days or 7)
        self.builder.update_program(
            name=name,
            description=description or "",
            duration_days=duration,
            rotation_days=rotation,
        )

    async def add_workout(self) -> None:
        search = await questionary.text("Search workouts (blank for all)", style=custom_style).ask_async()
        if search is None:
            return
        found = await self.builder.search_workouts(search or None)
        if not found:
            echo_warning("No workout templates found")
            return
        template = await questionary.select(
            "Workout template",
            choices=[questionary.Choice(t.name, t) for t in found],
            style=custom_style,
        ).ask_async()
        if template is not None:
            self.builder.add_workout(template)

    async def add_exercise(self) -> None:
        workout = await self._pick_workout("Add exercise to which workout?")
        if workout is None:
            return
        search = await questionary.text("Search exercises (blank for all)", style=custom_style).ask_async()
        if search is None:
            return
        found = await self.builder.search_exercises(search or None)
        if not found:
            echo_warning("No exercise templates found")
            return
        template = await questionary.select(
            "Exercise template",
            choices=[questionary.Choice(t.name, t) for t in found],
            style=custom_style,
        ).ask_async()
        if template is not None:
            self.builder.add_exercise(workout.id, template)

    async def select_workout(self) -> None:
        workout = await self._pick_workout("Select workout")
        if workout is not None:
            self.builder.select_workout(workout.id)

    async def edit_sets(self) -> None:
        exercise = await self._pick_exercise("Edit sets of which exercise?")
        if exercise is None:
            return
        while True:
            exercise = self.builder.get_exercise(exercise.id)
            click.echo(f"\n{exercise.name}: {format_duration(exercise.total_duration)}")
            choices = [
                questionary.Choice(
                    f"Set {s.order}: {s.type.value} {s.value}, break {s.break_time or 0}s", s
                )
                for s in exercise.sets
            ]
            choices += ["Add set", "Done"]
            picked = await questionary.select("Set", choices=choices, style=custom_style).ask_async()
            if picked is None or picked == "Done":
                return
            if picked == "Add set":
                self.builder.add_set(exercise.id)
                continue

            action = await questionary.select(
                "Action", choices=["Edit", "Remove", "Back"], style=custom_style
            ).ask_async()
            if action == "Remove":
                self.builder.remove_set(picked.id)
            elif action == "Edit":
                set_type = await questionary.select(
                    "Type",
                    choices=[questionary.Choice(t.value, t) for t in SetType],
                    default=picked.type.value,
                    style=custom_style,
                ).ask_async()
                value = await self._ask_int("Value (reps or seconds)", int(picked.value))
                break_time = await self._ask_int("Break (seconds)", int(picked.break_time or 0))
                if set_type is None or value is None or break_time is None:
                    continue
                self.builder.update_set(picked.id, type=set_type, value=value, break_time=break_time)

    async def edit_notes(self) -> None:
        target = await questionary.select(
            "Edit notes of", choices=["Workout", "Exercise"], style=custom_style
        ).ask_async()
        if target == "Workout":
            workout = await self._pick_workout("Workout")
            if workout is None:
                return
            note = await questionary.text("Note", default=workout.note, style=custom_style).ask_async()
            if note is not None:
                self.builder.update_workout_note(workout.id, note)
        elif target == "Exercise":
            exercise = await self._pick_exercise("Exercise")
            if exercise is None:
                return
            notes = await questionary.text("Notes", default=exercise.notes, style=custom_style).ask_async()
            if notes is not None:
                self.builder.update_exercise_notes(exercise.id, notes)

    async def move_workout(self) -> None:
        workout = await self._pick_workout("Move which workout?")
        if workout is None:
            return
        target = await self._pick_workout("Drop onto which workout?")
        if target is None:
            return
        self._report_drag(
            self.builder.handle_drag_end(
                DragEndEvent(workout.id, ROOT_CONTAINER_ID, target.id, ROOT_CONTAINER_ID)
            )
        )

    async def move_exercise(self) -> None:
        exercise = await self._pick_exercise("Move which exercise?")
        if exercise is None:
            return
        source_workout_id = self.builder.store.parent_id(NodeKind.EXERCISE, exercise.id)
        destination = await self._pick_workout("Into which workout?")
        if destination is None:
            return
        siblings = [ex for ex in destination.exercises if ex.id != exercise.id]
        choices = [questionary.Choice(f"Before {ex.order}. {ex.name}", ex.id) for ex in siblings]
        choices.append(questionary.Choice("At the end", destination.id))
        target_id = await questionary.select("Position", choices=choices, style=custom_style).ask_async()
        if target_id is None:
            return
        self._report_drag(
            self.builder.handle_drag_end(
                DragEndEvent(exercise.id, source_workout_id, target_id, destination.id)
            )
        )

    async def delete_workout(self) -> None:
        workout = await self._pick_workout("Delete which workout?")
        if workout is not None and await questionary.confirm(
            f"Remove {workout.name} from the program?", default=False, style=custom_style
        ).ask_async():
            self.builder.delete_workout(workout.id)

    async def delete_exercise(self) -> None:
        exercise = await self._pick_exercise("Delete which exercise?")
        if exercise is not None:
            self.builder.delete_exercise(exercise.id)

    async def save(self) -> None:
        result = await self.builder.save(
            lambda payload: self.programs_repo.submit(payload, program_id=self.builder.program_id)
        )
        for field_name, message in result.validation_errors.items():
            echo_error(f"{field_name}: {message}")

    def _report_drag(self, result) -> None:
        if not result.changed:
            echo_info(f"Nothing moved ({result.outcome.value})")

    async def _pick_workout(self, prompt: str):
        workouts = self.builder.program.workouts
        if not workouts:
            echo_warning("The program has no workouts")
            return None
        return await questionary.select(
            prompt,
            choices=[questionary.Choice(f"{w.order}. {w.name}", w) for w in workouts],
            style=custom_style,
        ).ask_async()

    async def _pick_exercise(self, prompt: str):
        choices = [
            questionary.Choice(f"{w.name} / {ex.order}. {ex.name}", ex)
            for w in self.builder.program.workouts
            for ex in w.exercises
        ]
        if not choices:
            echo_warning("The program has no exercises")
            return None
        return await questionary.select(prompt, choices=choices, style=custom_style).ask_async()

    async def _ask_int(self, prompt: str, default: int) -> int | None:
        answer = await questionary.text(
            prompt,
            default=str(default),
            validate=lambda text: text.isdigit() or "Enter a whole number",
            style=custom_style,
        ).ask_async()
        return int(answer) if answer is not None else None


@click.command()
@click.option("--program-id", "-p", type=int, help="Edit an existing program instead of starting a new one")
@click.pass_context
@async_command
async def build(ctx, program_id: int | None):
    """Build a program interactively.

    Allocate workout templates, add exercises, edit sets, reorder and save.

    Examples:

        # Start a new program
        program-builder build

        # Edit program 3
        program-builder build --program-id 3
    """
    ensure_initialized(ctx)

    db_path = get_db_path()
    programs_repo = ProgramRepository(db_path)
    builder = ProgramBuilder(
        DictFormState(),
        notifications=EchoNotificationSink(),
        templates=TemplateRepository(db_path),
    )

    if program_id is not None:
        program = await programs_repo.get(program_id)
        if not program:
            echo_error(f"Program ID {program_id} not found")
            ctx.exit(1)
        builder.load(program)
        echo_info(f"Editing program {program.name} (ID: {program_id})")

    await BuildSession(builder, programs_repo).run()
