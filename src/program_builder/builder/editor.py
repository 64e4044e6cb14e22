"""Program editor: the actions behind the program builder screen.

Every action runs to completion synchronously: mutate the store, repair the
selection, then write the whole tree back to the form state, which stays the
single source of truth for the surrounding form and submit logic.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any

from ..clients.base import (
    FormStateBridge,
    Notification,
    NotificationSink,
    ProgramSubmitter,
    Severity,
    TemplateLookup,
)
from ..models.program import (
    AllocatedExercise,
    AllocatedWorkout,
    ExerciseSet,
    Program,
    SetType,
    validate_program,
)
from ..models.templates import ExerciseTemplate, TemplateKind, WorkoutTemplate
from .aggregate import total_duration
from .errors import InvalidPathError, NotFoundError
from .identity import NodeKind
from .reorder import DragEndEvent, ReorderEngine, ReorderResult
from .selection import Selection, SelectionController
from .store import ROOT, NodePath, OrderedCollectionStore

logger = logging.getLogger(__name__)


@dataclass
class EditorOptions:
    """Editor policy."""

    select_first_item: bool = True
    # first set of a newly added exercise
    new_exercise_set: dict = field(
        default_factory=lambda: {"type": SetType.REPS, "value": 12, "break_time": 60}
    )
    # set appended by "Add Set"
    new_set: dict = field(
        default_factory=lambda: {"type": SetType.REPS, "value": 0, "break_time": 60}
    )
    template_page_size: int = 20


@dataclass
class SaveResult:
    """Outcome of a save attempt."""

    success: bool
    response: Any = None
    error: str | None = None
    validation_errors: dict[str, str] = field(default_factory=dict)


class ProgramBuilder:
    """Edits a program held in an external form state.

    Args:
        form: Form state holding the program dict
        notifications: Where user-facing outcomes are reported
        templates: Template lookup used by the add-workout/add-exercise pickers
        options: Editor policy
    """

    def __init__(
        self,
        form: FormStateBridge,
        notifications: NotificationSink | None = None,
        templates: TemplateLookup | None = None,
        options: EditorOptions | None = None,
    ):
        self.form = form
        self.notifications = notifications
        self.templates = templates
        self.options = options or EditorOptions()
        self.store = OrderedCollectionStore()
        self.selection = SelectionController(self.options.select_first_item)
        self.reorder_engine = ReorderEngine(self.store)
        self.program_id: int | None = None
        self.is_saving = False
        self.load()

    # ------------------------------------------------------------------
    # Tree access
    # ------------------------------------------------------------------

    @property
    def program(self) -> Program:
        """Current program, materialised from the store."""
        return self.store.snapshot()

    @property
    def is_edit(self) -> bool:
        return self.program_id is not None

    def load(self, program: Program | None = None) -> Selection:
        """Hydrate the editor from ``program`` or from the form state.

        An explicit ``program`` also decides whether saving edits or creates.
        """
        if program is None:
            data = self.form.get_value("")
            program = Program.from_dict(data) if data else Program()
            if program.id is not None:
                self.program_id = program.id
        else:
            self.program_id = program.id
        self.store.load(program)
        selection = self.selection.reset(self.store)
        self._commit()
        return selection

    def get_workout(self, workout_id: str) -> AllocatedWorkout:
        return self.store.get(self._path(NodeKind.WORKOUT, workout_id))

    def get_exercise(self, exercise_id: str) -> AllocatedExercise:
        return self.store.get(self._path(NodeKind.EXERCISE, exercise_id))

    def selected_exercise(self) -> AllocatedExercise | None:
        exercise_id = self.selection.exercise_id
        if exercise_id is None:
            return None
        return self.get_exercise(exercise_id)

    def exercise_duration(self, exercise_id: str) -> float:
        """Total duration of an exercise, computed from its current sets."""
        return total_duration(self.get_exercise(exercise_id).sets)

    # ------------------------------------------------------------------
    # Template pickers
    # ------------------------------------------------------------------

    async def search_workouts(self, search: str | None = None, page: int = 1) -> list[WorkoutTemplate]:
        records = await self._search(TemplateKind.WORKOUTS, search, page)
        return [WorkoutTemplate.from_dict(r) for r in records]

    async def search_exercises(self, search: str | None = None, page: int = 1) -> list[ExerciseTemplate]:
        records = await self._search(TemplateKind.EXERCISES, search, page)
        return [ExerciseTemplate.from_dict(r) for r in records]

    async def _search(self, kind: TemplateKind, search: str | None, page: int) -> list[dict]:
        if self.templates is None:
            raise RuntimeError("No template lookup configured")
        filters = {"search": search} if search else {}
        return await self.templates.search(kind, filters, page, self.options.template_page_size)

    # ------------------------------------------------------------------
    # Program fields
    # ------------------------------------------------------------------

    def update_program(self, **patch: Any) -> Program:
        """Edit program-level fields (name, description, durations, status)."""
        program = self.store.update(ROOT, patch)
        self._commit()
        return program

    # ------------------------------------------------------------------
    # Workouts
    # ------------------------------------------------------------------

    def add_workout(self, template: WorkoutTemplate | dict, note: str = "") -> AllocatedWorkout:
        """Allocate a workout template at the end of the program.

        The template's exercises and default sets are copied in as new nodes.
        """
        if isinstance(template, dict):
            template = WorkoutTemplate.from_dict(template)
        workout = AllocatedWorkout(
            workout_ref=template,
            note=note,
            exercises=[
                AllocatedExercise(
                    exercise_ref=slot.exercise,
                    order=slot.order,
                    sets=[self._new_set(s) for s in slot.sets],
                )
                for slot in template.exercises
            ],
        )
        path = self.store.insert(ROOT, workout)
        self.selection.on_workout_added(self.store, path[-1])
        self._commit()
        self._notify(Severity.SUCCESS, "Workout added successfully")
        return self.store.get(path)

    def update_workout_note(self, workout_id: str, note: str) -> AllocatedWorkout | None:
        return self._update(NodeKind.WORKOUT, workout_id, {"note": note})

    def delete_workout(self, workout_id: str) -> AllocatedWorkout | None:
        """Remove a workout with all its exercises and sets."""
        removed = self._remove(NodeKind.WORKOUT, workout_id)
        if removed is None:
            return None
        self.selection.on_workout_deleted(workout_id)
        self.selection.revalidate(self.store)
        self._commit()
        self._notify(Severity.INFO, "Workout removed from program")
        return removed

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    def add_exercise(
        self,
        workout_id: str,
        template: ExerciseTemplate | dict,
        sets: list[ExerciseSet | dict] | None = None,
        notes: str = "",
    ) -> AllocatedExercise:
        """Allocate an exercise template at the end of a workout.

        Without explicit ``sets`` the exercise starts with one default set.
        """
        if isinstance(template, dict):
            template = ExerciseTemplate.from_dict(template)
        parent = (workout_id,)
        if not self.store.exists(parent):
            raise InvalidPathError(parent)
        if sets is None:
            sets = [self.options.new_exercise_set]
        exercise = AllocatedExercise(
            exercise_ref=template,
            notes=notes,
            sets=[self._new_set(s) for s in sets],
        )
        path = self.store.insert(parent, exercise)
        self.selection.on_exercise_added(self.store, workout_id, path[-1])
        self._commit()
        self._notify(Severity.SUCCESS, "Exercise added successfully")
        return self.store.get(path)

    def update_exercise_notes(self, exercise_id: str, notes: str) -> AllocatedExercise | None:
        return self._update(NodeKind.EXERCISE, exercise_id, {"notes": notes})

    def delete_exercise(self, exercise_id: str) -> AllocatedExercise | None:
        """Remove an exercise with its sets."""
        removed = self._remove(NodeKind.EXERCISE, exercise_id)
        if removed is None:
            return None
        self.selection.on_exercise_deleted(exercise_id)
        self.selection.revalidate(self.store)
        self._commit()
        self._notify(Severity.INFO, "Exercise removed successfully")
        return removed

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    def add_set(
        self,
        exercise_id: str,
        exercise_set: ExerciseSet | dict | None = None,
        position: int | None = None,
    ) -> ExerciseSet:
        """Append (or insert at ``position``) a set; defaults to a blank reps set."""
        parent = self.store.path_of(NodeKind.EXERCISE, exercise_id)
        if parent is None:
            raise InvalidPathError((exercise_id,))
        new_set = self._new_set(self.options.new_set if exercise_set is None else exercise_set)
        path = self.store.insert(parent, new_set, position)
        self._sets_changed(exercise_id)
        return self.store.get(path)

    def update_set(self, set_id: str, **patch: Any) -> ExerciseSet | None:
        """Edit a set's type, value or break time."""
        updated = self._update(NodeKind.SET, set_id, patch)
        if updated is not None:
            self._sets_changed(self.store.parent_id(NodeKind.SET, set_id))
        return updated

    def remove_set(self, set_id: str) -> ExerciseSet | None:
        exercise_id = self.store.parent_id(NodeKind.SET, set_id)
        removed = self._remove(NodeKind.SET, set_id)
        if removed is not None:
            self._sets_changed(exercise_id)
        return removed

    def replace_sets(self, exercise_id: str, sets: list[ExerciseSet | dict]) -> AllocatedExercise:
        """Replace all sets of an exercise.

        Incoming sets are validated before the old ones are dropped.
        """
        parent = self.store.path_of(NodeKind.EXERCISE, exercise_id)
        if parent is None:
            raise InvalidPathError((exercise_id,))
        new_sets = [self._new_set(s) for s in sets]
        for set_id in self.store.child_ids(parent):
            self.store.remove(parent + (set_id,))
        for new_set in new_sets:
            self.store.insert(parent, new_set)
        self._sets_changed(exercise_id)
        return self.store.get(parent)

    # ------------------------------------------------------------------
    # Drag and drop, selection
    # ------------------------------------------------------------------

    def handle_drag_end(self, event: DragEndEvent) -> ReorderResult:
        """Apply a drag-end gesture; no-op gestures change nothing at all."""
        result = self.reorder_engine.apply(event)
        if result.changed:
            self.selection.revalidate(self.store)
            self._commit()
        return result

    def select_workout(self, workout_id: str | None) -> Selection:
        return self.selection.select_workout(self.store, workout_id)

    def select_exercise(self, workout_id: str, exercise_id: str | None) -> Selection:
        return self.selection.select_exercise(self.store, workout_id, exercise_id)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def build_submission(self) -> dict:
        """Payload submitted to persistence."""
        return self.store.snapshot().to_submission()

    async def save(self, submit: ProgramSubmitter) -> SaveResult:
        """Submit the program.

        The in-memory tree is never modified here: on failure or cancellation
        the user can retry without re-entering anything.
        """
        program = self.store.snapshot()
        errors = validate_program(program)
        if errors:
            self._notify(Severity.ERROR, "Program is not valid", "; ".join(errors.values()))
            return SaveResult(False, error="validation failed", validation_errors=errors)

        payload = program.to_submission()
        was_edit = self.is_edit
        self.is_saving = True
        try:
            response = await submit(payload)
        except asyncio.CancelledError:
            logger.info("Save of program %r cancelled", program.name)
            raise
        except Exception as e:
            logger.error("Error saving program %r", program.name, exc_info=True)
            self._notify(Severity.ERROR, "Error saving program", str(e))
            return SaveResult(False, error=str(e))
        finally:
            self.is_saving = False

        if self.program_id is None and isinstance(response, int):
            self.program_id = response
        self._notify(
            Severity.SUCCESS,
            "Program updated successfully" if was_edit else "Program created successfully",
            "The program has been saved to the database",
        )
        return SaveResult(True, response)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _path(self, kind: NodeKind, node_id: str) -> NodePath:
        path = self.store.path_of(kind, node_id)
        if path is None:
            raise NotFoundError(kind.value, node_id)
        return path

    def _remove(self, kind: NodeKind, node_id: str):
        try:
            return self.store.remove(self._path(kind, node_id))
        except NotFoundError as e:
            logger.info("Nothing to remove: %s", e)
            return None

    def _update(self, kind: NodeKind, node_id: str, patch: dict):
        try:
            updated = self.store.update(self._path(kind, node_id), patch)
        except NotFoundError as e:
            logger.info("Nothing to update: %s", e)
            return None
        self._commit()
        return updated

    def _sets_changed(self, exercise_id: str | None) -> None:
        if exercise_id is not None:
            logger.debug(
                "Exercise %s total duration: %s",
                exercise_id,
                self.exercise_duration(exercise_id),
            )
        self._commit()

    def _new_set(self, data: ExerciseSet | dict) -> ExerciseSet:
        if isinstance(data, ExerciseSet):
            return replace(data, id="")
        values = dict(data)
        if "breakTime" in values:
            values["break_time"] = values.pop("breakTime")
        values.pop("id", None)
        values.pop("setNumber", None)
        values.pop("order", None)
        return ExerciseSet(
            type=SetType(values.get("type") or SetType.REPS),
            value=values.get("value") or 0,
            break_time=values.get("break_time"),
        )

    def _commit(self) -> None:
        """Write the full tree back to the form state."""
        self.form.set_value("", self.store.snapshot().to_dict())

    def _notify(self, severity: Severity, message: str, description: str = "") -> None:
        if self.notifications is None:
            return
        try:
            self.notifications.notify(Notification(severity, message, description))
        except Exception:
            logger.warning("Notification sink failed for %r", message, exc_info=True)
