"""Integration tests for the full build/save/reload pipeline.

These run the editor against a real SQLite database with the template
library seeded, the same way the CLI and web API wire it together.
"""

import asyncio
import tempfile
from pathlib import Path

import pytest

from program_builder.builder import DragEndEvent, ProgramBuilder, ReorderOutcome, ROOT_CONTAINER_ID
from program_builder.builder.aggregate import program_duration
from program_builder.clients import CollectingNotificationSink, DictFormState
from program_builder.db import ProgramRepository, TemplateRepository, init_db, seed_templates


@pytest.fixture
def db_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "pipeline.db"
        asyncio.run(init_db(path))
        asyncio.run(seed_templates(path))
        yield path


def new_builder(db_path):
    sink = CollectingNotificationSink()
    builder = ProgramBuilder(DictFormState(), notifications=sink, templates=TemplateRepository(db_path))
    return builder, sink


class TestPipelineIntegration:
    """Integration tests for building and persisting programs."""

    def test_build_save_reload_edit(self, db_path):
        """Build a program from the library, save it, reopen it and update it."""
        programs = ProgramRepository(db_path)
        builder, sink = new_builder(db_path)
        builder.load()

        # Pick templates the way the interactive builder does
        lower = asyncio.run(builder.search_workouts("lower"))[0]
        upper = asyncio.run(builder.search_workouts("upper"))[0]
        plank = asyncio.run(builder.search_exercises("plank"))[0]

        first = builder.add_workout(lower, note="heavy")
        second = builder.add_workout(upper)
        builder.add_exercise(second.id, plank, sets=[{"type": "DURATION", "value": 45, "breakTime": 15}])
        builder.update_program(name="Four Day Split", duration_days=28, rotation_days=7)

        result = builder.handle_drag_end(DragEndEvent(second.id, ROOT_CONTAINER_ID, first.id, ROOT_CONTAINER_ID))
        assert result.outcome == ReorderOutcome.REORDERED

        saved = asyncio.run(builder.save(lambda payload: programs.submit(payload)))
        assert saved.success
        program_id = builder.program_id
        assert program_id == saved.response

        stored = asyncio.run(programs.get(program_id))
        assert [w.name for w in stored.workouts] == ["Upper Body", "Lower Body"]
        assert [w.order for w in stored.workouts] == [1, 2]
        assert stored.workouts[0].exercises[-1].name == "Plank"
        assert stored.workouts[1].note == "heavy"
        assert program_duration(stored) == program_duration(builder.program)

        # Reopen in a fresh editor and change it
        editor, editor_sink = new_builder(db_path)
        editor.load(stored)
        assert editor.is_edit
        assert editor.selection.workout_id == editor.program.workouts[0].id

        lower_id = editor.program.workouts[1].id
        editor.delete_workout(lower_id)
        updated = asyncio.run(editor.save(lambda payload: programs.submit(payload, program_id=editor.program_id)))

        assert updated.success
        assert editor_sink.notifications[-1].message == "Program updated successfully"
        reloaded = asyncio.run(programs.get(program_id))
        assert [w.name for w in reloaded.workouts] == ["Upper Body"]
        assert len(asyncio.run(programs.list_all())) == 1

    def test_failed_save_keeps_tree(self, db_path):
        """A failing backend leaves the edited program intact for a retry."""
        programs = ProgramRepository(db_path)
        builder, sink = new_builder(db_path)
        builder.load()
        builder.add_workout(asyncio.run(builder.search_workouts("conditioning"))[0])
        before = builder.program

        # Unnamed programs are rejected by the form validation
        result = asyncio.run(builder.save(lambda payload: programs.submit(payload)))

        assert not result.success
        assert "name" in result.validation_errors
        assert builder.program == before
        assert builder.program_id is None
        assert asyncio.run(programs.list_all()) == []
