"""Tests for the command line interface."""

import asyncio
import json

import pytest
from click.testing import CliRunner

from program_builder.cli import main
from program_builder.db import ProgramRepository, get_db_path
from program_builder.db.engine import DATA_DIR_ENV


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))
    return tmp_path


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def initialized(runner, data_dir):
    result = runner.invoke(main, ["init"])
    assert result.exit_code == 0, result.output
    return data_dir


@pytest.fixture
def saved_program_id(initialized):
    payload = {
        "name": "Strength Block",
        "allocatedWorkouts": [
            {
                "workoutId": "wo-lower",
                "order": 1,
                "allocatedExercises": [
                    {
                        "exerciseId": "ex-squat",
                        "order": 1,
                        "sets": [{"type": "REPS", "value": 5, "breakTime": 120}] * 3,
                    }
                ],
            }
        ],
    }
    return asyncio.run(ProgramRepository(get_db_path()).submit(payload))


class TestInit:
    """Tests for the init command."""

    def test_creates_database(self, runner, data_dir):
        result = runner.invoke(main, ["init"])

        assert result.exit_code == 0
        assert "14 built-in templates" in result.output
        assert (data_dir / "program_builder.db").exists()

    def test_seeds_from_json(self, runner, data_dir):
        (data_dir / "templates.json").write_text(
            json.dumps({"exercises": [{"id": "ex-row", "name": "Ring Row"}], "workouts": []})
        )

        result = runner.invoke(main, ["init"])

        assert result.exit_code == 0
        assert "1 templates from templates.json" in result.output

    def test_commands_require_init(self, runner, data_dir):
        result = runner.invoke(main, ["templates"])

        assert result.exit_code == 1
        assert "program-builder init" in result.output


class TestTemplatesCommand:
    """Tests for the templates command."""

    def test_lists_workouts(self, runner, initialized):
        result = runner.invoke(main, ["templates"])

        assert result.exit_code == 0
        assert "Lower Body" in result.output
        assert "Page 1: 4 template(s)" in result.output

    def test_search_exercises(self, runner, initialized):
        result = runner.invoke(main, ["templates", "exercises", "--search", "press"])

        assert "Bench Press" in result.output
        assert "Squat" not in result.output

    def test_suggests_close_name(self, runner, initialized):
        result = runner.invoke(main, ["templates", "exercises", "-s", "Deadlfit"])

        assert "No templates found" in result.output
        assert "Did you mean 'Deadlift'?" in result.output


class TestProgramsCommand:
    """Tests for the programs command group."""

    def test_list_empty(self, runner, initialized):
        result = runner.invoke(main, ["programs", "list"])

        assert "No programs found" in result.output

    def test_list_and_show(self, runner, saved_program_id):
        listed = runner.invoke(main, ["programs", "list"])
        shown = runner.invoke(main, ["programs", "show", str(saved_program_id)])

        assert "Strength Block" in listed.output
        assert "Total: 1 program(s)" in listed.output
        assert shown.exit_code == 0
        assert "Total time: 6 min 30 sec" in shown.output
        assert "1. Squat: 3x5" in shown.output

    def test_show_missing(self, runner, initialized):
        result = runner.invoke(main, ["programs", "show", "99"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_delete(self, runner, saved_program_id):
        result = runner.invoke(main, ["programs", "delete", str(saved_program_id), "--force"])

        assert result.exit_code == 0
        assert asyncio.run(ProgramRepository(get_db_path()).get(saved_program_id)) is None


class TestExportCommand:
    """Tests for the export command."""

    def test_payload_to_stdout(self, runner, saved_program_id):
        result = runner.invoke(main, ["export", str(saved_program_id)])

        data = json.loads(result.output)
        assert data["name"] == "Strength Block"
        assert data["allocatedWorkouts"][0]["name"] == "Lower Body"

    def test_form_to_file(self, runner, saved_program_id, tmp_path):
        output = tmp_path / "program.json"

        result = runner.invoke(main, ["export", str(saved_program_id), "-f", "form", "-o", str(output)])

        assert result.exit_code == 0
        data = json.loads(output.read_text())
        assert data["allocatedWorkouts"][0]["allocatedExercises"][0]["totalDuration"] == 390
