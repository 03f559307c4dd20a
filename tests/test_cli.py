"""Smoke tests for the typer CLI against a temporary data directory."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from teststar.cli import app
from teststar.config.loader import CONFIG_PATH_ENV_VAR, DATA_DIR_ENV_VAR, OVERRIDES_ENV_VAR

runner = CliRunner()


@pytest.fixture
def cli_env(temp_data_dir, monkeypatch):
    config = temp_data_dir / "config.yaml"
    config.write_text(
        "model:\n  name: gpt-4o-mini\n"
        f"paths:\n  data_dir: {temp_data_dir / 'data'}\n  logs_dir: {temp_data_dir / 'logs'}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(config))
    monkeypatch.delenv(OVERRIDES_ENV_VAR, raising=False)
    monkeypatch.delenv(DATA_DIR_ENV_VAR, raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return temp_data_dir


def test_profile_goal_and_grade_flow(cli_env):
    result = runner.invoke(app, ["init-profile", "Asha", "--grade", "8"])
    assert result.exit_code == 0, result.output
    assert "Profile created for" in result.output

    result = runner.invoke(
        app, ["add-goal", "One science test", "--target", "1", "--subject", "Science"]
    )
    assert result.exit_code == 0, result.output

    test_file = cli_env / "test.json"
    test_file.write_text(
        json.dumps(
            {
                "id": "t1",
                "subject": "Science",
                "chapter": "Light",
                "questions": [
                    {
                        "question_text": "Light travels fastest in?",
                        "question_type": "MCQ",
                        "marks": 1,
                        "topic": "Speed of light",
                        "options": ["Vacuum", "Water", "Glass", "Diamond"],
                        "correct_option_index": 0,
                    }
                ],
            }
        ),
        encoding="utf-8",
    )
    answers_file = cli_env / "answers.json"
    answers_file.write_text(
        json.dumps([{"question_index": 0, "selected_option_index": 0}]), encoding="utf-8"
    )

    result = runner.invoke(app, ["grade", str(test_file), str(answers_file), "--time-taken", "30"])
    assert result.exit_code == 0, result.output
    assert "100%" in result.output
    assert "First Test" in result.output
    assert "Perfect Score" in result.output

    result = runner.invoke(app, ["goals"])
    assert result.exit_code == 0, result.output
    goals = json.loads((cli_env / "data" / "goals.json").read_text(encoding="utf-8"))
    assert goals[0]["status"] == "completed"
    assert goals[0]["current_value"] == 1


def test_profile_command_without_profile(cli_env):
    result = runner.invoke(app, ["profile"])
    assert result.exit_code == 1
    assert "No profile yet" in result.output


def test_grade_rejects_bad_submission(cli_env):
    runner.invoke(app, ["init-profile", "Asha", "--grade", "8"])
    bad = cli_env / "bad.json"
    bad.write_text("{}", encoding="utf-8")

    result = runner.invoke(app, ["grade", str(bad), str(bad)])

    assert result.exit_code != 0
