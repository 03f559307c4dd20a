"""Tests for YAML settings loading and environment overrides."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from teststar.config.loader import (
    CONFIG_PATH_ENV_VAR,
    DATA_DIR_ENV_VAR,
    OVERRIDES_ENV_VAR,
    load_settings,
    merge_dicts,
)

CONFIG_YAML = """
model:
  name: gpt-4o-mini
grading:
  default_feedback: full
paths:
  data_dir: /tmp/teststar-data
logging:
  level: debug
"""


@pytest.fixture
def config_file(temp_data_dir):
    path = temp_data_dir / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


def test_load_settings_from_yaml(config_file, monkeypatch):
    monkeypatch.delenv(OVERRIDES_ENV_VAR, raising=False)
    monkeypatch.delenv(DATA_DIR_ENV_VAR, raising=False)

    settings = load_settings(config_file)

    assert settings.model.name == "gpt-4o-mini"
    assert settings.grading.default_feedback == "full"
    assert settings.grading.max_concurrent_explanations == 4
    assert settings.logging.level == "DEBUG"
    assert settings.paths.reports_path == Path("/tmp/teststar-data/reports.jsonl")
    assert settings.paths.profile_path.name == "profile.json"
    assert settings.paths.goals_path.name == "goals.json"


def test_env_overrides_are_merged(config_file, monkeypatch):
    monkeypatch.setenv(
        OVERRIDES_ENV_VAR,
        json.dumps({"grading": {"explanation_fallback": "Try again later."}}),
    )

    settings = load_settings(config_file)

    assert settings.grading.explanation_fallback == "Try again later."
    assert settings.grading.default_feedback == "full"


def test_bad_override_json_raises(config_file, monkeypatch):
    monkeypatch.setenv(OVERRIDES_ENV_VAR, "{not json")
    with pytest.raises(ValueError):
        load_settings(config_file)


def test_invalid_settings_raise_value_error(temp_data_dir, monkeypatch):
    monkeypatch.delenv(OVERRIDES_ENV_VAR, raising=False)
    path = temp_data_dir / "bad.yaml"
    path.write_text("grading:\n  default_feedback: verbose\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)


def test_missing_config_file(temp_data_dir):
    with pytest.raises(FileNotFoundError):
        load_settings(temp_data_dir / "absent.yaml")


def test_merge_dicts_is_recursive():
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    merged = merge_dicts(base, {"a": {"c": 5}, "e": 6})
    assert merged == {"a": {"b": 1, "c": 5}, "d": 3, "e": 6}
    assert base["a"]["c"] == 2


def test_repository_default_config_is_valid(monkeypatch):
    monkeypatch.delenv(OVERRIDES_ENV_VAR, raising=False)
    default = Path(__file__).resolve().parents[1] / "config" / "default.yaml"
    settings = load_settings(default)
    assert settings.grading.default_feedback == "summary"


def test_data_dir_env_wins(config_file, monkeypatch):
    monkeypatch.setenv(OVERRIDES_ENV_VAR, json.dumps({"paths": {"data_dir": "/srv/a"}}))
    monkeypatch.setenv(DATA_DIR_ENV_VAR, "/srv/b")

    settings = load_settings(config_file)

    assert settings.paths.data_dir == Path("/srv/b")


def test_config_path_from_env(config_file, monkeypatch):
    monkeypatch.delenv(OVERRIDES_ENV_VAR, raising=False)
    monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(config_file))

    settings = load_settings()

    assert settings.grading.default_feedback == "full"


def test_overrides_must_be_an_object(config_file, monkeypatch):
    monkeypatch.setenv(OVERRIDES_ENV_VAR, "[1, 2]")
    with pytest.raises(ValueError):
        load_settings(config_file)


def test_config_must_be_a_mapping(temp_data_dir, monkeypatch):
    monkeypatch.delenv(OVERRIDES_ENV_VAR, raising=False)
    path = temp_data_dir / "list.yaml"
    path.write_text("- model\n- grading\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)
