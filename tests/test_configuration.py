from __future__ import annotations

from pathlib import Path

import pytest

from rtmap.cli.io import CONFIG_ENV_VAR, load_cli_config
from rtmap.configuration import load_project_config, resolve_pyproject_path
from rtmap_core import TrackerSettings
from tests.conftest import write_pyproject


PROJECT_WITH_SECTION = """
[project]
name = "demo"

[tool.rtmap.tracker]
max_gap = 7
min_length = 25

[tool.rtmap.logging]
level = "debug"
"""


def test_load_project_config_returns_tool_section(tmp_path: Path) -> None:
    pyproject = write_pyproject(tmp_path, PROJECT_WITH_SECTION)

    loaded = load_project_config(tmp_path)

    assert loaded is not None
    payload, source = loaded
    assert source == pyproject.resolve()
    assert payload["tracker"] == {"max_gap": 7, "min_length": 25}
    assert payload["logging"]["level"] == "debug"
    assert payload["normalizer"] == {}
    assert TrackerSettings.from_config(payload).max_gap == 7


def test_load_project_config_without_section(tmp_path: Path) -> None:
    write_pyproject(tmp_path, '[project]\nname = "demo"\n')

    assert load_project_config(tmp_path) is None
    assert load_project_config(tmp_path / "missing") is None


def test_resolve_pyproject_path_variants(tmp_path: Path) -> None:
    assert resolve_pyproject_path(tmp_path) == tmp_path / "pyproject.toml"
    assert resolve_pyproject_path(tmp_path / "pyproject.toml") == tmp_path / "pyproject.toml"
    assert resolve_pyproject_path(tmp_path / "settings.yaml") is None


def test_cli_config_prefers_explicit_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    explicit = tmp_path / "explicit"
    explicit.mkdir()
    write_pyproject(explicit, "[tool.rtmap.tracker]\nmax_gap = 1\n")
    write_pyproject(tmp_path, "[tool.rtmap.tracker]\nmax_gap = 9\n")
    monkeypatch.chdir(tmp_path)

    config = load_cli_config(explicit / "pyproject.toml")

    assert config["tracker"]["max_gap"] == 1
    assert config["_config_path"] == str((explicit / "pyproject.toml").resolve())


def test_cli_config_uses_environment_variable(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    from_env = tmp_path / "env"
    from_env.mkdir()
    write_pyproject(from_env, "[tool.rtmap.normalizer]\ncapacity = 256\n")
    empty = tmp_path / "cwd"
    empty.mkdir()
    monkeypatch.chdir(empty)
    monkeypatch.setenv(CONFIG_ENV_VAR, str(from_env))

    config = load_cli_config()

    assert config["normalizer"]["capacity"] == 256


def test_cli_config_falls_back_to_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    write_pyproject(tmp_path, PROJECT_WITH_SECTION)
    monkeypatch.chdir(tmp_path)

    config = load_cli_config()

    assert config["tracker"]["min_length"] == 25


def test_cli_config_without_any_source(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert load_cli_config() == {"_config_path": None}
