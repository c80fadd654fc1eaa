from __future__ import annotations

from pathlib import Path

import pytest
from conftest import make_settings
from pydantic import ValidationError

from core.config import DEFAULT_REGISTRY_ID, AppSettings, get_user_config_dir


def test_defaults() -> None:
    settings = make_settings()

    assert settings.registry_id == DEFAULT_REGISTRY_ID
    assert settings.registry_file == "mix.md"
    assert settings.github_token is None
    assert settings.token_replacements == ()


def test_legacy_environment_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MIX_SOURCE", "abc")
    monkeypatch.setenv("GITHUB_TOKEN", "tok")

    settings = make_settings()

    assert settings.registry_id == "abc"
    assert settings.github_token == "tok"


def test_prefixed_environment_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADD_IN_REGISTRY_ID", "prefixed")
    monkeypatch.setenv("ADD_IN_REGISTRY_FILE", "list.md")

    settings = make_settings()

    assert settings.registry_id == "prefixed"
    assert settings.registry_file == "list.md"


def test_arguments_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MIX_SOURCE", "from-env")

    assert make_settings(registry_id="from-cli").registry_id == "from-cli"


def test_env_file_is_read(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("MIX_SOURCE=from-file\nADD_IN_PRESERVE_EXISTING=true\n", encoding="utf-8")

    settings = AppSettings(_env_file=env_file)

    assert settings.registry_id == "from-file"
    assert settings.preserve_existing is True


def test_settings_are_frozen() -> None:
    settings = make_settings()

    with pytest.raises(ValidationError):
        settings.silent = True


def test_user_config_dir_honours_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr("core.config.sys.platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    assert get_user_config_dir() == tmp_path / "add-in"
