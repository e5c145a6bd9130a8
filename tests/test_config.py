"""Tests for settings resolution and settings.toml merging."""

import logging
from pathlib import Path

import pytest

from depo.config import CoreConfig, Settings
from depo.constants import default_root


def test_settings_defaults(tmp_path: Path) -> None:
    """Verifies that settings initialize with the standard git defaults."""
    settings = Settings(root=tmp_path)
    assert settings.core.default_branch == "main"
    assert settings.core.remote_name == "origin"
    assert settings.core.clone_depth == 1
    assert settings.config_file == tmp_path / "config.json"
    assert settings.default_path("demo") == tmp_path / "demo"


def test_default_root_uses_home() -> None:
    """Verifies that the root is derived from HOME when no override is set."""
    assert default_root({"HOME": "/home/alice"}) == Path("/home/alice/.vendor")


def test_default_root_env_override() -> None:
    """Verifies that DEPO_ROOT takes precedence over HOME."""
    env = {"HOME": "/home/alice", "DEPO_ROOT": "/srv/mirrors"}
    assert default_root(env) == Path("/srv/mirrors")


def test_load_explicit_root_wins(tmp_path: Path) -> None:
    """Verifies that an explicit root ignores the environment entirely."""
    settings = Settings.load(root=tmp_path, environ={"DEPO_ROOT": "/elsewhere"})
    assert settings.root == tmp_path
    assert settings.core == CoreConfig()


def test_load_without_settings_file_does_not_create_root(tmp_path: Path) -> None:
    """Verifies that loading settings has no filesystem side effects."""
    root = tmp_path / "vendor"
    Settings.load(root=root)
    assert not root.exists()


def test_load_merges_settings_toml(tmp_path: Path) -> None:
    """Verifies that the [core] table overrides the defaults."""
    (tmp_path / "settings.toml").write_text(
        '[core]\ndefault_branch = "master"\nremote_name = "upstream"\nclone_depth = 5\n'
    )

    settings = Settings.load(root=tmp_path)

    assert settings.core.default_branch == "master"
    assert settings.core.remote_name == "upstream"
    assert settings.core.clone_depth == 5


def test_load_invalid_keys_and_values(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Verifies that unknown keys are ignored and bad values fall back to defaults."""
    caplog.set_level(logging.WARNING)
    (tmp_path / "settings.toml").write_text(
        "[core]\n"
        "default_branch = 3\n"
        'remote_name = ""\n'
        "clone_depth = 0\n"
        'fake_setting = "ignored"\n'
        "[extras]\n"
        "x = 1\n"
    )

    settings = Settings.load(root=tmp_path)

    assert settings.core == CoreConfig()
    assert "Unknown settings keys in [core]: fake_setting" in caplog.text
    assert "Unknown settings sections" in caplog.text
    assert "[core].default_branch: expected str" in caplog.text
    assert "[core].remote_name: empty value" in caplog.text
    assert "[core].clone_depth: must be positive" in caplog.text


def test_load_rejects_boolean_depth(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Verifies that a boolean is not accepted where an integer is expected."""
    caplog.set_level(logging.WARNING)
    (tmp_path / "settings.toml").write_text("[core]\nclone_depth = true\n")

    settings = Settings.load(root=tmp_path)

    assert settings.core.clone_depth == 1
    assert "[core].clone_depth: expected int" in caplog.text


def test_load_syntax_error_keeps_defaults(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Verifies that a malformed settings file is logged and otherwise ignored."""
    (tmp_path / "settings.toml").write_text("[core\ndefault_branch = \n")

    settings = Settings.load(root=tmp_path)

    assert settings.core == CoreConfig()
    assert "Settings syntax error" in caplog.text


def test_load_non_utf8_keeps_defaults(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Verifies that an undecodable settings file is logged and otherwise ignored."""
    (tmp_path / "settings.toml").write_bytes(b'[core]\ndefault_branch = "\xff"\n')

    settings = Settings.load(root=tmp_path)

    assert settings.core == CoreConfig()
    assert "is not valid UTF-8" in caplog.text


def test_load_core_not_a_table_warns(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.WARNING)
    (tmp_path / "settings.toml").write_text("core = 1\n")

    settings = Settings.load(root=tmp_path)

    assert settings.core == CoreConfig()
    assert "[core] must be a table, got 1" in caplog.text
