import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from depo.exceptions import ExternalCommandError
from depo.git_wrapper import GitRunner


def test_run_inherits_output_streams(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies that git output is forwarded rather than captured."""
    mock_run = mocker.patch("subprocess.run")

    GitRunner().run(["fetch", "origin"], cwd=tmp_path)

    mock_run.assert_called_once_with(["git", "fetch", "origin"], cwd=tmp_path, check=True)


def test_run_wraps_non_zero_exit(mocker: MagicMock) -> None:
    """Verifies that a failing git command raises ExternalCommandError."""
    mocker.patch(
        "subprocess.run",
        side_effect=subprocess.CalledProcessError(128, ["git", "pull"]),
    )

    with pytest.raises(ExternalCommandError) as exc_info:
        GitRunner().run(["pull"])

    assert exc_info.value.returncode == 128
    assert exc_info.value.cmd == ["git", "pull"]
    assert "exited with status 128" in str(exc_info.value)


def test_run_wraps_missing_binary(mocker: MagicMock) -> None:
    """Verifies that a git binary that cannot start is reported, not raised raw."""
    mocker.patch("subprocess.run", side_effect=FileNotFoundError("no such file: git"))

    with pytest.raises(ExternalCommandError) as exc_info:
        GitRunner().run(["status"])

    assert exc_info.value.returncode is None
    assert "could not be started" in str(exc_info.value)


def test_run_logs_command_at_debug(
    mocker: MagicMock, caplog: pytest.LogCaptureFixture
) -> None:
    mocker.patch("subprocess.run")
    caplog.set_level("DEBUG", logger="depo")

    GitRunner(executable="/usr/local/bin/git").run(["fetch", "origin"])

    assert "Running /usr/local/bin/git fetch origin" in caplog.text


@pytest.mark.parametrize(
    ("method", "args", "expected"),
    [
        ("fetch", ("origin",), ["fetch", "origin"]),
        ("checkout", ("main",), ["checkout", "main"]),
        (
            "checkout_tracking",
            ("dev", "origin"),
            ["checkout", "-b", "dev", "origin/dev"],
        ),
        ("pull", ("origin", "main"), ["pull", "origin", "main"]),
    ],
)
def test_repo_commands_run_inside_clone(
    mocker: MagicMock,
    tmp_path: Path,
    method: str,
    args: tuple[str, ...],
    expected: list[str],
) -> None:
    """Verifies the command line of each in-repository operation."""
    runner = GitRunner()
    mock_run = mocker.patch.object(runner, "run")

    getattr(runner, method)(tmp_path, *args)

    mock_run.assert_called_once_with(expected, cwd=tmp_path)


def test_clone_is_shallow_and_branch_specific(mocker: MagicMock, tmp_path: Path) -> None:
    runner = GitRunner()
    mock_run = mocker.patch.object(runner, "run")
    dest = tmp_path / "effect"

    runner.clone("https://github.com/Effect-TS/effect", dest, "main", 1)

    mock_run.assert_called_once_with(
        [
            "clone",
            "--depth",
            "1",
            "--branch",
            "main",
            "https://github.com/Effect-TS/effect",
            str(dest),
        ]
    )
