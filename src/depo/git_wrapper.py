import logging
import subprocess
from pathlib import Path

from .constants import APP_NAME
from .exceptions import ExternalCommandError

logger = logging.getLogger(APP_NAME)


class GitRunner:
    """A thin wrapper around the git command-line interface.

    Commands run synchronously with no timeout, and their stdout/stderr are
    inherited so git's own progress and error output reaches the terminal.
    The sync engine takes a runner instance, so tests can substitute a mock
    instead of invoking a real git binary.

    Attributes:
        executable (str): The git binary to invoke. Defaults to "git".
    """

    def __init__(self, executable: str = "git"):
        self.executable = executable

    def run(self, args: list[str], cwd: Path | None = None) -> None:
        """Executes a git command and waits for it to finish.

        Args:
            args (list[str]): Arguments passed after the git executable.
            cwd (Path | None): Working directory for the command.

        Raises:
            ExternalCommandError: If git cannot be started or exits non-zero.
        """
        cmd = [self.executable, *args]
        logger.debug(f"Running {' '.join(cmd)} (cwd={cwd or '.'})")
        try:
            subprocess.run(cmd, cwd=cwd, check=True)
        except subprocess.CalledProcessError as e:
            raise ExternalCommandError(cmd, e.returncode) from e
        except OSError as e:
            raise ExternalCommandError(cmd, None, str(e)) from e

    def fetch(self, path: Path, remote: str) -> None:
        """Fetches updates from `remote` into the repository at `path`."""
        self.run(["fetch", remote], cwd=path)

    def checkout(self, path: Path, branch: str) -> None:
        """Switches the working tree at `path` to an existing local branch."""
        self.run(["checkout", branch], cwd=path)

    def checkout_tracking(self, path: Path, branch: str, remote: str) -> None:
        """Creates and switches to a local branch tracking `remote/branch`."""
        self.run(["checkout", "-b", branch, f"{remote}/{branch}"], cwd=path)

    def pull(self, path: Path, remote: str, branch: str) -> None:
        """Fetches and merges `branch` from `remote`."""
        self.run(["pull", remote, branch], cwd=path)

    def clone(self, url: str, path: Path, branch: str, depth: int) -> None:
        """Performs a shallow single-branch clone of `url` into `path`.

        Args:
            url (str): The remote to clone.
            path (Path): The destination directory.
            branch (str): The branch to check out.
            depth (int): Number of commits of history to fetch.
        """
        self.run(
            ["clone", "--depth", str(depth), "--branch", branch, url, str(path)]
        )
