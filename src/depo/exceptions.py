"""Exception types raised by depo.

Filesystem failures are not wrapped; they surface as the builtin ``OSError``.
"""

from pathlib import Path


class DepoError(Exception):
    """Base class for all depo errors."""


class ConfigParseError(DepoError):
    """The repository list exists on disk but could not be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Invalid config at {path}: {reason}")


class DuplicateNameError(DepoError):
    """A repository with the requested name is already tracked."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Repo '{name}' already exists")


class NotFoundError(DepoError):
    """No tracked repository has the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Repo '{name}' not found")


class ExternalCommandError(DepoError):
    """A git subprocess failed to start or exited non-zero.

    Attributes:
        cmd (list[str]): The full command line that was run.
        returncode (int | None): Exit status, or None if the process never started.
    """

    def __init__(self, args: list[str], returncode: int | None, detail: str = ""):
        self.cmd = list(args)
        self.returncode = returncode
        if returncode is None:
            message = f"'{' '.join(self.cmd)}' could not be started"
        else:
            message = f"'{' '.join(self.cmd)}' exited with status {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
