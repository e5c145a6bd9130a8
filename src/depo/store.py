import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .config import Settings
from .constants import APP_NAME
from .exceptions import ConfigParseError

logger = logging.getLogger(APP_NAME)


@dataclass
class Repo:
    """A single tracked repository.

    Attributes:
        name (str): Unique identifier used as the lookup key.
        url (str): Remote location passed verbatim to git.
        branch (str): Branch to track.
        path (str): Local directory where the clone lives.
    """

    name: str
    url: str
    branch: str
    path: str

    def to_dict(self) -> dict[str, str]:
        """Serializes the record with keys in name/url/branch/path order."""
        return asdict(self)


@dataclass
class Registry:
    """The ordered list of tracked repositories."""

    repos: list[Repo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"repos": [repo.to_dict() for repo in self.repos]}

    def names(self) -> list[str]:
        return [repo.name for repo in self.repos]

    def find(self, name: str) -> Repo | None:
        """Returns the first repo with the given name, or None."""
        return next((repo for repo in self.repos if repo.name == name), None)


class ConfigStore:
    """Reads and writes the registry document under the vendor root.

    Every call hits the filesystem; nothing is cached between calls.

    Attributes:
        settings (Settings): The invocation context providing paths and defaults.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def path(self) -> Path:
        return self.settings.config_file

    def load(self) -> Registry:
        """Reads the registry document.

        Returns:
            Registry: The stored registry, or an empty one if the file is absent.

        Raises:
            ConfigParseError: If the file exists but is not a valid registry.
            OSError: If the file exists but cannot be read.
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.debug(f"No config at {self.path}, starting empty.")
            return Registry()

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigParseError(self.path, str(e)) from e

        if not isinstance(data, dict):
            raise ConfigParseError(self.path, "top-level value must be an object")

        # Only a missing or null field means empty
        entries = data.get("repos")
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise ConfigParseError(self.path, "'repos' must be a list")

        return Registry(repos=[self._parse_repo(i, e) for i, e in enumerate(entries)])

    def _parse_repo(self, index: int, entry: Any) -> Repo:
        """Validates one raw entry, filling in branch and path defaults."""
        if not isinstance(entry, dict):
            raise ConfigParseError(self.path, f"repos[{index}] must be an object")

        for key in ("name", "url"):
            if not isinstance(entry.get(key), str) or not entry[key]:
                raise ConfigParseError(
                    self.path, f"repos[{index}] is missing a '{key}' string"
                )
        for key in ("branch", "path"):
            if key in entry and not isinstance(entry[key], str):
                raise ConfigParseError(
                    self.path, f"repos[{index}].{key} must be a string"
                )

        name = entry["name"]
        return Repo(
            name=name,
            url=entry["url"],
            branch=entry.get("branch") or self.settings.core.default_branch,
            path=entry.get("path") or str(self.settings.default_path(name)),
        )

    def save(self, registry: Registry) -> None:
        """Writes the whole registry, creating the vendor root if needed.

        Raises:
            OSError: If the directory cannot be created or the file written.
        """
        self.settings.root.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(registry.to_dict(), indent=2)
        self.path.write_text(payload + "\n", encoding="utf-8")
        logger.debug(f"Saved {len(registry.repos)} repos to {self.path}")
