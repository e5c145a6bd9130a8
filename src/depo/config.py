import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .constants import (
    APP_NAME,
    CLONE_DEPTH,
    CONFIG_FILENAME,
    DEFAULT_BRANCH,
    DEFAULT_REMOTE,
    SETTINGS_FILENAME,
    default_root,
)

logger = logging.getLogger(APP_NAME)


@dataclass
class CoreConfig:
    """Git defaults applied to every tracked repository.

    Attributes:
        default_branch (str): Branch recorded when `add` is given none.
        remote_name (str): Remote used for fetch, pull and tracking branches.
        clone_depth (int): History depth for fresh clones.
    """

    default_branch: str = DEFAULT_BRANCH
    remote_name: str = DEFAULT_REMOTE
    clone_depth: int = CLONE_DEPTH


@dataclass
class Settings:
    """Per-invocation context threaded through the store and sync engine.

    Attributes:
        root (Path): The vendor root holding the config and default clones.
        core (CoreConfig): Git defaults, optionally overridden by settings.toml.
    """

    root: Path
    core: CoreConfig = field(default_factory=CoreConfig)

    @property
    def config_file(self) -> Path:
        """Path: The JSON document listing tracked repositories."""
        return self.root / CONFIG_FILENAME

    @property
    def settings_file(self) -> Path:
        """Path: The optional TOML preferences file."""
        return self.root / SETTINGS_FILENAME

    def default_path(self, name: str) -> Path:
        """Returns the clone location used when a repo has no explicit path."""
        return self.root / name

    @classmethod
    def load(
        cls, root: Path | None = None, environ: Mapping[str, str] | None = None
    ) -> "Settings":
        """Builds settings from the root directory and its settings.toml.

        Args:
            root (Path | None): Explicit vendor root. When omitted it is
                resolved from ``DEPO_ROOT`` or ``$HOME/.vendor``.
            environ (Mapping[str, str] | None): Environment used for resolution.

        Returns:
            Settings: The merged settings.
        """
        instance = cls(root=Path(root).expanduser() if root else default_root(environ))
        if instance.settings_file.exists():
            instance._merge_from_file(instance.settings_file)
        return instance

    def _merge_from_file(self, path: Path) -> None:
        """Parses a TOML file and merges its [core] table into this instance."""
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.error(f"Settings syntax error in {path}: {e}")
            return
        except UnicodeDecodeError as e:
            logger.error(f"Settings file {path} is not valid UTF-8: {e}")
            return
        except OSError as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return

        unknown = set(data) - {"core"}
        if unknown:
            logger.warning(
                f"Unknown settings sections in {path}: {', '.join(sorted(unknown))}. Ignoring."
            )
        if isinstance(data.get("core"), dict):
            self.core = self._update_dataclass("core", self.core, data["core"])
        elif "core" in data:
            logger.warning(
                f"Settings error in {path}: [core] must be a table, got "
                f"{data['core']!r}. Falling back to defaults."
            )

    @staticmethod
    def _update_dataclass(section_name: str, instance: Any, updates: dict) -> Any:
        """Updates a dataclass, warning on unknown keys and mistyped values."""
        fields = instance.__dataclass_fields__
        filtered_updates = {}

        invalid_keys = set(updates) - set(fields)
        if invalid_keys:
            logger.warning(
                f"Unknown settings keys in [{section_name}]: "
                f"{', '.join(sorted(invalid_keys))}. Ignoring."
            )

        for k, v in updates.items():
            if k not in fields:
                continue
            expected = type(getattr(instance, k))
            # bool is an int subclass, but true/false is never a valid depth
            if not isinstance(v, expected) or isinstance(v, bool):
                logger.warning(
                    f"Settings error in [{section_name}].{k}: expected "
                    f"{expected.__name__}, got {v!r}. Falling back to default."
                )
                continue
            if isinstance(v, str) and not v.strip():
                logger.warning(
                    f"Settings error in [{section_name}].{k}: empty value. "
                    "Falling back to default."
                )
                continue
            if isinstance(v, int) and v < 1:
                logger.warning(
                    f"Settings error in [{section_name}].{k}: must be positive. "
                    "Falling back to default."
                )
                continue
            filtered_updates[k] = v

        return replace(instance, **filtered_updates)
