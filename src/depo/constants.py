import os
from collections.abc import Mapping
from pathlib import Path

"""Global constants and default path resolution for depo.

This module defines the on-disk layout of the vendor root, the names of the
files kept inside it, and the git defaults used when a repository entry does
not specify its own.
"""

# --- Identity ---
APP_NAME = "depo"
"""str: The application name, also used as the logger name."""

# --- Paths ---
ROOT_ENV_VAR = "DEPO_ROOT"
"""str: Environment variable that overrides the default vendor root."""

DEFAULT_ROOT_NAME = ".vendor"
"""str: Name of the vendor root directory created under the user's home."""

CONFIG_FILENAME = "config.json"
"""str: The JSON document listing tracked repositories."""

SETTINGS_FILENAME = "settings.toml"
"""str: Optional TOML file holding user preferences."""

# --- Git / Logic Constants ---
METADATA_DIR = ".git"
"""str: Marker directory whose presence means a repository is cloned."""

DEFAULT_BRANCH = "main"
"""str: Branch tracked when none is given at add time."""

DEFAULT_REMOTE = "origin"
"""str: Remote used for fetch, pull and tracking branches."""

CLONE_DEPTH = 1
"""int: History depth requested for fresh clones."""


def default_root(environ: Mapping[str, str] | None = None) -> Path:
    """Resolves the vendor root from the environment.

    Args:
        environ (Mapping[str, str] | None): Environment to read. Defaults to
            ``os.environ``.

    Returns:
        Path: ``$DEPO_ROOT`` if set, otherwise ``$HOME/.vendor``.
    """
    env = os.environ if environ is None else environ
    if override := env.get(ROOT_ENV_VAR):
        return Path(override).expanduser()
    home = env.get("HOME")
    base = Path(home) if home else Path.home()
    return base / DEFAULT_ROOT_NAME
