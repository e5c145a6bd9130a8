"""Add, remove and list operations over the tracked repository registry.

Each operation loads a fresh copy of the registry from the store, validates
the request against it, and only then mutates and saves. A failed save
propagates to the caller, so the on-disk document is the single source of
truth.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .constants import APP_NAME, METADATA_DIR
from .exceptions import DuplicateNameError, NotFoundError
from .store import ConfigStore, Repo

logger = logging.getLogger(APP_NAME)


@dataclass
class RepoStatus:
    """A registry entry paired with its on-disk clone state."""

    repo: Repo
    cloned: bool

    @property
    def label(self) -> str:
        return "cloned" if self.cloned else "not cloned"


def is_cloned(path: str | Path) -> bool:
    """Checks whether a git metadata directory exists inside `path`."""
    return (Path(path).expanduser() / METADATA_DIR).exists()


def add(
    store: ConfigStore,
    name: str,
    url: str,
    branch: str | None = None,
    path: str | None = None,
) -> Repo:
    """Registers a new repository.

    Args:
        store (ConfigStore): Store backing the registry.
        name (str): Unique name for the entry.
        url (str): Remote URL to clone from.
        branch (str | None): Branch to track. Defaults to the configured
            default branch ("main").
        path (str | None): Local clone directory. Defaults to ``<root>/<name>``.

    Returns:
        Repo: The record that was stored.

    Raises:
        ValueError: If `name` or `url` is empty.
        DuplicateNameError: If `name` is already registered.
    """
    if not name or not url:
        raise ValueError("Both a name and a url are required")

    registry = store.load()
    if registry.find(name) is not None:
        raise DuplicateNameError(name)

    repo = Repo(
        name=name,
        url=url,
        branch=branch or store.settings.core.default_branch,
        path=path or str(store.settings.default_path(name)),
    )
    registry.repos.append(repo)
    store.save(registry)
    logger.info(f"Added {name} ({url}) tracking {repo.branch}")
    return repo


def remove(store: ConfigStore, name: str) -> Repo:
    """Unregisters a repository. The local clone is left in place.

    Raises:
        NotFoundError: If no entry has that name.
    """
    registry = store.load()
    for i, repo in enumerate(registry.repos):
        if repo.name == name:
            del registry.repos[i]
            store.save(registry)
            logger.info(f"Removed {name}")
            return repo
    raise NotFoundError(name)


def list_repos(store: ConfigStore) -> list[RepoStatus]:
    """Returns every registered repository with a freshly computed clone status."""
    return [
        RepoStatus(repo=repo, cloned=is_cloned(repo.path))
        for repo in store.load().repos
    ]
