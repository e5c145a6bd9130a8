"""depo: keep local mirrors of reference git repositories.

This package tracks a list of external repositories in a JSON document under
a vendor root (``~/.vendor`` by default) and clones or refreshes local
checkouts against that list.
"""

from . import (
    cli,
    config,
    constants,
    exceptions,
    git_wrapper,
    registry,
    store,
    sync,
)

__all__ = [
    "cli",
    "config",
    "constants",
    "exceptions",
    "git_wrapper",
    "registry",
    "store",
    "sync",
]
