import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .config import Settings
from .constants import APP_NAME, METADATA_DIR
from .exceptions import ExternalCommandError, NotFoundError
from .git_wrapper import GitRunner
from .store import Registry, Repo

console = Console()
logger = logging.getLogger(APP_NAME)


class SyncStep(Enum):
    """Stages a repository passes through while being synchronized.

    Which path runs is decided by probing for the metadata directory. A fresh
    checkout goes PREPARE -> CLONE. An existing one goes FETCH -> CHECKOUT ->
    PULL, detouring through CREATE_BRANCH when the branch has no local
    counterpart yet.
    """

    PREPARE = "prepare"
    CLONE = "clone"
    FETCH = "fetch"
    CHECKOUT = "checkout"
    CREATE_BRANCH = "create-branch"
    PULL = "pull"


_FAILURE_LABELS = {
    SyncStep.PREPARE: "creating directory",
    SyncStep.CLONE: "cloning",
    SyncStep.FETCH: "fetching",
    SyncStep.CREATE_BRANCH: "checking out branch",
    SyncStep.PULL: "pulling",
}


@dataclass
class SyncResult:
    """Outcome of synchronizing a single repository.

    Attributes:
        repo (Repo): The repository that was processed.
        action (str): "clone" for a fresh checkout, "refresh" for an existing one.
        failed_step (SyncStep | None): The step that failed, or None on success.
        error (str | None): The failure message, or None on success.
    """

    repo: Repo
    action: str
    failed_step: SyncStep | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.failed_step is None


class SyncEngine:
    """Brings local clones in line with their registry entries.

    Repositories are processed one at a time. A failure in one repository is
    reported and recorded, then processing moves on to the next; nothing is
    retried.

    Attributes:
        settings (Settings): Provides the remote name and clone depth.
        runner (GitRunner): Executes git commands.
    """

    def __init__(self, settings: Settings, runner: GitRunner | None = None):
        self.settings = settings
        self.runner = runner or GitRunner()

    def select(self, registry: Registry, name: str | None = None) -> list[Repo]:
        """Picks the repositories an update should touch.

        Args:
            registry (Registry): The loaded registry.
            name (str | None): Restrict processing to this entry.

        Returns:
            list[Repo]: Every entry in registry order, or just the named one.

        Raises:
            NotFoundError: If `name` is given but matches no entry.
        """
        if name is None:
            return list(registry.repos)
        repo = registry.find(name)
        if repo is None:
            raise NotFoundError(name)
        return [repo]

    def update(self, registry: Registry, name: str | None = None) -> list[SyncResult]:
        """Synchronizes the selected repositories sequentially.

        Raises:
            NotFoundError: If `name` is given but matches no entry.
        """
        return [self.sync_repo(repo) for repo in self.select(registry, name)]

    def sync_repo(self, repo: Repo) -> SyncResult:
        """Runs the clone-or-refresh state machine for one repository."""
        console.print(f"Processing [cyan]{escape(repo.name)}[/cyan]...")
        path = Path(repo.path).expanduser()

        if (path / METADATA_DIR).exists():
            console.print("  Updating existing repo...")
            result = self._refresh(repo, path)
        else:
            console.print("  Cloning repo...")
            result = self._clone(repo, path)

        if result.ok:
            logger.info(f"{repo.name}: {result.action} complete")
            console.print(f"  [green]✓ {escape(repo.name)} done[/green]\n")
        return result

    def _clone(self, repo: Repo, path: Path) -> SyncResult:
        step = SyncStep.PREPARE
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            step = SyncStep.CLONE
            self.runner.clone(
                repo.url, path, repo.branch, self.settings.core.clone_depth
            )
        except (ExternalCommandError, OSError) as e:
            return self._fail(repo, "clone", step, e)
        return SyncResult(repo=repo, action="clone")

    def _refresh(self, repo: Repo, path: Path) -> SyncResult:
        remote = self.settings.core.remote_name
        step = SyncStep.FETCH
        try:
            self.runner.fetch(path, remote)

            step = SyncStep.CHECKOUT
            try:
                self.runner.checkout(path, repo.branch)
            except ExternalCommandError as e:
                logger.debug(f"{repo.name}: no local {repo.branch} ({e}), creating it")
                step = SyncStep.CREATE_BRANCH
                self.runner.checkout_tracking(path, repo.branch, remote)

            step = SyncStep.PULL
            self.runner.pull(path, remote, repo.branch)
        except ExternalCommandError as e:
            return self._fail(repo, "refresh", step, e)
        return SyncResult(repo=repo, action="refresh")

    def _fail(
        self, repo: Repo, action: str, step: SyncStep, error: Exception
    ) -> SyncResult:
        label = _FAILURE_LABELS.get(step, step.value)
        logger.error(f"{repo.name}: {step.value} failed: {error}")
        console.print(f"  [red]Error {label}: {escape(str(error))}[/red]\n")
        return SyncResult(repo=repo, action=action, failed_step=step, error=str(error))
