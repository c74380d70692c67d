from collections.abc import Iterable
from pathlib import Path

from git import Git, GitCommandError, GitError, Repo
from loguru import logger

from .errors import InventoryError, NotRebasingError, SetupError
from .model import Branch, BranchInventory

REBASE_STATE_DIRS = ("rebase-apply", "rebase-merge")
HEADS_PREFIX = "refs/heads/"


def open_repo(path: Path) -> Repo:
    """Open the repository containing the given path."""
    try:
        return Repo(path, search_parent_directories=True)
    except GitError as e:
        raise InventoryError(f"{path} is not a git repository") from e


def git_dir(repo: Repo) -> Path:
    """Report the .git directory of the repository's working tree."""
    path = Path(repo.git_dir)
    if not path.is_absolute():
        path = Path(repo.working_dir) / path
    return path


def parse_show_ref(output: str) -> list[Branch]:
    """
    Parse the output of `git show-ref --heads --abbrev`.

    Each line reads "<hash> refs/heads/<name>". Lines for other refs are
    ignored. Branches are returned in the order git listed them.
    """
    branches = []
    for line in output.splitlines():
        parts = line.split(" ")
        if len(parts) < 2 or not parts[1].startswith(HEADS_PREFIX):
            continue
        name = parts[1].removeprefix(HEADS_PREFIX)
        branches.append(Branch(name=name, shorthash=parts[0]))
    return branches


def list_branches(repo: Repo, timeout: float) -> list[Branch]:
    """List local branches with the abbreviated hashes of their commits."""
    try:
        output = repo.git.show_ref(
            "--heads", "--abbrev", kill_after_timeout=timeout
        )
    except GitCommandError as e:
        logger.error(f"Failed to list branches: {e}")
        raise InventoryError(f"git show-ref failed: {e}") from e
    branches = parse_show_ref(output)
    logger.debug(f"Found {len(branches)} branches")
    return branches


def build_inventory(branches: Iterable[Branch]) -> BranchInventory:
    """Group branches by the hash they point at, keeping their order."""
    inventory: BranchInventory = {}
    for branch in branches:
        inventory.setdefault(branch.shorthash, []).append(branch)
    return inventory


def rebase_head_name(repo: Repo) -> str:
    """
    Report the name of the branch currently being rebased.

    Git does not expose this directly, so the head-name file of the rebase
    state directory is read the same way `git status` does it.

    Raises:
        NotRebasingError: If no rebase is in progress.
        InventoryError: If the rebase state cannot be read.
    """
    state_root = git_dir(repo)
    for state_dir in REBASE_STATE_DIRS:
        head_file = state_root / state_dir / "head-name"
        try:
            name = head_file.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            continue
        except OSError as e:
            raise InventoryError(
                f"failed to read rebase state from {head_file}: {e}"
            ) from e
        name = name.removeprefix(HEADS_PREFIX)
        logger.debug(f"Rebasing branch {name!r}")
        return name

    raise NotRebasingError(state_root)


def set_global_config(key: str, value: str) -> None:
    """Modify the current user's global git configuration."""
    try:
        Git().config("--global", key, value)
    except GitCommandError as e:
        logger.error(f"Failed to set {key}: {e}")
        raise SetupError(f"could not set {key}: {e}") from e
