from pathlib import Path

import pytest
from git import Actor, Repo

AUTHOR = Actor("Test User", "test@example.com")


def commit_file(repo: Repo, name: str, content: str, message: str) -> str:
    """Write a file into the repository and commit it."""
    path = Path(repo.working_dir) / name
    path.write_text(content, encoding="utf-8")
    repo.index.add([name])
    commit = repo.index.commit(message, author=AUTHOR, committer=AUTHOR)
    return commit.hexsha


@pytest.fixture
def empty_repo(tmp_path: Path) -> Repo:
    """A repository with no commits."""
    return Repo.init(tmp_path / "repo", initial_branch="main")


@pytest.fixture
def repo(empty_repo: Repo) -> Repo:
    """A repository with a single commit on main."""
    commit_file(empty_repo, "README", "hello\n", "Initial commit")
    return empty_repo


@pytest.fixture
def stacked_repo(repo: Repo) -> Repo:
    """
    A repository with a stack of branches, rebasing feature2.

    main <- feature1 <- feature2
    """
    repo.create_head("feature1").checkout()
    commit_file(repo, "one.txt", "1\n", "Implement feature1")
    repo.create_head("feature2").checkout()
    commit_file(repo, "two.txt", "2\n", "Implement feature2")

    state_dir = Path(repo.git_dir) / "rebase-merge"
    state_dir.mkdir()
    (state_dir / "head-name").write_text("refs/heads/feature2\n")
    return repo
