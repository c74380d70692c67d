"""Tests for the restack command line."""

import sys
from pathlib import Path

import pytest
from git import Repo
from loguru import logger

from restack import __main__ as cli
from restack import install
from restack.config import Settings


@pytest.fixture(autouse=True)
def restore_logger(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GIT_EDITOR", raising=False)
    monkeypatch.delenv("EDITOR", raising=False)
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def todo_file(tmp_path: Path) -> Path:
    path = tmp_path / "git-rebase-todo"
    path.write_text("pick abc1234 Initial commit\n", encoding="utf-8")
    return path


def parse(*argv: str):
    return cli.create_parser().parse_args(list(argv))


def test_parse_setup():
    args = parse("setup", "--print-edit-script")
    assert args.command == "setup"
    assert args.print_script is True
    assert args.verbose is False


def test_parse_edit(todo_file: Path):
    args = parse("-v", "edit", "-e", "nano -w", str(todo_file))
    assert args.command == "edit"
    assert args.file == todo_file
    assert args.editor == "nano -w"
    assert args.remote_name is None
    assert args.no_push is False
    assert args.verbose is True


def test_parse_edit_missing_file(tmp_path: Path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        parse("edit", str(tmp_path / "missing"))
    assert exc_info.value.code == 2
    assert "is not a file" in capsys.readouterr().err


def test_parse_edit_remote_conflicts_with_no_push(todo_file: Path):
    with pytest.raises(SystemExit):
        parse("edit", "--remote", "upstream", "--no-push", str(todo_file))


def test_parse_requires_command():
    with pytest.raises(SystemExit):
        parse()


@pytest.mark.parametrize(
    "extra, want",
    [([], "origin"), (["--remote", "upstream"], "upstream"), (["--no-push"], "")],
)
def test_build_edit_request_remote(todo_file: Path, extra, want):
    args = parse("edit", *extra, str(todo_file))
    request = cli.build_edit_request(args, Settings())
    assert request.remote_name == want
    assert request.editor == "vim"
    assert request.git_timeout == 5.0


def test_build_edit_request_settings(todo_file: Path, monkeypatch):
    monkeypatch.setenv("EDITOR", "nano")
    args = parse("edit", str(todo_file))
    settings = Settings(remote_name="fork", git_timeout=1)
    request = cli.build_edit_request(args, settings)
    assert request.remote_name == "fork"
    assert request.editor == "nano"
    assert request.git_timeout == 1


def test_main_print_edit_script(capsys):
    assert cli.main(["setup", "--print-edit-script"]) == 0
    assert capsys.readouterr().out == install.EDIT_SCRIPT


def test_main_edit(stacked_repo: Repo, monkeypatch, tmp_path: Path):
    monkeypatch.chdir(stacked_repo.working_dir)
    todo = tmp_path / "todo"
    todo.write_text("exec true\n", encoding="utf-8")
    assert cli.main(["edit", "--editor", "true", "--no-push", str(todo)]) == 0
    assert todo.read_text(encoding="utf-8") == "exec true\n"


def test_main_edit_failure(stacked_repo: Repo, monkeypatch, tmp_path: Path, capsys):
    monkeypatch.chdir(stacked_repo.working_dir)
    todo = tmp_path / "todo"
    todo.write_text("exec true\n", encoding="utf-8")
    assert cli.main(["edit", "--editor", "false", str(todo)]) == 1
    assert "exited with status 1" in capsys.readouterr().err


def test_main_edit_outside_repository(todo_file: Path, capsys):
    assert cli.main(["edit", "--editor", "true", str(todo_file)]) == 1
    assert "not a git repository" in capsys.readouterr().err


@pytest.mark.parametrize("verbose, silent", [(True, False), (False, True)])
def test_log_file_outside_worktree(tmp_path: Path, monkeypatch, verbose, silent):
    home = tmp_path / "home"
    monkeypatch.setenv("HOME", str(home))
    cli.set_logger(verbose=verbose, silent=silent)
    logger.error("restack failed")
    logger.remove()

    assert "restack failed" in (home / ".restack" / "logs" / "restack.log").read_text()
    assert not (tmp_path / "logs").exists()


def test_main_edit_undecodable_bytes(stacked_repo: Repo, monkeypatch, tmp_path: Path):
    monkeypatch.chdir(stacked_repo.working_dir)
    todo = tmp_path / "todo"
    todo.write_bytes(b"pick abc1234 caf\xe9\n")
    assert cli.main(["edit", "--editor", "true", "--no-push", str(todo)]) == 0
    assert todo.read_bytes() == b"pick abc1234 caf\xe9\n"
