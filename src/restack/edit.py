import os
import subprocess
import tempfile
from pathlib import Path

from git import Repo
from loguru import logger

from . import file_ops, get_branches
from .errors import EditorError, InstallError, RewriteError
from .model import EditRequest
from .restack import restack

# Editors detect the file type from this name.
TODO_FILE_NAME = "git-rebase-todo"


def resolve_editor(explicit: str | None, default: str = "vim") -> str:
    """Pick the editor: --editor, then $GIT_EDITOR, then $EDITOR."""
    for candidate in (
        explicit,
        os.environ.get("GIT_EDITOR"),
        os.environ.get("EDITOR"),
    ):
        if candidate:
            return candidate
    return default


def run_editor(editor: str, path: Path) -> None:
    """
    Run the editor on path and wait for it to exit.

    The editor value may be any shell command, including "FOO=bar vim -f",
    so it is interpreted by sh with the file passed as $1:

        sh -c "$EDITOR \"$1\"" restack FILE
    """
    command = ["sh", "-c", f'{editor} "$1"', "restack", str(path)]
    logger.debug(f"running command: {command}")
    try:
        process = subprocess.run(command, check=False)
    except OSError as e:
        raise EditorError(editor, None, str(e)) from e
    if process.returncode != 0:
        logger.error(f"Editor exited with status {process.returncode}")
        raise EditorError(editor, process.returncode)


def write_restacked(
    repo: Repo, src: Path, dst: Path, remote_name: str, timeout: float
) -> list[str]:
    """Restack the instruction list at src into a new file at dst."""
    rebase_head = get_branches.rebase_head_name(repo)
    inventory = get_branches.build_inventory(
        get_branches.list_branches(repo, timeout)
    )
    # Lines end at "\n" only and undecodable bytes are carried through as-is.
    try:
        with (
            open(
                src, encoding="utf-8", errors="surrogateescape", newline="\n"
            ) as reader,
            open(
                dst,
                "w",
                encoding="utf-8",
                errors="surrogateescape",
                newline="\n",
            ) as writer,
        ):
            return restack(reader, writer, inventory, rebase_head, remote_name)
    except (OSError, UnicodeError) as e:
        logger.error(f"Failed to restack {src}: {e}")
        raise RewriteError(f"could not restack {src} into {dst}: {e}") from e


def edit(request: EditRequest) -> None:
    """
    Restack the instruction list, let the user edit it, and install it.

    The original file is only replaced once the editor exits successfully.
    The temporary directory is removed on every path.
    """
    repo = get_branches.open_repo(request.cwd)
    with tempfile.TemporaryDirectory(prefix="restack-") as temp_dir:
        todo_path = Path(temp_dir) / TODO_FILE_NAME
        write_restacked(
            repo,
            request.file,
            todo_path,
            request.remote_name,
            request.git_timeout,
        )
        run_editor(request.editor, todo_path)
        try:
            file_ops.rename(todo_path, request.file)
        except OSError as e:
            logger.error(f"Failed to install {todo_path}: {e}")
            raise InstallError(todo_path, request.file, e) from e
    logger.debug(f"Installed restacked instructions at {request.file}")
