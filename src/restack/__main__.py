import argparse
import sys
import time
from pathlib import Path

from git import GitError
from loguru import logger
from pydantic import ValidationError

from restack import edit
from restack import install
from restack.config import Settings
from restack.errors import RestackError
from restack.model import EditRequest

start_time: float = time.time()

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{message}</level>"


def log_file() -> Path:
    """Log file, kept outside the worktree that Git runs the editor in."""
    return Path.home() / ".restack" / "logs" / "restack.log"


def set_logger(verbose: bool, silent: bool) -> None:
    """
    Set up the Loguru logger.

    Logs go to stderr: stdout is reserved for printed scripts and the
    editor shares the terminal.
    """
    logger.remove()
    if silent:
        logger.add(sink=log_file(), format=LOG_FORMAT, level="ERROR")
        return

    logger.add(
        sink=sys.stderr,
        format=LOG_FORMAT,
        level="DEBUG" if verbose else "INFO",
    )
    if verbose:
        logger.add(sink=log_file(), format=LOG_FORMAT, level="DEBUG")


def parse_instruction_file(file: str) -> Path:
    """Parse the path to an existing rebase instruction list."""
    path = Path(file)
    if not path.is_file():
        raise argparse.ArgumentTypeError(f"{path} is not a file")
    return path


def create_parser() -> argparse.ArgumentParser:
    """Create a parser for the command line arguments."""
    parser = argparse.ArgumentParser(
        prog="restack",
        description="Move branches stacked on rewritten commits during an "
        "interactive rebase.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument(
        "-q", "--silent", action="store_true", help="Disable logging to stderr"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser(
        "setup", help="Install restack as Git's sequence editor"
    )
    setup_parser.add_argument(
        "--print-edit-script",
        action="store_true",
        help="Print the editor script instead of installing it",
        dest="print_script",
    )

    edit_parser = subparsers.add_parser(
        "edit",
        help="Edit a rebase instruction list, moving affected branches",
    )
    edit_parser.add_argument(
        "file",
        metavar="FILE",
        type=parse_instruction_file,
        help="Path to the rebase instruction list",
    )
    edit_parser.add_argument(
        "-e",
        "--editor",
        metavar="EDITOR",
        type=str,
        default=None,
        help="Editor to use for rebase instructions. "
        "Defaults to $GIT_EDITOR, then $EDITOR",
    )
    push_group = edit_parser.add_mutually_exclusive_group()
    push_group.add_argument(
        "--remote",
        metavar="REMOTE",
        type=str,
        default=None,
        help="Remote to suggest pushing restacked branches to. "
        "Defaults to $RESTACK_REMOTE or origin",
        dest="remote_name",
    )
    push_group.add_argument(
        "--no-push",
        action="store_true",
        help="Do not add the commented-out push section",
        dest="no_push",
    )

    return parser


def build_edit_request(args: argparse.Namespace, settings: Settings) -> EditRequest:
    """Combine command line arguments with settings into an edit request."""
    if args.no_push:
        remote_name = ""
    elif args.remote_name is not None:
        remote_name = args.remote_name
    else:
        remote_name = settings.remote_name
    return EditRequest(
        file=args.file,
        editor=edit.resolve_editor(args.editor, settings.default_editor),
        remote_name=remote_name,
        git_timeout=settings.git_timeout,
    )


def main(argv: list[str] | None = None) -> int:
    """
    restack

    Parses the command line and runs either `setup`, which installs restack
    as Git's sequence editor, or `edit`, which restacks a rebase instruction
    list and opens it in the user's editor.
    """
    args = create_parser().parse_args(argv)
    set_logger(args.verbose, args.silent)

    exit_code = 0
    try:
        if args.command == "setup":
            install.install(print_script=args.print_script)
        else:
            settings = Settings.from_env()
            edit.edit(build_edit_request(args, settings))
    except (RestackError, GitError, ValidationError) as e:
        logger.error(e)
        exit_code = 1
    finally:
        logger.debug(f"Execution time: {time.time() - start_time:.2f} seconds")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
