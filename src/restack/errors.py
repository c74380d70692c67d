from pathlib import Path


class RestackError(Exception):
    """Base class for every failure restack reports to the user."""


class InventoryError(RestackError):
    """The branches or the rebase head could not be determined."""


class NotRebasingError(InventoryError):
    """The repository has no rebase in progress."""

    def __init__(self, git_dir: Path) -> None:
        self.git_dir = git_dir
        super().__init__(f"repository {git_dir} is not currently rebasing")


class RewriteError(RestackError):
    """The instruction list could not be read or the rewrite not written."""


class EditorError(RestackError):
    """The editor could not be started or exited with a non-zero status."""

    def __init__(self, editor: str, status: int | None, reason: str = "") -> None:
        self.editor = editor
        self.status = status
        if status is None:
            message = f"could not run editor {editor!r}: {reason}"
        else:
            message = f"editor {editor!r} exited with status {status}"
        super().__init__(message)


class InstallError(RestackError):
    """The edited instruction list could not replace the original."""

    def __init__(self, src: Path, dst: Path, reason: OSError) -> None:
        self.src = src
        self.dst = dst
        super().__init__(f"could not overwrite {dst} with {src}: {reason}")


class SetupError(RestackError):
    """restack could not be installed as Git's sequence editor."""
