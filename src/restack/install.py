import sys
from pathlib import Path
from typing import TextIO

from loguru import logger

from .errors import SetupError
from .get_branches import set_global_config

EDIT_SCRIPT = """\
#!/bin/sh -e

editor=$(git var GIT_EDITOR)
restack=$(command -v restack || echo "")

if [ -n "$restack" ]; then
\t"$restack" edit --editor="$editor" "$@"
else
\techo "WARNING:" >&2
\techo "  Could not find restack. Falling back to $editor." >&2
\techo "  Install the restack package to move stacked branches." >&2
\techo "" >&2

\t"$editor" "$@"
fi
"""


def write_edit_script(home: Path) -> Path:
    """Write the sequence editor script to ~/.restack/edit.sh."""
    script_path = home / ".restack" / "edit.sh"
    try:
        script_path.parent.mkdir(parents=True, exist_ok=True)
        script_path.write_text(EDIT_SCRIPT, encoding="utf-8")
        script_path.chmod(0o755)
    except OSError as e:
        raise SetupError(f"failed to write {script_path}: {e}") from e
    return script_path


def install(
    print_script: bool = False,
    home: Path | None = None,
    stdout: TextIO | None = None,
) -> Path | None:
    """
    Set restack up as Git's sequence editor.

    With print_script, only print the editor script so that it can be
    installed by hand.
    """
    if print_script:
        (stdout or sys.stdout).write(EDIT_SCRIPT)
        return None

    script_path = write_edit_script(home or Path.home())
    set_global_config("sequence.editor", str(script_path))
    logger.info("restack has been set up successfully")
    return script_path
