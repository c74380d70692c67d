from collections.abc import Iterable
from typing import TextIO

from loguru import logger

from .model import (
    ABSORBING_VERBS,
    REVISION_VERBS,
    Branch,
    BranchInventory,
    InstructionKind,
)

PUSH_SECTION_HEADER = "# Uncomment this section to push the changes."


def classify(line: str) -> InstructionKind:
    """Classify a single line of a rebase instruction list."""
    if not line:
        return InstructionKind.BLANK
    if line.startswith("#"):
        return InstructionKind.COMMENT
    verb = line.split(" ", 1)[0]
    if verb in REVISION_VERBS:
        return InstructionKind.REVISION
    if verb in ABSORBING_VERBS:
        return InstructionKind.ABSORBING
    return InstructionKind.OTHER


def format_push_section(
    remote_name: str,
    branches: list[str],
    pad_before: bool,
    pad_after: bool,
) -> list[str]:
    """
    Build the commented-out section that pushes the updated branches.

    Nothing is produced unless both a remote and at least one branch are
    given, which makes the section opt-in.
    """
    if not branches or not remote_name:
        return []

    section = [""] if pad_before else []
    section.append(PUSH_SECTION_HEADER)
    section.extend(
        f"# exec git push -f {remote_name} {branch}" for branch in branches
    )
    if pad_after:
        section.append("")
    return section


class Restacker:
    """
    Rewrites an instruction list one line at a time.

    Branches pointing at the commit of a pick, reword or edit line are held
    back until the next line that is not a fixup or squash, so that they move
    to the commit produced after everything has been folded into it.
    """

    def __init__(
        self,
        inventory: BranchInventory,
        rebase_head: str = "",
        remote_name: str = "",
    ) -> None:
        self.inventory = inventory
        self.rebase_head = rebase_head
        self.remote_name = remote_name
        self.pending: list[Branch] = []
        self.updated: list[str] = []
        self.wrote_push = False
        self.output: list[str] = []

    def feed(self, line: str) -> None:
        """Process one input line without its trailing newline."""
        kind = classify(line)
        flushed = False
        if kind is not InstructionKind.ABSORBING:
            flushed = self.flush()

        if kind is InstructionKind.BLANK:
            # The blank line left by a flush already separates sections.
            if not flushed:
                self.output.append("")
            self.write_push_section(pad_before=False, pad_after=True)
            return

        if kind is InstructionKind.COMMENT:
            self.write_push_section(pad_before=not flushed, pad_after=True)

        self.output.append(line)

        if kind is InstructionKind.REVISION:
            parts = line.split(" ", 2)
            if len(parts) >= 2:
                self.pending = list(self.inventory.get(parts[1], []))

    def flush(self) -> bool:
        """
        Emit branch updates for the pending batch.

        Reports whether any `exec git branch -f` line was added.
        """
        updated = False
        for branch in self.pending:
            if branch.name == self.rebase_head:
                continue
            self.output.append(f"exec git branch -f {branch.name}")
            self.updated.append(branch.name)
            logger.debug(f"Moving branch {branch.name} ({branch.shorthash})")
            updated = True
        self.pending = []

        if updated:
            self.output.append("")
        return updated

    def write_push_section(self, pad_before: bool, pad_after: bool) -> None:
        if self.wrote_push:
            return
        self.wrote_push = True
        self.output.extend(
            format_push_section(
                self.remote_name, self.updated, pad_before, pad_after
            )
        )

    def finish(self) -> list[str]:
        """Close the last batch and return the rewritten lines."""
        flushed = self.flush()
        self.write_push_section(pad_before=not flushed, pad_after=False)
        return self.output

    def drain(self) -> list[str]:
        """Hand over the lines produced so far."""
        lines, self.output = self.output, []
        return lines


def restack_lines(
    lines: Iterable[str],
    inventory: BranchInventory,
    rebase_head: str = "",
    remote_name: str = "",
) -> list[str]:
    """Restack an instruction list given as lines without newlines."""
    restacker = Restacker(inventory, rebase_head, remote_name)
    for line in lines:
        restacker.feed(line)
    return restacker.finish()


def restack(
    src: TextIO,
    dst: TextIO,
    inventory: BranchInventory,
    rebase_head: str = "",
    remote_name: str = "",
) -> list[str]:
    """
    Restack the instruction list read from src and write it to dst.

    Lines are taken as src yields them, so src should be opened with
    newline="\\n" to keep a stray carriage return inside its line. Every
    output line is terminated with a newline. Returns the names of the
    branches that received an update.
    """
    restacker = Restacker(inventory, rebase_head, remote_name)
    for line in src:
        restacker.feed(line.rstrip("\r\n"))
        dst.writelines(f"{out}\n" for out in restacker.drain())
    dst.writelines(f"{out}\n" for out in restacker.finish())
    logger.info(f"{len(restacker.updated)} branches will be restacked")
    return restacker.updated
