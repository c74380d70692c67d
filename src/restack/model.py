from enum import StrEnum
from typing import TypeAlias
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Branch(BaseModel):
    """A local branch and the abbreviated hash of the commit it points at."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    shorthash: str = Field(..., min_length=1)


BranchInventory: TypeAlias = dict[str, list[Branch]]


class InstructionKind(StrEnum):
    """How a line of the rebase instruction list is treated."""

    REVISION = "revision"
    ABSORBING = "absorbing"
    COMMENT = "comment"
    BLANK = "blank"
    OTHER = "other"


REVISION_VERBS = frozenset({"pick", "p", "reword", "r", "edit", "e"})
ABSORBING_VERBS = frozenset({"fixup", "f", "squash", "s"})


class EditRequest(BaseModel):
    """A request to restack and edit an instruction list in place."""

    file: Path
    editor: str = Field(..., min_length=1)
    remote_name: str = ""
    git_timeout: float = Field(5.0, gt=0)
    cwd: Path = Field(default_factory=Path.cwd)
