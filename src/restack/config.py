import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

DEFAULT_REMOTE = "origin"
DEFAULT_EDITOR = "vim"
DEFAULT_GIT_TIMEOUT = 5.0


class Settings(BaseModel):
    """Runtime settings, overridable from the environment or a .env file."""

    remote_name: str = DEFAULT_REMOTE
    git_timeout: float = Field(DEFAULT_GIT_TIMEOUT, gt=0)
    default_editor: str = Field(DEFAULT_EDITOR, min_length=1)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from RESTACK_* environment variables.

        Values from a .env file found from the working directory upwards
        are loaded first but never override variables already set.
        """
        load_dotenv(find_dotenv(usecwd=True))
        values: dict[str, str] = {}
        if (remote := os.environ.get("RESTACK_REMOTE")) is not None:
            values["remote_name"] = remote
        if timeout := os.environ.get("RESTACK_GIT_TIMEOUT"):
            values["git_timeout"] = timeout
        return cls.model_validate(values)
