import errno
import os
import shutil
import stat
from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

from loguru import logger

RenameFn: TypeAlias = Callable[[Path, Path], None]


def is_cross_device_error(err: OSError) -> bool:
    """Report whether a rename failed because it crossed filesystems."""
    return err.errno == errno.EXDEV


def copy_rename(src: Path, dst: Path) -> None:
    """
    Move a file by copying it into place and deleting the original.

    Not atomic. The source is only removed once the destination holds its
    contents and permissions, so any earlier failure leaves it untouched.
    """
    mode = stat.S_IMODE(os.stat(src).st_mode)

    with open(src, "rb") as reader, open(dst, "wb") as writer:
        shutil.copyfileobj(reader, writer)
        writer.flush()
        os.fsync(writer.fileno())

    os.chmod(dst, mode)
    os.unlink(src)


def rename(src: Path, dst: Path, rename_fn: RenameFn = os.rename) -> None:
    """
    Rename src to dst, copying across filesystem boundaries if needed.

    /tmp is often mounted on a different filesystem than the repository,
    in which case os.rename fails with EXDEV. Every other error propagates.
    """
    try:
        rename_fn(src, dst)
    except OSError as e:
        if not is_cross_device_error(e):
            raise
        logger.debug(f"Cannot rename {src} across devices, copying instead")
        copy_rename(src, dst)
