"""Blocking filesystem helpers shared by the file-backed stores.

These run inside worker threads (asyncio.to_thread); none of them touch
the event loop.
"""

import logging
import os
import uuid
from pathlib import Path

from simple_cache.consts import TEMP_FILE_PREFIX, TEMP_FILE_SUFFIX

logger = logging.getLogger(__name__)


def is_temp_file(path: Path) -> bool:
    """Check whether a path is an in-progress atomic write."""
    return path.name.startswith(TEMP_FILE_PREFIX) and path.name.endswith(TEMP_FILE_SUFFIX)


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Write bytes to a temp sibling, then rename it over the target.

    Parent directories are created as needed. A concurrent reader sees
    either the previous content or the new content, never a partial file.

    Args:
        path: Destination file.
        data: Bytes to write.

    Raises:
        OSError: If the directory, temp file or rename fails.
    """
    try:
        _write_via_temp(path, data)
    except FileNotFoundError:
        # A concurrent delete pruned the parent between mkdir and open
        logger.debug(f"Parent of {path} vanished during write, retrying")
        _write_via_temp(path, data)


def _write_via_temp(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{TEMP_FILE_PREFIX}{path.name}.{uuid.uuid4().hex[:8]}{TEMP_FILE_SUFFIX}")
    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def read_bytes_or_none(path: Path) -> bytes | None:
    """Read a file, returning None if it does not exist."""
    try:
        return path.read_bytes()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return None


def prune_empty_dirs(start: Path, stop: Path) -> None:
    """Remove empty directories from `start` upwards, stopping before `stop`."""
    current = start
    while current != stop and stop in current.parents:
        try:
            current.rmdir()
        except OSError:
            # Not empty (or already gone); nothing further up can be empty either
            return
        current = current.parent


def delete_tree_files(root: Path) -> tuple[int, int]:
    """Delete every file below `root`, continuing past individual failures.

    Emptied directories are removed afterwards; `root` itself is kept.

    Returns:
        Tuple of (files deleted, files that failed to delete).
    """
    deleted = 0
    failed = 0
    if not root.exists():
        return deleted, failed

    for dirpath, dirnames, filenames in os.walk(root, topdown=False):
        current = Path(dirpath)
        for name in filenames:
            file_path = current / name
            try:
                file_path.unlink()
                deleted += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                failed += 1
                logger.warning(f"Failed to delete cache file {file_path}: {e}")
        if current != root:
            try:
                current.rmdir()
            except OSError:
                pass

    return deleted, failed
