"""Finding and removing lock files left behind by dead owners.

A ``LockFile`` that is never closed (crashed process, leaked object) keeps
its file on disk, and every later acquirer times out. Each lock file starts
with the metadata ``LockFile`` writes::

    pid=<owner pid>
    created=<unix timestamp>

A lock is stale when it is older than ``max_age_seconds`` and its owner is
not a running process. Age comes from ``created=``; files without it (an
owner that died before writing metadata) fall back to their mtime.
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .core import PathLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockOwner:
    """Metadata read back from a lock file."""

    pid: Optional[int]
    created: Optional[float]

    @property
    def alive(self) -> Optional[bool]:
        """Whether ``pid`` is a running process; ``None`` when unknown."""
        return None if self.pid is None else _pid_running(self.pid)


@dataclass(frozen=True)
class StaleLock:
    path: Path
    age_seconds: float
    owner: LockOwner


def _pid_running(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except PermissionError:
        # Exists, owned by another user.
        return True
    except OSError:
        return False
    return True


def read_lock_owner(path: PathLike) -> LockOwner:
    """Parse the ``key=value`` lines ``LockFile`` writes.

    Unreadable files and malformed values yield ``None`` fields.
    """
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return LockOwner(pid=None, created=None)

    fields: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            fields[key.strip()] = value.strip()

    pid: Optional[int] = None
    created: Optional[float] = None
    try:
        pid = int(fields["pid"])
    except (KeyError, ValueError):
        pass
    try:
        created = float(fields["created"])
    except (KeyError, ValueError):
        pass
    return LockOwner(pid=pid, created=created)


def find_stale_locks(
    lock_files: Iterable[PathLike],
    *,
    max_age_seconds: float,
    now: Optional[float] = None,
) -> list[StaleLock]:
    """Return the lock files older than ``max_age_seconds`` whose owner is gone.

    Missing files are skipped. The result is sorted by path.
    """
    now_ts = time.time() if now is None else float(now)
    stale: list[StaleLock] = []

    for entry in lock_files:
        path = Path(entry)
        owner = read_lock_owner(path)
        created = owner.created
        if created is None:
            try:
                created = path.stat().st_mtime
            except FileNotFoundError:
                continue

        age = max(0.0, now_ts - created)
        if age <= max_age_seconds or owner.alive:
            continue
        stale.append(StaleLock(path=path, age_seconds=age, owner=owner))

    stale.sort(key=lambda s: str(s.path))
    return stale


def cleanup_stale_locks(
    lock_files: Iterable[PathLike],
    *,
    max_age_seconds: Optional[float] = None,
    dry_run: bool = False,
    now: Optional[float] = None,
) -> tuple[list[StaleLock], list[Path]]:
    """Delete stale lock files.

    ``max_age_seconds`` defaults to ``stale_locks.max_age_seconds`` from
    configuration. Files that cannot be removed are logged and skipped.

    Returns:
        ``(stale, removed)``; ``removed`` is empty for a dry run.
    """
    if max_age_seconds is None:
        from oshelpers.core.config import get_stale_lock_settings

        max_age_seconds = get_stale_lock_settings().max_age_seconds

    stale = find_stale_locks(lock_files, max_age_seconds=max_age_seconds, now=now)
    if dry_run:
        return stale, []

    removed: list[Path] = []
    for item in stale:
        try:
            item.path.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.warning("Could not remove stale lock %s: %s", item.path, exc)
            continue
        logger.debug("Removed stale lock %s (owner pid=%s)", item.path, item.owner.pid)
        removed.append(item.path)

    return stale, removed


__all__ = ["LockOwner", "StaleLock", "cleanup_stale_locks", "find_stale_locks", "read_lock_owner"]
