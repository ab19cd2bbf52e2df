"""Lock files: a file on disk used as a semaphore between threads and processes.

The lock is the file itself. ``LockFile`` acquires by atomically creating
``path`` with ``O_CREAT | O_EXCL`` and releases by closing and deleting it.
Contention (the file already exists) is retried with exponential backoff
until the deadline; every other ``OSError`` propagates immediately.

Backoff: the delay starts at ``initial_delay`` and is multiplied by
``multiplier`` after each of the first ``growth_limit`` retries, then held
constant. ``initial_delay=0.01, growth_limit=2, multiplier=2`` sleeps
0.01, 0.02, 0.04, 0.04, ...

A lock that is never closed leaves its file behind. See ``stale_locks`` for
discovering and removing such leftovers.
"""
from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from oshelpers.core.config import get_lock_file_settings
from oshelpers.core.exceptions import InvalidArgumentError, LockTimeoutError

from .core import PathLike

logger = logging.getLogger(__name__)

_LOCK_FLAGS = os.O_CREAT | os.O_EXCL | os.O_RDWR | getattr(os, "O_BINARY", 0)


def retry_delays(initial_delay: float, growth_limit: int, multiplier: float) -> Iterator[float]:
    """Yield the sleep duration used before each successive retry (endless)."""
    delay = float(initial_delay)
    counter = 0
    while True:
        yield delay
        if counter < growth_limit:
            delay *= multiplier
        counter += 1


class LockFile:
    """Exclusive lock backed by the existence of ``path``.

    Construction blocks until the file is created or the deadline passes.

    Args:
        path: Lock file path; resolved to an absolute path once.
        timeout: Maximum seconds to keep retrying. ``None`` uses
            ``lock_file.timeout_seconds`` from configuration (``null`` there
            means retry forever).
        growth_limit: Number of retries after which the delay stops growing.
        initial_delay: First retry delay in seconds.
        multiplier: Factor applied to the delay while it is still growing.

    Raises:
        InvalidArgumentError: ``path`` is empty.
        LockTimeoutError: The file could not be created before the deadline.
        OSError: Any failure other than the file already existing.
    """

    def __init__(
        self,
        path: PathLike,
        timeout: Optional[float] = None,
        growth_limit: Optional[int] = None,
        initial_delay: Optional[float] = None,
        multiplier: Optional[float] = None,
    ) -> None:
        if path is None or not os.fspath(path):
            raise InvalidArgumentError("Lock file path must not be empty")

        # Resolve now so a later chdir() cannot move the lock.
        self.path = Path(os.path.abspath(os.fspath(path)))
        self._fd: Optional[int] = None

        if None in (timeout, growth_limit, initial_delay, multiplier):
            settings = get_lock_file_settings()
            if timeout is None:
                timeout = settings.timeout_seconds
            if growth_limit is None:
                growth_limit = settings.growth_limit
            if initial_delay is None:
                initial_delay = settings.initial_delay_seconds
            if multiplier is None:
                multiplier = settings.multiplier

        self.timeout = timeout
        self.growth_limit = int(growth_limit)
        self.initial_delay = float(initial_delay)
        self.multiplier = float(multiplier)
        self.attempts = 0

        self._acquire()

    def _acquire(self) -> None:
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        delays = retry_delays(self.initial_delay, self.growth_limit, self.multiplier)

        while deadline is None or time.monotonic() <= deadline:
            self.attempts += 1
            try:
                fd = os.open(self.path, _LOCK_FLAGS, 0o644)
            except FileExistsError:
                delay = next(delays)
                logger.debug(
                    "Lock %s is held elsewhere (attempt %d); retrying in %.3fs",
                    self.path,
                    self.attempts,
                    delay,
                )
                time.sleep(delay)
                continue

            try:
                os.write(fd, _lock_metadata().encode("utf-8"))
            except BaseException:
                os.close(fd)
                self.path.unlink(missing_ok=True)
                raise
            self._fd = fd
            logger.debug("Acquired lock %s after %d attempt(s)", self.path, self.attempts)
            return

        raise LockTimeoutError(
            f"Could not acquire lock {self.path} within {self.timeout}s",
            path=str(self.path),
            timeout=self.timeout,
            attempts=self.attempts,
        )

    @property
    def locked(self) -> bool:
        return self._fd is not None

    def fileno(self) -> int:
        if self._fd is None:
            raise ValueError(f"Lock {self.path} has been released")
        return self._fd

    def close(self) -> None:
        """Release the lock: close the handle and delete the file. Idempotent."""
        fd, self._fd = self._fd, None
        if fd is None:
            return
        try:
            os.close(fd)
        finally:
            self.path.unlink(missing_ok=True)
            logger.debug("Released lock %s", self.path)

    release = close

    def __enter__(self) -> "LockFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "locked" if self.locked else "released"
        return f"<LockFile {self.path} {state}>"


def _lock_metadata() -> str:
    return f"pid={os.getpid()}\ncreated={time.time():.6f}\n"


@contextmanager
def acquire_lock_file(
    path: PathLike,
    timeout: Optional[float] = None,
    *,
    growth_limit: Optional[int] = None,
    initial_delay: Optional[float] = None,
    multiplier: Optional[float] = None,
) -> Iterator[LockFile]:
    """Hold a ``LockFile`` on ``path`` for the duration of the ``with`` block.

    Example:
        >>> with acquire_lock_file("/tmp/build.lock", timeout=5.0):
        ...     run_build()
    """
    lock = LockFile(
        path,
        timeout=timeout,
        growth_limit=growth_limit,
        initial_delay=initial_delay,
        multiplier=multiplier,
    )
    try:
        yield lock
    finally:
        lock.close()


def is_locked(path: PathLike) -> bool:
    """Return True when a lock file currently exists at ``path``."""
    return Path(path).exists()


__all__ = ["LockFile", "acquire_lock_file", "is_locked", "retry_delays"]
