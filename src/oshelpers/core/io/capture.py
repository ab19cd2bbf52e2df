"""Re-entrant, thread-safe capture of ``sys.stdout``.

``OutputCapture`` swaps the process-wide ``sys.stdout`` for a private
``io.StringIO`` buffer for the lifetime of the instance:

- Unrelated threads are serialized on a process-wide mutex; a waiter gives up
  with ``CaptureTimeoutError`` once its timeout elapses.
- The thread that already owns the redirection may nest further captures
  without blocking; each nested instance stacks a new buffer in front of the
  previous target and restores it on close.

Instances must be closed in LIFO order, normally via ``with``. There is no
finalizer fallback: an instance that is never closed keeps the mutex, and
other threads wait or time out.

Example:
    >>> with OutputCapture() as outer:
    ...     print("outer")
    ...     with OutputCapture() as inner:
    ...         print("inner")
    >>> outer.captured_output, inner.captured_output
    ('outer\\n', 'inner\\n')
"""
from __future__ import annotations

import io
import logging
import sys
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO

from oshelpers.core.config import get_output_capture_settings
from oshelpers.core.exceptions import CaptureTimeoutError

logger = logging.getLogger(__name__)


class _CaptureState:
    """Process-wide redirection bookkeeping.

    ``guard`` protects ``owner`` and ``depth`` and is only held briefly;
    ``mutex`` is held by the owning thread for the whole outermost capture.
    """

    def __init__(self) -> None:
        self.guard = threading.Lock()
        self.mutex = threading.Lock()
        self.owner: Optional[int] = None
        self.depth = 0
        # Bumped on every outermost acquisition; nested captures remember it.
        self.generation = 0


_STATE: Optional[_CaptureState] = None
_STATE_INIT = threading.Lock()


def _shared_state() -> _CaptureState:
    """Return the singleton state, creating it on first use (never torn down)."""
    global _STATE
    if _STATE is None:
        with _STATE_INIT:
            if _STATE is None:
                _STATE = _CaptureState()
    return _STATE


class OutputCapture:
    """Redirect ``sys.stdout`` into an in-memory buffer until closed.

    Args:
        timeout: Seconds to wait for another thread's capture to finish.
            ``None`` uses ``output_capture.timeout_seconds`` from configuration
            (``null`` there means wait forever); a negative value waits forever.

    Raises:
        CaptureTimeoutError: The redirection was not granted within ``timeout``.
            Nothing was redirected and there is nothing to close.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._buffer = io.StringIO()
        self._previous: Optional[TextIO] = None
        self._outermost = False
        self._generation = -1
        self._closed = False

        state = _shared_state()
        me = threading.get_ident()

        with state.guard:
            if state.owner == me:
                state.depth += 1
                self._generation = state.generation
                self._redirect()
                logger.debug("Nested output capture (depth=%d)", state.depth)
                return

        if timeout is None:
            timeout = get_output_capture_settings().timeout_seconds
        wait = -1 if timeout is None or timeout < 0 else timeout
        if not state.mutex.acquire(timeout=wait):
            raise CaptureTimeoutError(
                f"Timed out after {timeout}s waiting for console output redirection",
                timeout=timeout,
            )

        with state.guard:
            state.owner = me
            state.generation += 1
            self._generation = state.generation
            self._outermost = True
            self._redirect()
        logger.debug("Output capture acquired by thread %d", me)

    def _redirect(self) -> None:
        # Caller holds state.guard.
        self._previous = sys.stdout
        sys.stdout = self._buffer

    @property
    def captured_output(self) -> str:
        """Everything written while this capture was the active target."""
        return self._buffer.getvalue()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_outermost(self) -> bool:
        """True when this instance holds the cross-thread mutex."""
        return self._outermost

    def close(self) -> None:
        """Restore the previous stdout target. Safe to call more than once.

        A nested capture whose outermost capture has already been closed
        (or that is closed from a thread other than the owner) leaves
        ``sys.stdout`` untouched: the redirection may belong to another
        thread by now.
        """
        state = _shared_state()
        with state.guard:
            if self._closed:
                return
            self._closed = True

            if self._outermost:
                if state.depth:
                    logger.warning(
                        "Outermost OutputCapture closed with %d nested capture(s) still open",
                        state.depth,
                    )
                    state.depth = 0
                elif sys.stdout is not self._buffer:
                    logger.warning(
                        "OutputCapture closed out of order; restoring its previous target anyway"
                    )
                # _previous is the stream that was active before any capture
                # of this generation, so nested leftovers are dropped too.
                sys.stdout = self._previous
                state.owner = None
                state.mutex.release()
                logger.debug("Output capture released")
                return

            current = (
                self._generation == state.generation
                and state.owner == threading.get_ident()
            )
            if not current:
                logger.warning(
                    "Nested OutputCapture closed after its owner released the redirection; "
                    "leaving sys.stdout unchanged"
                )
                return

            if sys.stdout is not self._buffer:
                logger.warning(
                    "OutputCapture closed out of order; restoring its previous target anyway"
                )
            sys.stdout = self._previous
            if state.depth > 0:
                state.depth -= 1

    def __enter__(self) -> "OutputCapture":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        status = "closed" if self._closed else "open"
        kind = "outermost" if self._outermost else "nested"
        return f"<OutputCapture {kind} {status} chars={len(self.captured_output)}>"


@contextmanager
def capture_output(timeout: Optional[float] = None) -> Iterator[OutputCapture]:
    """Capture ``sys.stdout`` for the duration of the ``with`` block."""
    capture = OutputCapture(timeout)
    try:
        yield capture
    finally:
        capture.close()


__all__ = ["OutputCapture", "capture_output"]
