from __future__ import annotations

from typing import Any, Dict, Mapping


class OSHelpersError(Exception):
    """Base exception for oshelpers."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class LockTimeoutError(OSHelpersError, TimeoutError):
    """Raised when a lock file cannot be created before its deadline."""

    def __init__(
        self,
        message: str = "",
        *,
        path: str | None = None,
        timeout: float | None = None,
        attempts: int | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if path is not None:
            ctx.setdefault("path", path)
        if timeout is not None:
            ctx.setdefault("timeout_seconds", timeout)
        if attempts is not None:
            ctx.setdefault("attempts", attempts)
        OSHelpersError.__init__(self, message, context=ctx)
        TimeoutError.__init__(self, message)
        self.path = path
        self.timeout = timeout
        self.attempts = attempts


class CaptureTimeoutError(OSHelpersError, TimeoutError):
    """Raised when console output redirection is not granted within the wait budget."""

    def __init__(
        self,
        message: str = "",
        *,
        timeout: float | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if timeout is not None:
            ctx.setdefault("timeout_seconds", timeout)
        OSHelpersError.__init__(self, message, context=ctx)
        TimeoutError.__init__(self, message)
        self.timeout = timeout


class InvalidArgumentError(OSHelpersError, ValueError):
    """Raised when a caller supplies a malformed argument."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        OSHelpersError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class InvalidPatternError(InvalidArgumentError):
    """Raised when a numbered-file pattern cannot be parsed."""


class ConfigError(OSHelpersError, RuntimeError):
    """Raised when configuration cannot be loaded or fails validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        OSHelpersError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


__all__ = [
    "OSHelpersError",
    "LockTimeoutError",
    "CaptureTimeoutError",
    "InvalidArgumentError",
    "InvalidPatternError",
    "ConfigError",
]
