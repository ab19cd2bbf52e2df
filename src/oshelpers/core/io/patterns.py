"""Numbered file name patterns: ``prefix{n}postfix``.

``highest_n("logs/run-{n}.txt")`` returns the highest ``N`` among existing
files named ``run-N.txt`` in ``logs/``, or ``-1`` when there are none.
"""
from __future__ import annotations

import os
from typing import Optional

from oshelpers.core.exceptions import InvalidPatternError

from .core import PathLike

INVALID_SPECIFIER_MSG = "Invalid specifier."
MISSING_SPECIFIER_MSG = "Missing specifier."
MALFORMED_SPECIFIER_MSG = "Malformed specifier"


def split_pattern(pattern: str) -> tuple[str, str, str]:
    """Split ``prefix{specifier}postfix`` into its three parts.

    Raises:
        InvalidPatternError: empty pattern, no ``{``, or no ``}`` after a
            non-empty specifier.
    """
    if not pattern:
        raise InvalidPatternError("Pattern must not be empty", context={"pattern": pattern})

    open_idx = pattern.find("{")
    if open_idx == -1:
        raise InvalidPatternError(MISSING_SPECIFIER_MSG, context={"pattern": pattern})

    close_idx = pattern.find("}")
    if close_idx <= open_idx + 1:
        raise InvalidPatternError(MALFORMED_SPECIFIER_MSG, context={"pattern": pattern})

    return pattern[:open_idx], pattern[open_idx + 1:close_idx], pattern[close_idx + 1:]


def split_path_from_file_name_prefix(prefix: str) -> tuple[str, str]:
    """Split ``dir/name-prefix`` into ``(absolute dir, name prefix)``.

    Without a separator the directory is ``"."``.
    """
    seps = [s for s in (os.sep, os.altsep, "/") if s]
    idx = max(prefix.rfind(s) for s in seps)
    if idx == -1:
        return ".", prefix
    directory = os.path.abspath(prefix[: idx + 1] or os.sep)
    return directory, prefix[idx + 1:]


def highest_n_in(path: PathLike, file_name_prefix: str, postfix: str) -> int:
    """Highest ``N`` for files named ``file_name_prefix + N + postfix`` in ``path``.

    Names whose middle part is empty or not all ASCII digits are ignored.
    """
    highest = -1
    min_len = len(file_name_prefix) + len(postfix)
    with os.scandir(os.fspath(path) or ".") as entries:
        for entry in entries:
            name = entry.name
            if len(name) <= min_len or not entry.is_file():
                continue
            if not (name.startswith(file_name_prefix) and name.endswith(postfix)):
                continue
            middle = name[len(file_name_prefix): len(name) - len(postfix)]
            if middle.isascii() and middle.isdigit():
                highest = max(highest, int(middle))
    return highest


def highest_n_between(prefix: Optional[str], postfix: Optional[str]) -> int:
    """Like ``highest_n_in`` with the directory taken from ``prefix``."""
    path, file_name_prefix = split_path_from_file_name_prefix(prefix or "")
    return highest_n_in(path, file_name_prefix, postfix or "")


def highest_n(pattern: str) -> int:
    """Evaluate a ``prefix{n}postfix`` pattern. Only the ``n`` specifier is supported."""
    prefix, specifier, postfix = split_pattern(pattern)
    if specifier != "n":
        raise InvalidPatternError(
            INVALID_SPECIFIER_MSG, context={"pattern": pattern, "specifier": specifier}
        )
    return highest_n_between(prefix, postfix)


__all__ = [
    "INVALID_SPECIFIER_MSG",
    "MISSING_SPECIFIER_MSG",
    "MALFORMED_SPECIFIER_MSG",
    "split_pattern",
    "split_path_from_file_name_prefix",
    "highest_n",
    "highest_n_between",
    "highest_n_in",
]
