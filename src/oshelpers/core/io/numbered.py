"""Create files with an auto-incremented integer in their name."""
from __future__ import annotations

import logging
import os
from typing import IO, Any, Optional

from oshelpers.core.exceptions import InvalidArgumentError

from .core import PathLike

logger = logging.getLogger(__name__)


def numbered_path(
    path: Optional[PathLike],
    name: Optional[str],
    sep: Optional[str],
    number: int,
    ext: Optional[str],
) -> str:
    """Build ``join(path, name) + sep + number [+ "." + ext]``."""
    result = os.path.join(os.fspath(path) if path is not None else "", name or "")
    result += f"{sep or ''}{number}"
    if ext:
        result += ext if ext.startswith(".") else f".{ext}"
    return result


def create_numbered_file(
    path: Optional[PathLike] = None,
    name: Optional[str] = None,
    ext: Optional[str] = None,
    sep: Optional[str] = None,
    floor: int = 1,
    mode: str = "x+b",
    encoding: Optional[str] = None,
) -> IO[Any]:
    """Create the first free ``name<sep>N.ext`` with ``N >= floor`` and return it open.

    ``mode`` must be an exclusive-creation mode (contain ``"x"``), so
    concurrent callers always get distinct files. Errors other than the name
    being taken propagate.

    Example:
        >>> with create_numbered_file("out", "report", "txt", "-") as fh:
        ...     fh.name
        'out/report-1.txt'
    """
    if "x" not in mode:
        raise InvalidArgumentError(f"mode must create exclusively ('x'), got {mode!r}")

    number = floor
    while True:
        candidate = numbered_path(path, name, sep, number, ext)
        try:
            fh = open(candidate, mode, encoding=encoding)
        except FileExistsError:
            number += 1
            continue
        logger.debug("Created numbered file %s", candidate)
        return fh


__all__ = ["create_numbered_file", "numbered_path"]
