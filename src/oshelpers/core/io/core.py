"""Small path helpers shared by the I/O modules."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from oshelpers.core.exceptions import InvalidArgumentError

PathLike = Union[str, "os.PathLike[str]"]


def ensure_directory(path: PathLike, create: bool = True) -> Path:
    """Ensure directory exists.

    Args:
        path: Directory path to check/create
        create: If True, create directory if missing; if False, raise if missing

    Returns:
        Path: The directory path (guaranteed to exist if create=True)

    Raises:
        FileNotFoundError: If create=False and directory doesn't exist
        NotADirectoryError: If path exists but is not a directory
    """
    path = Path(path)

    if path.exists():
        if not path.is_dir():
            raise NotADirectoryError(f"Path exists but is not a directory: {path}")
        return path

    if create:
        path.mkdir(parents=True, exist_ok=True)
        return path
    raise FileNotFoundError(f"Directory does not exist: {path}")


def reject_parent_refs(name: str, value: str) -> None:
    """Raise when ``value`` contains a ``..`` component marker."""
    if ".." in value:
        raise InvalidArgumentError(f"{name} must not contain '..': {value!r}", context={name: value})


def is_within(root: Path, candidate: Path) -> bool:
    """True when ``candidate`` resolves to ``root`` or somewhere below it."""
    root_resolved = root.resolve()
    try:
        candidate.resolve().relative_to(root_resolved)
    except ValueError:
        return False
    return True


__all__ = ["PathLike", "ensure_directory", "reject_parent_refs", "is_within"]
