"""File and directory enumeration by shell-style glob patterns.

Patterns use ``fnmatch`` syntax (``*``, ``?``, ``[seq]``) and are matched
against entry names, not full paths.
"""
from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from oshelpers.core.exceptions import InvalidArgumentError

from .core import PathLike


def _iter_matching_files(directory: PathLike, pattern: str, recursive: bool) -> Iterator[str]:
    root = os.fspath(directory)
    if not os.path.isdir(root):
        raise FileNotFoundError(f"Directory does not exist: {root}")
    if recursive:
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            for name in sorted(fnmatch.filter(filenames, pattern)):
                yield os.path.join(dirpath, name)
        return
    with os.scandir(root) as entries:
        names = sorted(e.name for e in entries if e.is_file() and fnmatch.fnmatch(e.name, pattern))
    for name in names:
        yield os.path.join(root, name)


class FileSearch:
    """Enumerate files matching any of ``patterns`` in a set of directories.

    Args:
        *patterns: Glob patterns; ``"*"`` when none are given.
        recursive: Also search sub-directories.
    """

    def __init__(self, *patterns: str, recursive: bool = False) -> None:
        self.patterns: tuple[str, ...] = patterns or ("*",)
        self.recursive = recursive

    def get_files(self, *dirs: PathLike) -> Iterator[str]:
        """Yield matching file paths, directory by directory then pattern by pattern.

        With no ``dirs`` the current working directory is searched.
        """
        return self.get_files_in(dirs or (os.getcwd(),))

    def get_files_in(self, dirs: Iterable[Optional[PathLike]]) -> Iterator[str]:
        if dirs is None:
            raise InvalidArgumentError("dirs must not be None")
        for directory in dirs:
            if directory is None:
                raise InvalidArgumentError("directory must not be None")
            for pattern in self.patterns:
                yield from _iter_matching_files(directory, pattern, self.recursive)

    def __repr__(self) -> str:
        return f"FileSearch(patterns={list(self.patterns)!r}, recursive={self.recursive})"


class Directories:
    """Enumerate directories below a set of roots.

    Args:
        *roots: Root directories; ``"."`` when none are given.
        recursive: When True, ``get_directories`` walks every descendant of
            each root; when False it yields the roots themselves.
        exclusions: Directories to skip (compared as absolute paths).
    """

    def __init__(
        self,
        *roots: PathLike,
        recursive: bool = True,
        exclusions: Optional[Iterable[PathLike]] = None,
    ) -> None:
        self.roots: Sequence[PathLike] = roots or (".",)
        self.recursive = recursive
        self.exclusions: Optional[set[str]] = (
            {os.path.abspath(os.fspath(p)) for p in exclusions} if exclusions is not None else None
        )

    def get_directories(self, pattern: str = "*") -> Iterator[str]:
        for root in self.roots:
            for directory in self._iter_root(root, pattern):
                if self.exclusions is not None and directory in self.exclusions:
                    continue
                yield directory

    def _iter_root(self, root: PathLike, pattern: str) -> Iterator[str]:
        base = os.path.abspath(os.fspath(root))
        if not self.recursive:
            yield base
            return
        if not os.path.isdir(base):
            raise FileNotFoundError(f"Directory does not exist: {base}")
        for dirpath, dirnames, _filenames in os.walk(base):
            dirnames.sort()
            for name in dirnames:
                if fnmatch.fnmatch(name, pattern):
                    yield os.path.join(dirpath, name)

    def __iter__(self) -> Iterator[Path]:
        return (Path(d) for d in self.get_directories())


__all__ = ["FileSearch", "Directories"]
