"""Self-deleting temporary files and directories.

Names are ``prefix + uuid4`` (plus extension for files) inside the
configured temp directory (``temp.directory``, falling back to
``tempfile.gettempdir()``). Files are created exclusively so two callers can
never share one.

Both classes are context managers; ``close()`` removes what was created and
is idempotent. Nothing is removed by garbage collection: an object that is
never closed leaves its file or directory in place.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import IO, Any, Optional

from oshelpers.core.config import get_temp_settings
from oshelpers.core.exceptions import InvalidArgumentError

from .core import PathLike, ensure_directory, is_within, reject_parent_refs

logger = logging.getLogger(__name__)

_CREATE_FLAGS = os.O_RDWR | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)


def default_temp_dir() -> Path:
    """Configured temp root, or the platform default."""
    configured = get_temp_settings().directory
    if configured is not None:
        return ensure_directory(configured)
    return Path(tempfile.gettempdir())


def _file_name(prefix: str, extension: str) -> str:
    name = f"{prefix}{uuid.uuid4()}"
    if extension:
        if not extension.startswith("."):
            name += "."
        name += extension
    return name


class TempFile:
    """A uniquely named file that is deleted on ``close()``.

    Args:
        prefix: Text placed before the generated uuid.
        extension: File extension, with or without the leading dot.
        directory: Where to create the file (default: configured temp dir).
        mode: ``open()`` mode for the returned stream; the file itself is
            always created exclusively.
        encoding: Text encoding for text modes.
    """

    def __init__(
        self,
        prefix: str = "",
        extension: str = "",
        directory: Optional[PathLike] = None,
        mode: str = "w+b",
        encoding: Optional[str] = None,
    ) -> None:
        if prefix is None or extension is None:
            raise InvalidArgumentError("prefix and extension must not be None")
        reject_parent_refs("prefix", prefix)
        reject_parent_refs("extension", extension)

        root = Path(directory) if directory is not None else default_temp_dir()
        while True:
            candidate = root / _file_name(prefix, extension)
            try:
                fd = os.open(candidate, _CREATE_FLAGS, 0o600)
            except FileExistsError:
                continue
            break

        try:
            stream = os.fdopen(fd, mode, encoding=encoding)
        except BaseException:
            os.close(fd)
            candidate.unlink(missing_ok=True)
            raise
        self._init(candidate, stream)

    def _init(self, path: Path, stream: IO[Any]) -> None:
        self.path = path.absolute()
        self.file = stream
        self._closed = False
        logger.debug("Created temp file %s", self.path)

    @classmethod
    def at(cls, path: PathLike, mode: str = "w+b", encoding: Optional[str] = None) -> "TempFile":
        """Open ``path`` (created or truncated per ``mode``) and delete it on close."""
        if path is None or not os.fspath(path):
            raise InvalidArgumentError("path must not be empty")
        target = Path(path)
        stream = open(target, mode, encoding=encoding)
        instance = cls.__new__(cls)
        instance._init(target, stream)
        return instance

    @property
    def name(self) -> str:
        return str(self.path)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the stream and delete the file. Idempotent."""
        if self._closed:
            return
        self._closed = True
        try:
            self.file.close()
        finally:
            self.path.unlink(missing_ok=True)
            logger.debug("Removed temp file %s", self.path)

    def __enter__(self) -> "TempFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<TempFile {self.path}{' closed' if self._closed else ''}>"


class TempDirectory:
    """A uniquely named directory removed recursively on ``close()``.

    Args:
        *subdirs: Relative sub-directories to create inside the new directory.
        prefix: Text placed before the generated uuid.
        parent: Where to create the directory (default: configured temp dir).
    """

    def __init__(self, *subdirs: str, prefix: str = "", parent: Optional[PathLike] = None) -> None:
        if prefix is None:
            raise InvalidArgumentError("prefix must not be None")
        reject_parent_refs("prefix", prefix)

        root = Path(parent) if parent is not None else default_temp_dir()
        while True:
            candidate = root / f"{prefix}{uuid.uuid4()}"
            try:
                candidate.mkdir(parents=True)
            except FileExistsError:
                continue
            break

        self.path = candidate.absolute()
        self._closed = False
        self._create_subdirs(subdirs)
        logger.debug("Created temp directory %s", self.path)

    @classmethod
    def adopt(cls, path: PathLike, *subdirs: str) -> "TempDirectory":
        """Take ownership of ``path`` (created when missing); it is removed on close."""
        instance = cls.__new__(cls)
        instance.path = ensure_directory(path).absolute()
        instance._closed = False
        instance._create_subdirs(subdirs)
        return instance

    def _create_subdirs(self, subdirs: tuple[str, ...]) -> None:
        for sub in subdirs:
            target = self.path / sub
            if not is_within(self.path, target):
                raise InvalidArgumentError(
                    f"Sub-directory escapes {self.path}: {sub!r}", context={"subdir": sub}
                )
            target.mkdir(parents=True, exist_ok=True)

    @property
    def name(self) -> str:
        return str(self.path)

    @property
    def closed(self) -> bool:
        return self._closed

    def create_named_subdirectory(self, name: str) -> Path:
        if name is None:
            raise InvalidArgumentError("name must not be None")
        target = self.path / name
        if not is_within(self.path, target):
            raise InvalidArgumentError(f"Sub-directory escapes {self.path}: {name!r}")
        target.mkdir(parents=True, exist_ok=True)
        return target

    def create_subdirectory(self, prefix: str = "") -> Path:
        """Create a uniquely named (``prefix + uuid4``) sub-directory."""
        reject_parent_refs("prefix", prefix)
        target = self.path / f"{prefix}{uuid.uuid4()}"
        target.mkdir()
        return target

    @staticmethod
    def unique_temp_path(prefix: str = "") -> str:
        """Return an unused ``prefix + uuid4`` path in the temp dir without creating it."""
        return str(default_temp_dir() / f"{prefix}{uuid.uuid4()}")

    def delete_all_files(self) -> None:
        """Delete every file below the directory, keeping the directory tree.

        Every file is attempted; the first ``OSError`` is re-raised afterwards.
        """
        first_error: Optional[OSError] = None
        for dirpath, _dirnames, filenames in os.walk(self.path):
            for filename in filenames:
                try:
                    os.unlink(os.path.join(dirpath, filename))
                except OSError as exc:
                    if first_error is None:
                        first_error = exc
        if first_error is not None:
            raise first_error

    def close(self) -> None:
        """Remove the directory tree. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self.path.exists():
            shutil.rmtree(self.path)
            logger.debug("Removed temp directory %s", self.path)

    def __enter__(self) -> "TempDirectory":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<TempDirectory {self.path}{' closed' if self._closed else ''}>"


__all__ = ["TempFile", "TempDirectory", "default_temp_dir"]
