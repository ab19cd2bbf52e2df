"""I/O helpers for oshelpers.

- Capture: re-entrant, thread-safe ``sys.stdout`` redirection
- Locking: lock files with exponential backoff, stale lock cleanup
- Temp: self-deleting temporary files and directories
- Search: file and directory enumeration by glob
- Numbered files: ``prefix{n}postfix`` patterns and auto-numbered creation
- Interactive: yes/no and free-text prompts
"""
from __future__ import annotations

from .capture import OutputCapture, capture_output
from .console import write_all_lines
from .core import PathLike, ensure_directory
from .interactive import Interactive
from .locking import LockFile, acquire_lock_file, is_locked, retry_delays
from .numbered import create_numbered_file, numbered_path
from .patterns import (
    INVALID_SPECIFIER_MSG,
    highest_n,
    highest_n_between,
    highest_n_in,
    split_path_from_file_name_prefix,
    split_pattern,
)
from .search import Directories, FileSearch
from .stale_locks import LockOwner, StaleLock, cleanup_stale_locks, find_stale_locks, read_lock_owner
from .temp import TempDirectory, TempFile, default_temp_dir

__all__ = [
    # core
    "PathLike",
    "ensure_directory",
    # capture
    "OutputCapture",
    "capture_output",
    "write_all_lines",
    # locking
    "LockFile",
    "acquire_lock_file",
    "is_locked",
    "retry_delays",
    "LockOwner",
    "StaleLock",
    "cleanup_stale_locks",
    "find_stale_locks",
    "read_lock_owner",
    # temp
    "TempFile",
    "TempDirectory",
    "default_temp_dir",
    # search
    "FileSearch",
    "Directories",
    # numbered
    "INVALID_SPECIFIER_MSG",
    "create_numbered_file",
    "numbered_path",
    "highest_n",
    "highest_n_between",
    "highest_n_in",
    "split_pattern",
    "split_path_from_file_name_prefix",
    # interactive
    "Interactive",
]
