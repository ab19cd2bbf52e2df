"""
oshelpers - operating-system utility helpers

Console output capture, inter-process lock files, temporary files and
directories, file enumeration, numbered files and interactive prompts.
"""

__version__ = "1.0.0"

from oshelpers.core.exceptions import (
    CaptureTimeoutError,
    ConfigError,
    InvalidArgumentError,
    InvalidPatternError,
    LockTimeoutError,
    OSHelpersError,
)
from oshelpers.core.io import (
    Directories,
    FileSearch,
    Interactive,
    LockFile,
    OutputCapture,
    TempDirectory,
    TempFile,
    acquire_lock_file,
    capture_output,
    create_numbered_file,
    highest_n,
)

__all__ = [
    "__version__",
    "OSHelpersError",
    "LockTimeoutError",
    "CaptureTimeoutError",
    "InvalidArgumentError",
    "InvalidPatternError",
    "ConfigError",
    "OutputCapture",
    "capture_output",
    "LockFile",
    "acquire_lock_file",
    "TempFile",
    "TempDirectory",
    "FileSearch",
    "Directories",
    "create_numbered_file",
    "highest_n",
    "Interactive",
]
