"""Console output helpers."""
from __future__ import annotations

import sys
from typing import Iterable, Optional, TextIO


def write_all_lines(lines: Iterable[str], stream: Optional[TextIO] = None) -> None:
    """Write each string followed by a newline to ``stream`` (default: current ``sys.stdout``)."""
    out = stream if stream is not None else sys.stdout
    for line in lines:
        out.write(f"{line}\n")


__all__ = ["write_all_lines"]
