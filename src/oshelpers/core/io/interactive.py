"""Line-oriented console prompts."""
from __future__ import annotations

import sys
from typing import Optional, Sequence, TextIO

DEFAULT_YES: tuple[str, ...] = ("y", "yes")
DEFAULT_NO: tuple[str, ...] = ("n", "no")
DEFAULT_INVALID_RESPONSE = "Invalid response. Try again (Ctrl+C to exit)."


class Interactive:
    """Ask questions on a text stream pair.

    Streams left as ``None`` resolve to the *current* ``sys.stdin`` /
    ``sys.stdout`` at call time, so prompts written inside an
    ``OutputCapture`` land in its buffer.
    """

    def __init__(
        self,
        in_stream: Optional[TextIO] = None,
        out_stream: Optional[TextIO] = None,
        *,
        prompt_prefix: str = "",
        yes_no_postfix: str = " <y|n>? ",
        yes: Sequence[str] = DEFAULT_YES,
        no: Sequence[str] = DEFAULT_NO,
        invalid_response: str = DEFAULT_INVALID_RESPONSE,
    ) -> None:
        self._in = in_stream
        self._out = out_stream
        self.prompt_prefix = prompt_prefix
        self.yes_no_postfix = yes_no_postfix
        self.yes = tuple(yes)
        self.no = tuple(no)
        self.invalid_response = invalid_response

    @property
    def in_stream(self) -> TextIO:
        return self._in if self._in is not None else sys.stdin

    @property
    def out_stream(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def _read_line(self) -> Optional[str]:
        line = self.in_stream.readline()
        if line == "":
            return None
        return line.rstrip("\r\n")

    def get_string(self, question: str) -> str:
        """Write the prompt and return one line of input ("" at end of input)."""
        out = self.out_stream
        out.write(self.prompt_prefix + question)
        out.flush()
        line = self._read_line()
        return "" if line is None else line

    def get_yes_no(self, question: str, suppress_postfix: bool = False) -> bool:
        """Ask until the answer is one of ``yes`` or ``no``.

        Raises:
            EOFError: input ended before a valid answer was given.
        """
        prompt = question if suppress_postfix else question + self.yes_no_postfix
        while True:
            out = self.out_stream
            out.write(self.prompt_prefix + prompt)
            out.flush()
            response = self._read_line()
            if response is None:
                raise EOFError("Input ended before a yes/no answer was given")
            if response in self.yes:
                return True
            if response in self.no:
                return False
            out.write(self.invalid_response + "\n")


__all__ = ["Interactive", "DEFAULT_YES", "DEFAULT_NO", "DEFAULT_INVALID_RESPONSE"]
