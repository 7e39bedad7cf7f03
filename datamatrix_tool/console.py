"""Operator interaction: key reads, pauses, confirmation and aborting."""

from __future__ import annotations

import os
import sys
from typing import NoReturn, Optional, TextIO

EXIT_OK = 0
EXIT_FAILURE = -1

PAUSE_PROMPT = "Press any key to continue . . ."


class Console:
    """
    Console used by the pipelines for everything that needs the operator.

    Tests pass ``io.StringIO`` streams; a real terminal gets raw single-key
    reads.
    """

    def __init__(
        self,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        pause_enabled: bool = True,
    ) -> None:
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.pause_enabled = pause_enabled

    def print(self, *args, **kwargs) -> None:
        kwargs.setdefault("file", self.stdout)
        print(*args, **kwargs)

    def read_key(self) -> str:
        """One keystroke from a terminal, one character from anything else."""
        stream = self.stdin
        if not stream.isatty():
            return stream.read(1)

        if os.name == "nt":
            import msvcrt

            return msvcrt.getwch()

        import termios
        import tty

        fd = stream.fileno()
        saved = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            return stream.read(1)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)

    def pause(self) -> None:
        if self.pause_enabled:
            self.stdout.flush()
            self.read_key()

    def confirm(self, question: str) -> bool:
        """Ask a y/[n] question; only ``y`` or ``Y`` counts as yes."""
        self.print(question, flush=True)
        return self.read_key().lower() == "y"

    def abort(self, template: str, *args) -> NoReturn:
        """Report a failure, wait for a key and exit with status -1."""
        self.print(template.format(*args))
        if self.pause_enabled:
            self.print(PAUSE_PROMPT)
            self.pause()
        sys.exit(EXIT_FAILURE)
