import builtins
import sys
from typing import Callable, Optional


class BasicIO:
    """Line based host I/O used by DISPLAY and SCAN.

    The reader, writer and error writer can be swapped out so a caller can
    capture output or feed canned input. By default lines go to stdout,
    errors to stderr and input comes from `input()`.
    """
    def __init__(self,
                 reader: Optional[Callable[[], str]] = None,
                 writer: Optional[Callable[[str], None]] = None,
                 error_writer: Optional[Callable[[str], None]] = None):
        self.reader = reader
        self.writer = writer
        self.error_writer = error_writer

    def write_line(self, text: str) -> None:
        if self.writer is not None:
            self.writer(text)
        else:
            print(text)

    def read_line(self) -> str:
        if self.reader is not None:
            return self.reader()
        try:
            return builtins.input()
        except EOFError:
            return ''

    def write_error(self, text: str) -> None:
        if self.error_writer is not None:
            self.error_writer(text)
        else:
            print(text, file=sys.stderr)
