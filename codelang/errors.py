from typing import List

from codelang.token import Position
from codelang.types import ErrorVal


class LexError(Exception):
    """Raised by the lexer for malformed character literals."""
    def __init__(self, message: str, position: Position):
        super().__init__(f"{message} at {position}")
        self.message = message
        self.position = position


class ParseError(Exception):
    """Raised at the API boundary when a program has parser diagnostics."""
    def __init__(self, errors: List[str]):
        super().__init__('\n'.join(errors))
        self.errors = list(errors)


class CodeError(Exception):
    """Exception type used to surface a CODE runtime error to the host."""
    def __init__(self, err: ErrorVal):
        super().__init__(err.message)
        self.err = err
