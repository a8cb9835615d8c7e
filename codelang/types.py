"""Runtime values for the CODE interpreter.

Every value the evaluator produces is one of the classes below. Each value
knows its type name (used in error messages), a human readable rendering
(`inspect`) used by DISPLAY and the REPL, and a debug rendering (`__str__`).

`TRUE`, `FALSE` and `NULL` are shared module level instances; the evaluator
compares against them by identity.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .ast import BlockStatement, Identifier
    from .environment import Environment

INTEGER = 'INTEGER'
FLOAT = 'FLOAT'
BOOLEAN = 'BOOLEAN'
STRING = 'STRING'
CHARACTER = 'CHARACTER'
NULL_TYPE = 'NULL'
ERROR = 'ERROR'
RETURN_VALUE = 'RETURN_VALUE'
FUNCTION = 'FUNCTION'
BUILTIN = 'BUILTIN'
HASH = 'HASH'
COMMENT = 'COMMENT'
NEWLINE = 'NEWLINE'

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def wrap_int64(n: int) -> int:
    """Wrap an arbitrary Python int into the signed 64-bit range."""
    n &= (1 << 64) - 1
    return n - (1 << 64) if n > INT64_MAX else n


def string_hash(s: str) -> int:
    """32-bit `31 * h + c` string hash."""
    h = 0
    for c in s:
        h = (31 * h + ord(c)) & 0xFFFFFFFF
    return h - (1 << 32) if h & 0x80000000 else h


def format_float(x: float) -> str:
    """Shortest text for a float; integral values print without a fraction."""
    if math.isnan(x):
        return 'NaN'
    if math.isinf(x):
        return 'Infinity' if x > 0 else '-Infinity'
    if x.is_integer() and abs(x) < 1e21:
        return str(int(x))
    return repr(x)


def format_fixed(x: float, digits: int = 1) -> str:
    """Fixed point text with ties rounded away from zero."""
    if not math.isfinite(x) or abs(x) >= 1e21:
        return format_float(x)
    if x == 0:
        x = 0.0  # no "-0.0" for a zero input
    return str(Decimal(x).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class HashKey:
    type: str
    value: int


class Value:
    """Base class for runtime values."""
    type_name = ''

    def inspect(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.inspect()


@dataclass(eq=False)
class IntegerVal(Value):
    value: int
    type_name = INTEGER

    def inspect(self) -> str:
        return str(self.value)

    def hash_key(self) -> HashKey:
        return HashKey(self.type_name, self.value)


@dataclass(eq=False)
class FloatVal(Value):
    value: float
    type_name = FLOAT

    def inspect(self) -> str:
        return format_float(self.value)


@dataclass(eq=False)
class BooleanVal(Value):
    value: bool
    type_name = BOOLEAN

    def inspect(self) -> str:
        return 'TRUE' if self.value else 'FALSE'

    def hash_key(self) -> HashKey:
        return HashKey(self.type_name, 1 if self.value else 0)


@dataclass(eq=False)
class StringVal(Value):
    value: str
    type_name = STRING

    def inspect(self) -> str:
        return self.value

    def __str__(self) -> str:
        return f'"{self.value}"'

    def hash_key(self) -> HashKey:
        return HashKey(self.type_name, string_hash(self.value))


@dataclass(eq=False)
class CharVal(Value):
    value: str
    type_name = CHARACTER

    def inspect(self) -> str:
        return self.value

    def __str__(self) -> str:
        return ''

    def hash_key(self) -> HashKey:
        return HashKey(self.type_name, string_hash(self.value))


class NullVal(Value):
    type_name = NULL_TYPE

    def inspect(self) -> str:
        return ''

    def __str__(self) -> str:
        return 'null'

    def __repr__(self) -> str:
        return 'NULL'


@dataclass(eq=False)
class ErrorVal(Value):
    """A runtime error. Errors are values: they propagate, they are not raised."""
    message: str
    type_name = ERROR

    def inspect(self) -> str:
        return f"Error: {self.message}"

    def __str__(self) -> str:
        return f'"Error: {self.message}"'


@dataclass(eq=False)
class ReturnVal(Value):
    """Wraps the value of a RETURN until the enclosing call unwraps it."""
    value: Value
    type_name = RETURN_VALUE

    def inspect(self) -> str:
        return self.value.inspect()


@dataclass(eq=False)
class FunctionVal(Value):
    """A user function closed over the environment it was defined in."""
    parameters: List['Identifier']
    body: 'BlockStatement'
    env: 'Environment' = field(repr=False)
    type_name = FUNCTION

    def inspect(self) -> str:
        return 'function'

    def describe(self) -> str:
        params = ', '.join(str(p) for p in self.parameters)
        return f"function({params}) {{\n  {self.body}\n}}"


@dataclass(eq=False)
class HashPair:
    key: Value
    value: Value


@dataclass(eq=False)
class HashVal(Value):
    pairs: Dict[HashKey, HashPair] = field(default_factory=dict)
    type_name = HASH

    def inspect(self) -> str:
        parts = [f"{p.key.inspect()}:{p.value.inspect()}" for p in self.pairs.values()]
        return '{' + ', '.join(parts) + '}'

    def __str__(self) -> str:
        parts = [f"{p.key}: {p.value}" for p in self.pairs.values()]
        return '{' + ', '.join(parts) + '}'


@dataclass(eq=False)
class CommentVal(Value):
    message: str
    type_name = COMMENT

    def inspect(self) -> str:
        return f"# {self.message}"

    def __str__(self) -> str:
        return ''

    def hash_key(self) -> HashKey:
        return HashKey(self.type_name, string_hash(self.message))


@dataclass(eq=False)
class NewLineVal(Value):
    value: str = '\n'
    type_name = NEWLINE

    def inspect(self) -> str:
        return self.value

    def __str__(self) -> str:
        return ''

    def hash_key(self) -> HashKey:
        return HashKey(self.type_name, string_hash(self.value))


TRUE = BooleanVal(True)
FALSE = BooleanVal(False)
NULL = NullVal()


def native_bool(value: bool) -> BooleanVal:
    return TRUE if value else FALSE


def is_hashable(value: Optional[Value]) -> bool:
    return hasattr(value, 'hash_key')


def is_error(value: Any) -> bool:
    return isinstance(value, ErrorVal)


def type_name(value: Optional[Value]) -> str:
    """Return the CODE type name of a runtime value."""
    if value is None:
        return NULL_TYPE
    return value.type_name
