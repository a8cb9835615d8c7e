from dataclasses import dataclass
from typing import Callable

from codelang.types import BUILTIN, Value


@dataclass(eq=False)
class BuiltinFunction(Value):
    """A native function callable from CODE as `fn(env, *args)`."""
    name: str
    fn: Callable[..., Value]
    type_name = BUILTIN

    def inspect(self) -> str:
        return 'builtin function'

    def __str__(self) -> str:
        return '"builtin function"'

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
