"""Builtin function registry.

Identifiers that are not bound in any scope are looked up here by exact
name. Every builtin is called as `fn(env, *args)` and reports misuse by
returning an error value rather than raising.
"""

from typing import Callable, Dict, List, Optional, Sequence, Tuple, Type

from codelang.builtin_function import BuiltinFunction
from codelang.types import ErrorVal, Value, type_name


class BuiltinRegistry:
    def __init__(self):
        self._builtins: Dict[str, BuiltinFunction] = {}

    def register(self, name: str, fn: Callable[..., Value]) -> BuiltinFunction:
        builtin = BuiltinFunction(name, fn)
        self._builtins[name] = builtin
        return builtin

    def lookup(self, name: str) -> Optional[BuiltinFunction]:
        return self._builtins.get(name)

    def names(self) -> List[str]:
        return sorted(self._builtins)

    def __contains__(self, name: str) -> bool:
        return name in self._builtins


def wrong_arg_count(got: int, want: int) -> ErrorVal:
    return ErrorVal(f"wrong number of arguments. got={got}, want={want}")


def unsupported(name: str, arg: Value) -> ErrorVal:
    return ErrorVal(f"argument to `{name}` not supported, got {type_name(arg)}")


def check_args(name: str, args: Sequence[Value],
               *kinds: Tuple[Type[Value], ...]) -> Optional[ErrorVal]:
    """Check arity and argument types; `kinds` holds one tuple of classes per argument."""
    if len(args) != len(kinds):
        return wrong_arg_count(len(args), len(kinds))
    for arg, allowed in zip(args, kinds):
        if not isinstance(arg, allowed):
            return unsupported(name, arg)
    return None


def default_registry(io=None) -> BuiltinRegistry:
    """Registry holding the core, string and math builtins.

    `print` writes its line through `io`, the same BasicIO DISPLAY uses.
    """
    from .core import populate_core
    from .maths import populate_maths
    from .strings import populate_strings

    registry = BuiltinRegistry()
    populate_core(registry, io)
    populate_strings(registry)
    populate_maths(registry)
    return registry
