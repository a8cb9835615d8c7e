from typing import Dict, Optional

from codelang.types import Value


class Environment:
    """Represents a scope mapping identifiers to values, linked to its outer scope.

    A binding may hold `None`, the placeholder a function parameter gets when
    the caller passed fewer arguments than the function declares. Lookup
    treats such a binding as absent and keeps searching outward.
    """
    def __init__(self, outer: Optional['Environment'] = None):
        self.outer = outer
        self.store: Dict[str, Optional[Value]] = {}

    def get(self, name: str) -> Optional[Value]:
        value = self.store.get(name)
        if value is not None:
            return value
        if self.outer is not None:
            return self.outer.get(name)
        return None

    def set(self, name: str, value: Optional[Value]) -> Optional[Value]:
        # Always binds in this scope, shadowing any outer binding of `name`.
        self.store[name] = value
        return value

    def global_env(self) -> 'Environment':
        env = self
        while env.outer is not None:
            env = env.outer
        return env

    def __repr__(self) -> str:
        names = ', '.join(sorted(self.store))
        return f"<Environment [{names}]{' ->' if self.outer else ''}>"


def new_enclosed_environment(outer: Environment) -> Environment:
    return Environment(outer)
