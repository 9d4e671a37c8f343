from __future__ import annotations

from typing import Dict, Iterator, Optional

from .objects import Object

class Environment:
    """A lexical scope: local bindings plus an optional enclosing scope.

    Functions hold a reference to the environment they were defined in, so a
    call scope stays alive exactly as long as some closure can still reach it.
    """

    def __init__(self, outer: Optional['Environment']=None):
        self.outer = outer
        self.store: Dict[str, Object] = {}

    def get(self, name: str) -> Optional[Object]:
        if name in self.store:
            return self.store[name]

        if self.outer is not None:
            return self.outer.get(name)

        return None

    def set(self, name: str, val: Object) -> Object:
        # `let` always binds in the innermost scope, shadowing outer names.
        self.store[name] = val
        return val

    def new_child(self) -> 'Environment':
        return Environment(outer=self)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.store)
